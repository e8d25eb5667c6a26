"""
Event records and their persistence.

``persistence.parquet`` pulls in pandas and is imported only when an event
log is requested.
"""

from .record import WorkflowEvent

__all__ = ['WorkflowEvent']
