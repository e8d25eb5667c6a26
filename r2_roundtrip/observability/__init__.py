"""
Observability collaborators for the workflow.
"""

from .events import EventEmitter, LoggingSink

__all__ = ['EventEmitter', 'LoggingSink']
