"""
The object-storage round-trip workflow.
"""

from .roundtrip import ObjectStoreWorkflow, WorkflowReport

__all__ = ['ObjectStoreWorkflow', 'WorkflowReport']
