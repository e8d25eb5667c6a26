"""
Common utilities for the R2 round-trip workflow.
"""

from .staging import staged_payload
from .state_manager import StateManager, WorkflowState

__all__ = ['StateManager', 'WorkflowState', 'staged_payload']
