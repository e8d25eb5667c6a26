"""
State manager for tracking workflow steps and their timing.
"""

import time
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class WorkflowState(Enum):
    """States of one round-trip run."""

    INIT = "init"
    BUCKET_ENSURED = "bucket_ensured"
    OBJECT_WRITTEN = "object_written"
    WRITE_SKIPPED = "write_skipped"
    OBJECT_READ = "object_read"
    LISTED = "listed"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowState.DONE, WorkflowState.FAILED)


# FAILED is reachable from every non-terminal state and is not listed here
TRANSITIONS: Dict[WorkflowState, Tuple[WorkflowState, ...]] = {
    WorkflowState.INIT: (WorkflowState.BUCKET_ENSURED,),
    WorkflowState.BUCKET_ENSURED: (WorkflowState.OBJECT_WRITTEN, WorkflowState.WRITE_SKIPPED),
    WorkflowState.OBJECT_WRITTEN: (WorkflowState.OBJECT_READ,),
    WorkflowState.WRITE_SKIPPED: (WorkflowState.OBJECT_READ,),
    WorkflowState.OBJECT_READ: (WorkflowState.LISTED,),
    WorkflowState.LISTED: (WorkflowState.DONE,),
    WorkflowState.DONE: (),
    WorkflowState.FAILED: (),
}


class StateManager:
    """Tracks the current workflow state and when each state was entered."""

    def __init__(self):
        self.state: WorkflowState = WorkflowState.INIT
        self.state_start_ts: float = time.time()
        self.history: List[Tuple[WorkflowState, float]] = [(self.state, self.state_start_ts)]

    def advance(self, new_state: WorkflowState, timestamp: Optional[float] = None) -> None:
        """Move to ``new_state``.

        Args:
            new_state: State to enter
            timestamp: When the state was entered (defaults to current time)

        Raises:
            RuntimeError: If the transition is not allowed from the current state
        """
        if not self.can_advance(new_state):
            raise RuntimeError(f"Invalid transition {self.state.value} -> {new_state.value}")

        previous = self.state
        self.state = new_state
        self.state_start_ts = timestamp or time.time()
        self.history.append((new_state, self.state_start_ts))

        logger.debug(f"Workflow state: {previous.value} -> {new_state.value}")

    def can_advance(self, new_state: WorkflowState) -> bool:
        if self.state.is_terminal:
            return False
        if new_state is WorkflowState.FAILED:
            return True
        return new_state in TRANSITIONS[self.state]

    def fail(self) -> None:
        """Enter FAILED unless the run already finished."""
        if not self.state.is_terminal:
            self.advance(WorkflowState.FAILED)

    def get_state_info(self) -> Dict[str, Any]:
        """Get current state information."""
        return {
            'state': self.state.value,
            'state_start_ts': self.state_start_ts,
            'states_visited': [state.value for state, _ in self.history],
            'elapsed': time.time() - self.history[0][1],
        }

    def __repr__(self) -> str:
        return f"StateManager(state='{self.state.value}', steps={len(self.history)})"
