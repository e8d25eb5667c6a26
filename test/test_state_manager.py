"""
Tests for the workflow state manager.
"""

import unittest

from r2_roundtrip.common.state_manager import StateManager, WorkflowState


class TestStateManager(unittest.TestCase):

    def test_happy_path(self):
        states = StateManager()
        for state in (WorkflowState.BUCKET_ENSURED, WorkflowState.OBJECT_WRITTEN,
                      WorkflowState.OBJECT_READ, WorkflowState.LISTED, WorkflowState.DONE):
            states.advance(state)

        self.assertTrue(states.state.is_terminal)
        info = states.get_state_info()
        self.assertEqual(info['state'], 'done')
        self.assertEqual(info['states_visited'][0], 'init')
        self.assertEqual(len(info['states_visited']), 6)

    def test_write_skipped_branch(self):
        states = StateManager()
        states.advance(WorkflowState.BUCKET_ENSURED)
        states.advance(WorkflowState.WRITE_SKIPPED)
        states.advance(WorkflowState.OBJECT_READ)

        self.assertEqual(states.state, WorkflowState.OBJECT_READ)

    def test_skipping_a_step_is_rejected(self):
        states = StateManager()

        with self.assertRaises(RuntimeError):
            states.advance(WorkflowState.OBJECT_READ)

    def test_failed_is_terminal(self):
        states = StateManager()
        states.advance(WorkflowState.BUCKET_ENSURED)
        states.fail()

        self.assertEqual(states.state, WorkflowState.FAILED)
        self.assertFalse(states.can_advance(WorkflowState.OBJECT_WRITTEN))
        with self.assertRaises(RuntimeError):
            states.advance(WorkflowState.OBJECT_WRITTEN)

    def test_fail_after_done_keeps_done(self):
        states = StateManager()
        for state in (WorkflowState.BUCKET_ENSURED, WorkflowState.WRITE_SKIPPED,
                      WorkflowState.OBJECT_READ, WorkflowState.LISTED, WorkflowState.DONE):
            states.advance(state)
        states.fail()

        self.assertEqual(states.state, WorkflowState.DONE)


if __name__ == '__main__':
    unittest.main()
