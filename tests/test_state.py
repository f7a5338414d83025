"""
Tests for session state and the pending-action invariant.

Run with: python -m pytest tests/test_state.py -v
"""

import pytest

from nullistant.core.state import PendingAction, RuntimeState, SessionState


def pending(description="Refresh current page"):
    return PendingAction(run=lambda: None, description=description, prompt="Sure?")


class TestTransitions:
    """Tests for transition_to / await_confirmation."""

    def test_starts_idle(self):
        state = RuntimeState()
        assert state.is_in_state(SessionState.IDLE)
        assert state.pending_action is None

    def test_transition_returns_previous(self):
        state = RuntimeState()
        assert state.transition_to(SessionState.WAKE_LISTENING) == SessionState.IDLE
        assert state.current_state == SessionState.WAKE_LISTENING

    def test_awaiting_requires_pending(self):
        state = RuntimeState()
        with pytest.raises(ValueError):
            state.transition_to(SessionState.AWAITING_CONFIRMATION)

    def test_await_confirmation_sets_both(self):
        state = RuntimeState()
        action = pending()
        state.await_confirmation(action)
        assert state.current_state == SessionState.AWAITING_CONFIRMATION
        assert state.pending_action is action

    @pytest.mark.parametrize("target", [
        SessionState.IDLE,
        SessionState.WAKE_LISTENING,
        SessionState.COMMAND_LISTENING,
        SessionState.PROCESSING,
    ])
    def test_leaving_awaiting_clears_pending(self, target):
        state = RuntimeState()
        state.await_confirmation(pending())
        state.transition_to(target)
        assert state.pending_action is None

    def test_take_pending_moves_to_processing(self):
        state = RuntimeState()
        action = pending()
        state.await_confirmation(action)
        assert state.take_pending() is action
        assert state.current_state == SessionState.PROCESSING
        assert state.pending_action is None

    def test_take_pending_without_pending(self):
        state = RuntimeState()
        assert state.take_pending() is None
        assert state.current_state == SessionState.IDLE

    def test_listening_clears_live_transcript(self):
        state = RuntimeState()
        state.live_transcript = "go ba"
        state.transition_to(SessionState.COMMAND_LISTENING)
        assert state.live_transcript == ""


class TestHistory:
    """Tests for the bounded command history."""

    def test_never_exceeds_capacity(self):
        state = RuntimeState(history_size=50)
        for i in range(120):
            state.record_command(f"command {i}")
            assert len(state.history) <= 50
        assert state.recent_commands()[0] == "command 70"
        assert state.recent_commands()[-1] == "command 119"

    def test_recent_limit(self):
        state = RuntimeState(history_size=5)
        for text in ("a", "b", "c"):
            state.record_command(text)
        assert state.recent_commands(2) == ["b", "c"]
