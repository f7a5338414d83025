"""
State management for Nullistant.
Defines the session state machine states and runtime state tracking.
"""
from collections import deque
from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional
import time

from nullistant.core.config import Config


class SessionState(Enum):
    """State machine states"""
    IDLE = "IDLE"
    WAKE_LISTENING = "WAKE_LISTENING"
    COMMAND_LISTENING = "COMMAND_LISTENING"
    PROCESSING = "PROCESSING"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"


@dataclass
class PendingAction:
    """An action held back until the user confirms it"""
    run: Callable[[], None]
    description: str
    prompt: str


@dataclass
class RuntimeState:
    """
    Runtime state owned by the session controller.

    A pending action exists iff the state is AWAITING_CONFIRMATION; only
    transition_to() and await_confirmation() touch either of them.
    """
    history_size: int = Config.COMMAND_HISTORY_SIZE
    current_state: SessionState = SessionState.IDLE
    last_state_change: float = field(default_factory=time.monotonic)
    last_command: str = ""
    live_transcript: str = ""
    history: Deque[str] = field(init=False)
    _pending: Optional[PendingAction] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.history = deque(maxlen=self.history_size)

    @property
    def pending_action(self) -> Optional[PendingAction]:
        return self._pending

    def transition_to(self, new_state: SessionState) -> SessionState:
        """Transition to a new state, returning the previous one"""
        if new_state == SessionState.AWAITING_CONFIRMATION and self._pending is None:
            raise ValueError("AWAITING_CONFIRMATION requires a pending action; use await_confirmation()")
        previous = self.current_state
        self.current_state = new_state
        self.last_state_change = time.monotonic()

        if new_state != SessionState.AWAITING_CONFIRMATION:
            self._pending = None
        if new_state in (SessionState.COMMAND_LISTENING, SessionState.IDLE, SessionState.WAKE_LISTENING):
            self.live_transcript = ""
        return previous

    def await_confirmation(self, pending: PendingAction) -> None:
        """Store the pending action and enter AWAITING_CONFIRMATION"""
        self._pending = pending
        self.transition_to(SessionState.AWAITING_CONFIRMATION)

    def take_pending(self) -> Optional[PendingAction]:
        """
        Remove and return the pending action, leaving AWAITING_CONFIRMATION.

        The state moves to PROCESSING so the invariant holds while the caller
        runs (or drops) the action.
        """
        pending = self._pending
        if pending is not None:
            self.transition_to(SessionState.PROCESSING)
        return pending

    def record_command(self, text: str) -> None:
        """Append to the bounded history (oldest entries are evicted)"""
        self.history.append(text)

    def recent_commands(self, limit: Optional[int] = None) -> List[str]:
        items = list(self.history)
        if limit is not None:
            items = items[-limit:]
        return items

    def is_in_state(self, state: SessionState) -> bool:
        """Check if currently in given state"""
        return self.current_state == state
