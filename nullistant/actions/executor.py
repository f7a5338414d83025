"""
Action executor.

Resolved targets are highlighted and scrolled into view first, then
activated after HIGHLIGHT_DELAY_MS so the user can see what is about to be
clicked. Direct command-table effects run immediately. Dispatch failures are
reported through ActionOutcome, never raised.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from nullistant.actions.dispatcher import ActionDispatcher
from nullistant.core.config import Config
from nullistant.core.errors import ActionExecutionError
from nullistant.core.logger import get_logger
from nullistant.core.scheduler import ScheduledCall, Scheduler
from nullistant.surface.models import TargetableEntity


DIRECT_ACTIONS = frozenset({
    "navigate",
    "scroll",
    "scroll_to",
    "focus",
    "activate_focused",
    "find_text",
    "type",
    "keypress",
    "toggle_feature",
    "font_size",
    "read_page",
    "read_selection",
})


@dataclass
class ActionOutcome:
    action: str
    success: bool
    message: Optional[str] = None
    error: Optional[ActionExecutionError] = None
    # Target vanished between scan and activation
    skipped: bool = False


class ActionExecutor:
    """Performs resolved and direct actions through an ActionDispatcher"""

    def __init__(
        self,
        dispatcher: ActionDispatcher,
        scheduler: Scheduler,
        highlight_delay_ms: int = Config.HIGHLIGHT_DELAY_MS
    ):
        self.logger = get_logger()
        self.dispatcher = dispatcher
        self.scheduler = scheduler
        self.highlight_delay_ms = highlight_delay_ms
        self._pending_activation: Optional[ScheduledCall] = None

    def activate_target(
        self,
        entity: TargetableEntity,
        on_complete: Optional[Callable[[ActionOutcome], None]] = None,
    ) -> Optional[ScheduledCall]:
        """
        Highlight + scroll now, activate after the highlight delay.

        Returns the scheduled activation, or None if the target was already gone
        or highlighting failed (on_complete has then already been called).
        """
        label = f"activate {entity.describe()}"

        def finish(outcome: ActionOutcome) -> None:
            if on_complete is not None:
                on_complete(outcome)

        if not self.dispatcher.exists(entity.ref):
            self.logger.warning(f"[ACTION] target '{entity.describe()}' disappeared before highlight")
            finish(ActionOutcome(label, success=False, skipped=True))
            return None

        try:
            self.dispatcher.highlight(entity.ref)
            self.dispatcher.scroll_into_view(entity.ref)
        except Exception as e:
            error = ActionExecutionError(label, e)
            self.logger.error(f"[ACTION] {error}")
            finish(ActionOutcome(label, success=False, error=error))
            return None

        def activate() -> None:
            self._pending_activation = None
            if not self.dispatcher.exists(entity.ref):
                self.logger.warning(f"[ACTION] target '{entity.describe()}' disappeared; nothing to click")
                finish(ActionOutcome(label, success=False, skipped=True))
                return
            try:
                self.dispatcher.clear_highlight(entity.ref)
                self.dispatcher.activate(entity.ref)
            except Exception as e:
                error = ActionExecutionError(label, e)
                self.logger.error(f"[ACTION] {error}")
                finish(ActionOutcome(label, success=False, error=error))
                return
            self.logger.info(f"[ACTION] clicked '{entity.describe()}'")
            finish(ActionOutcome(label, success=True))

        self._pending_activation = self.scheduler.call_later(self.highlight_delay_ms, activate, label="activation")
        return self._pending_activation

    def cancel_pending(self) -> bool:
        """Drop a highlighted-but-not-yet-clicked activation"""
        if self._pending_activation is None:
            return False
        self.scheduler.cancel(self._pending_activation)
        self._pending_activation = None
        return True

    def run_direct(self, action: str, args: Optional[Dict[str, Any]] = None) -> ActionOutcome:
        """Run a direct effect immediately, without highlighting"""
        args = dict(args or {})
        if action not in DIRECT_ACTIONS:
            error = ActionExecutionError(action, ValueError(f"unknown action '{action}'"))
            self.logger.error(f"[ACTION] {error}")
            return ActionOutcome(action, success=False, error=error)

        try:
            message = self.dispatcher.perform(action, **args)
        except Exception as e:
            error = ActionExecutionError(action, e)
            self.logger.error(f"[ACTION] {error}")
            return ActionOutcome(action, success=False, error=error)

        return ActionOutcome(action, success=True, message=message)
