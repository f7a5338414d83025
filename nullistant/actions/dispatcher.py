"""
Action dispatch: the boundary where effects reach the UI being driven.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional, Set

from nullistant.core.logger import get_logger


class ActionDispatcher:
    """Base class for action dispatchers"""

    def exists(self, ref: Hashable) -> bool:
        """Is the referenced element still on screen?"""
        raise NotImplementedError

    def highlight(self, ref: Hashable) -> None:
        raise NotImplementedError

    def clear_highlight(self, ref: Hashable) -> None:
        raise NotImplementedError

    def scroll_into_view(self, ref: Hashable) -> None:
        raise NotImplementedError

    def activate(self, ref: Hashable) -> None:
        """Click / press the element"""
        raise NotImplementedError

    def perform(self, effect: str, **args: Any) -> Optional[str]:
        """
        Run a direct effect (navigate, scroll, scroll_to, focus, activate_focused,
        find_text, type, keypress, toggle_feature, font_size, read_page,
        read_selection).

        Returns optional text to speak back (e.g. page content for read_page).
        """
        raise NotImplementedError


@dataclass
class DispatchRecord:
    effect: str
    ref: Optional[Hashable] = None
    args: Dict[str, Any] = field(default_factory=dict)


class LoggingDispatcher(ActionDispatcher):
    """
    Dispatcher that logs and records every effect.

    Used by the CLI, where there is no real UI to drive. `known_refs` is the
    set of element refs considered present; None means everything exists.
    """

    def __init__(self, known_refs: Optional[Set[Hashable]] = None):
        self.logger = get_logger()
        self.known_refs = known_refs
        self.records: List[DispatchRecord] = []
        self.highlighted: Set[Hashable] = set()

    def _record(self, effect: str, ref: Optional[Hashable] = None, **args: Any) -> None:
        self.records.append(DispatchRecord(effect, ref, args))
        detail = f" ref={ref}" if ref is not None else ""
        if args:
            detail += " " + " ".join(f"{k}={v!r}" for k, v in args.items())
        self.logger.info(f"[ACTION] {effect}{detail}")

    def exists(self, ref: Hashable) -> bool:
        return self.known_refs is None or ref in self.known_refs

    def highlight(self, ref: Hashable) -> None:
        self.highlighted.add(ref)
        self._record("highlight", ref)

    def clear_highlight(self, ref: Hashable) -> None:
        self.highlighted.discard(ref)
        self._record("clear_highlight", ref)

    def scroll_into_view(self, ref: Hashable) -> None:
        self._record("scroll_into_view", ref)

    def activate(self, ref: Hashable) -> None:
        self._record("activate", ref)

    def perform(self, effect: str, **args: Any) -> Optional[str]:
        self._record(effect, **args)
        return None

    def effects(self) -> List[str]:
        return [r.effect for r in self.records]
