"""
Surface scanner: enumerates targetable entities on the current screen.
"""
from typing import List

from nullistant.core.config import Config
from nullistant.core.logger import get_logger
from nullistant.surface.models import SurfaceElement, TargetableEntity, Viewport
from nullistant.surface.providers import SurfaceProvider


CLICKABLE_TAGS = frozenset({"button", "a", "input"})
CLICKABLE_ROLES = frozenset({"button", "link", "tab", "menuitem"})

# Background colours used for emergency buttons
EMERGENCY_COLORS = frozenset({(255, 0, 0), (244, 67, 54)})


def is_clickable(element: SurfaceElement) -> bool:
    """Fixed clickability heuristic"""
    return (
        element.tag.lower() in CLICKABLE_TAGS
        or (element.role or "") in CLICKABLE_ROLES
        or element.has_click_handler
        or element.cursor == "pointer"
        or element.hoverable
    )


class SurfaceScanner:
    """Turns the provider's raw element list into TargetableEntity, fresh each call"""

    def __init__(
        self,
        provider: SurfaceProvider,
        min_size: int = Config.MIN_ELEMENT_SIZE,
        max_text: int = Config.MAX_ENTITY_TEXT
    ):
        self.logger = get_logger()
        self.provider = provider
        self.min_size = min_size
        self.max_text = max_text

    def scan(self) -> List[TargetableEntity]:
        """Enumerate visible, non-tiny elements that have text or are clickable"""
        entities: List[TargetableEntity] = []
        for element in self.provider.elements():
            rect = element.rect
            if rect.width < self.min_size or rect.height < self.min_size or not element.visible:
                continue

            text = (element.text or "").strip()
            clickable = is_clickable(element)
            if not text and not clickable:
                continue

            entities.append(TargetableEntity(
                ref=element.ref,
                text=text[:self.max_text],
                role=element.tag.lower(),
                clickable=clickable,
                rect=rect,
                emergency_styled=element.background in EMERGENCY_COLORS,
                assistant_ui=element.assistant_ui,
            ))

        self.logger.debug(
            f"[SCAN] {len(entities)} entities ({sum(1 for e in entities if e.clickable)} clickable)"
        )
        return entities

    def viewport(self) -> Viewport:
        return self.provider.viewport()
