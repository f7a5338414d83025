"""Surface types: raw element descriptors and targetable entities."""
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Optional, Tuple


@dataclass(frozen=True)
class Rect:
    """Screen geometry in pixels"""
    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @classmethod
    def from_list(cls, values) -> "Rect":
        x, y, w, h = values
        return cls(float(x), float(y), float(w), float(h))


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float


@dataclass
class SurfaceElement:
    """
    Raw element as published by the UI layer.

    The scanner turns these into TargetableEntity; nothing else reads them.
    """
    ref: Hashable
    tag: str
    rect: Rect
    text: str = ""
    role: Optional[str] = None
    has_click_handler: bool = False
    cursor: str = ""
    hoverable: bool = False
    visible: bool = True
    background: Optional[Tuple[int, int, int]] = None
    # Element sits inside the assistant's own floating UI
    assistant_ui: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SurfaceElement":
        background = d.get("background")
        return cls(
            ref=d["ref"],
            tag=d.get("tag", "div"),
            rect=Rect.from_list(d.get("rect", [0, 0, 0, 0])),
            text=d.get("text", "") or "",
            role=d.get("role"),
            has_click_handler=bool(d.get("onclick", False)),
            cursor=d.get("cursor", "") or "",
            hoverable=bool(d.get("hoverable", False)),
            visible=bool(d.get("visible", True)),
            background=tuple(background) if background else None,
            assistant_ui=bool(d.get("assistant_ui", False)),
        )


@dataclass(frozen=True)
class TargetableEntity:
    """An on-screen element the resolver may target"""
    ref: Hashable
    text: str
    role: str
    clickable: bool
    rect: Rect
    emergency_styled: bool = False
    assistant_ui: bool = field(default=False)

    def describe(self, limit: int = 30) -> str:
        return self.text[:limit] or f"<{self.role}>"
