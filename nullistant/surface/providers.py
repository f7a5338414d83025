"""
Interactive-surface providers.

A provider publishes the live element list of whatever UI the assistant is
driving. The core never caches what a provider returns.
"""
import json
from pathlib import Path
from typing import Iterable, List, Optional, Union

from nullistant.core.logger import get_logger
from nullistant.surface.models import SurfaceElement, Viewport


class SurfaceProvider:
    """Base class for surface providers"""

    def elements(self) -> List[SurfaceElement]:
        raise NotImplementedError

    def viewport(self) -> Viewport:
        raise NotImplementedError


class StaticSurfaceProvider(SurfaceProvider):
    """In-memory surface; `set_elements` models the UI changing between scans"""

    def __init__(self, elements: Optional[Iterable[SurfaceElement]] = None, viewport: Viewport = Viewport(1280, 800)):
        self._elements = list(elements or [])
        self._viewport = viewport

    def set_elements(self, elements: Iterable[SurfaceElement]) -> None:
        self._elements = list(elements)

    def remove(self, ref) -> None:
        self._elements = [e for e in self._elements if e.ref != ref]

    def elements(self) -> List[SurfaceElement]:
        return list(self._elements)

    def viewport(self) -> Viewport:
        return self._viewport


class JsonSurfaceProvider(SurfaceProvider):
    """
    Surface described by a JSON file, re-read on every scan.

    Format:
        {"viewport": [width, height],
         "elements": [{"ref": "back", "tag": "button", "text": "Back",
                       "rect": [x, y, w, h], ...}]}
    """

    def __init__(self, path: Union[str, Path]):
        self.logger = get_logger()
        self.path = Path(path)
        self._viewport = Viewport(1280, 800)

    def _load(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            self.logger.warning(f"[SCAN] Surface file not found: {self.path}")
            return {}
        except json.JSONDecodeError as e:
            self.logger.error(f"[SCAN] Invalid surface file {self.path}: {e}")
            return {}

    def elements(self) -> List[SurfaceElement]:
        data = self._load()
        if "viewport" in data:
            w, h = data["viewport"]
            self._viewport = Viewport(float(w), float(h))
        return [SurfaceElement.from_dict(d) for d in data.get("elements", [])]

    def viewport(self) -> Viewport:
        return self._viewport
