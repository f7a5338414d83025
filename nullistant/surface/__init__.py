"""
Surface scanning for Nullistant.
The UI layer publishes raw elements; the scanner turns them into targetable entities.
"""
from nullistant.surface.models import Rect, SurfaceElement, TargetableEntity, Viewport
from nullistant.surface.providers import JsonSurfaceProvider, StaticSurfaceProvider, SurfaceProvider
from nullistant.surface.scanner import SurfaceScanner

__all__ = [
    "JsonSurfaceProvider",
    "Rect",
    "StaticSurfaceProvider",
    "SurfaceElement",
    "SurfaceProvider",
    "SurfaceScanner",
    "TargetableEntity",
    "Viewport",
]
