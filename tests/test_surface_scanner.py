"""
Tests for the surface scanner and providers.

Run with: python -m pytest tests/test_surface_scanner.py -v
"""

import json

import pytest

from conftest import element
from nullistant.surface.models import Rect, SurfaceElement, Viewport
from nullistant.surface.providers import JsonSurfaceProvider, StaticSurfaceProvider
from nullistant.surface.scanner import SurfaceScanner, is_clickable


def scan(*elements):
    return SurfaceScanner(StaticSurfaceProvider(elements)).scan()


# ============================================================================
# CLICKABILITY TESTS
# ============================================================================

class TestIsClickable:
    """Tests for the fixed clickability heuristic."""

    @pytest.mark.parametrize("tag", ["button", "a", "input", "BUTTON"])
    def test_clickable_tags(self, tag):
        assert is_clickable(element("x", "X", tag=tag))

    @pytest.mark.parametrize("role", ["button", "link", "tab", "menuitem"])
    def test_clickable_roles(self, role):
        assert is_clickable(element("x", "X", tag="div", role=role))

    def test_click_handler(self):
        assert is_clickable(element("x", "X", tag="div", has_click_handler=True))

    def test_pointer_cursor(self):
        assert is_clickable(element("x", "X", tag="span", cursor="pointer"))

    def test_hoverable(self):
        assert is_clickable(element("x", "X", tag="div", hoverable=True))

    def test_plain_div_is_not_clickable(self):
        assert not is_clickable(element("x", "X", tag="div"))


# ============================================================================
# SCAN TESTS
# ============================================================================

class TestScan:
    """Tests for entity enumeration."""

    def test_drops_tiny_elements(self):
        entities = scan(
            element("narrow", "Narrow", rect=(0, 0, 9, 40)),
            element("short", "Short", rect=(0, 0, 40, 9)),
            element("ok", "Ok", rect=(0, 0, 10, 10)),
        )
        assert [e.ref for e in entities] == ["ok"]

    def test_drops_invisible_elements(self):
        entities = scan(element("hidden", "Hidden", visible=False))
        assert entities == []

    def test_keeps_text_only_elements_as_not_clickable(self):
        entities = scan(element("title", "Welcome", tag="h1"))
        assert len(entities) == 1
        assert not entities[0].clickable

    def test_drops_empty_non_clickable_elements(self):
        assert scan(element("spacer", "   ", tag="div")) == []

    def test_keeps_empty_clickable_elements(self):
        entities = scan(element("icon", "", tag="button"))
        assert entities[0].clickable
        assert entities[0].text == ""

    def test_text_is_trimmed_and_bounded(self):
        entities = scan(element("long", "  " + "x" * 150 + "  "))
        assert entities[0].text == "x" * 100

    def test_emergency_styling(self):
        entities = scan(
            element("red", "SOS", background=(255, 0, 0)),
            element("material", "SOS", background=(244, 67, 54)),
            element("blue", "SOS", background=(0, 0, 255)),
        )
        assert [e.emergency_styled for e in entities] == [True, True, False]

    def test_preserves_scan_order(self):
        entities = scan(element("a", "A"), element("b", "B"), element("c", "C"))
        assert [e.ref for e in entities] == ["a", "b", "c"]

    def test_role_is_tag(self):
        entities = scan(element("d", "Settings", tag="DIV", role="button"))
        assert entities[0].role == "div"

    def test_assistant_ui_marker_carried(self):
        entities = scan(element("mic", "Listen", assistant_ui=True))
        assert entities[0].assistant_ui

    def test_every_scan_is_fresh(self):
        provider = StaticSurfaceProvider([element("a", "A"), element("b", "B")])
        scanner = SurfaceScanner(provider)
        assert len(scanner.scan()) == 2
        provider.remove("a")
        assert [e.ref for e in scanner.scan()] == ["b"]


# ============================================================================
# PROVIDER TESTS
# ============================================================================

class TestJsonSurfaceProvider:
    """Tests for the JSON file provider."""

    def test_reads_elements_and_viewport(self, tmp_path):
        path = tmp_path / "surface.json"
        path.write_text(json.dumps({
            "viewport": [1024, 768],
            "elements": [
                {"ref": "back", "tag": "button", "text": "Back", "rect": [0, 0, 80, 40]},
                {"ref": "card", "tag": "div", "text": "Card", "rect": [0, 50, 200, 100],
                 "onclick": True, "background": [255, 0, 0]},
            ],
        }), encoding="utf-8")

        provider = JsonSurfaceProvider(path)
        elements = provider.elements()

        assert provider.viewport() == Viewport(1024, 768)
        assert elements[0] == SurfaceElement(ref="back", tag="button", rect=Rect(0, 0, 80, 40), text="Back")
        assert elements[1].has_click_handler
        assert elements[1].background == (255, 0, 0)

    def test_rereads_file_each_scan(self, tmp_path):
        path = tmp_path / "surface.json"
        path.write_text(json.dumps({"elements": [{"ref": "a", "text": "A", "tag": "a", "rect": [0, 0, 50, 50]}]}))
        scanner = SurfaceScanner(JsonSurfaceProvider(path))
        assert len(scanner.scan()) == 1

        path.write_text(json.dumps({"elements": []}))
        assert scanner.scan() == []

    def test_missing_file_is_empty_surface(self, tmp_path):
        provider = JsonSurfaceProvider(tmp_path / "nope.json")
        assert provider.elements() == []

    def test_invalid_json_is_empty_surface(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert JsonSurfaceProvider(path).elements() == []
