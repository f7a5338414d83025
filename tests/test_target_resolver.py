"""
Tests for target resolution scoring.

Run with: python -m pytest tests/test_target_resolver.py -v
"""

import pytest

from conftest import entity
from nullistant.intent.classifier import IntentClassifier
from nullistant.intent.models import IntentAnalysis, IntentCategory, Urgency
from nullistant.resolver.target_resolver import (
    ScoringWeights,
    TargetResolver,
    confidence_from_score,
    word_overlap,
)


@pytest.fixture
def resolver():
    return TargetResolver()


@pytest.fixture
def classifier():
    return IntentClassifier()


def analysis(category, target_words=()):
    return IntentAnalysis(
        category=category,
        keywords=(),
        urgency=Urgency.LOW,
        target_words=tuple(target_words),
    )


def resolve(resolver, classifier, transcript, entities, viewport_height=None):
    return resolver.resolve(transcript, classifier.classify(transcript), entities, viewport_height)


# ============================================================================
# HELPER TESTS
# ============================================================================

class TestWordOverlap:
    """Tests for the word-overlap similarity."""

    def test_identical(self):
        assert word_overlap("open chat", "Open Chat") == 1.0

    def test_substring_words_match(self):
        """'app' is inside 'appointments'."""
        assert word_overlap("app", "appointments") == 1.0

    def test_ratio_uses_longer_text(self):
        assert word_overlap("go back", "← Back to Menu") == 0.25

    def test_empty(self):
        assert word_overlap("", "anything") == 0.0
        assert word_overlap("anything", "") == 0.0


class TestConfidence:
    """Tests for score to confidence conversion."""

    def test_rounds_half_up(self):
        assert confidence_from_score(0.125) == 13
        assert confidence_from_score(0.5) == 50

    def test_capped_at_100(self):
        assert confidence_from_score(5.3) == 100


class TestScoringWeights:
    """Tests for tunable constants."""

    def test_defaults(self):
        w = ScoringWeights()
        assert w.target_word == 0.8
        assert w.nav_back_to_menu == 1.5
        assert w.accept_threshold == 0.4

    def test_overrides(self):
        w = ScoringWeights.from_overrides({"accept_threshold": 0.7})
        assert w.accept_threshold == 0.7
        assert w.target_word == 0.8

    def test_unknown_override_rejected(self):
        with pytest.raises(ValueError):
            ScoringWeights.from_overrides({"bogus": 1.0})


# ============================================================================
# RESOLUTION TESTS
# ============================================================================

class TestResolve:
    """Tests for picking a winner."""

    def test_go_back_hits_back_to_menu(self, resolver, classifier):
        """'go back' with a single '← Back to Menu' button is accepted at full confidence."""
        back = entity("← Back to Menu", rect=(24, 24, 160, 44))
        result = resolve(resolver, classifier, "go back", [back], viewport_height=800)

        assert result.success
        assert result.entity is back
        assert result.candidates[0].score >= 1.2
        assert result.confidence == 100
        assert result.action == 'clicked "← Back to Menu"'
        assert result.reasoning.startswith("navigation intent → ")
        assert "back to menu button" in result.reasoning

    def test_self_exclusion_on_navigation(self, resolver, classifier):
        """The assistant's own button never wins a navigation command."""
        own = entity("Nullistant: back to listening", rect=(0, 0, 300, 100))
        page = entity("Return", rect=(0, 200, 80, 30))
        result = resolve(resolver, classifier, "go back", [own, page])

        assert result.success
        assert result.entity is page
        assert all(c.entity is not own for c in result.candidates)

    def test_self_exclusion_by_marker(self, resolver, classifier):
        own = entity("Back", assistant_ui=True)
        result = resolve(resolver, classifier, "go back", [own])
        assert not result.success

    def test_assistant_ui_allowed_outside_navigation(self, resolver, classifier):
        own = entity("Listen button", rect=(0, 0, 200, 50))
        result = resolve(resolver, classifier, "click listen button", [own])
        assert result.success

    def test_non_clickable_never_wins(self, resolver, classifier):
        heading = entity("Emergency Call", clickable=False, role="h1", rect=(0, 0, 600, 200))
        small = entity("Emergency", rect=(0, 300, 100, 30))
        result = resolve(resolver, classifier, "emergency", [heading, small])

        assert result.entity is small
        assert all(c.entity.clickable for c in result.candidates)

    def test_only_non_clickable_fails(self, resolver, classifier):
        heading = entity("Emergency", clickable=False, role="h1")
        result = resolve(resolver, classifier, "emergency", [heading])

        assert not result.success
        assert result.entity is None
        assert result.confidence == 0

    def test_threshold_is_exclusive(self):
        """A best score of exactly 0.4 is a failure."""
        weights = ScoringWeights(button_role=0.4, large_area=0.0)
        resolver = TargetResolver(weights)
        plain = entity("Zzz", rect=(0, 0, 20, 20))
        result = resolver.resolve("qqq", analysis(IntentCategory.UNKNOWN), [plain])

        assert result.candidates[0].score == pytest.approx(0.4)
        assert not result.success

    def test_low_score_fails_with_reasoning(self, resolver, classifier):
        result = resolve(resolver, classifier, "show the weather", [entity("Zzz", rect=(0, 0, 20, 20))])

        assert not result.success
        assert result.action == "no suitable element found"
        assert result.reasoning == (
            'No confident match for "show the weather" (intent: unknown). Found 1 clickable elements.'
        )

    def test_ties_break_by_scan_order(self, resolver):
        first = entity("Same", ref="first")
        second = entity("Same", ref="second")
        result = resolver.resolve("same", analysis(IntentCategory.ACTION, ["same"]), [first, second])
        assert result.entity is first

    def test_emergency_prefers_red_button(self, resolver, classifier):
        plain = entity("Help desk", rect=(0, 0, 100, 30))
        red = entity("SOS", emergency_styled=True, rect=(0, 100, 100, 30))
        result = resolve(resolver, classifier, "help", [plain, red])
        # "help desk" gets target word + similarity; red gets style bonus; both clickable
        scores = {c.entity.text: c.score for c in result.candidates}
        assert scores["SOS"] == pytest.approx(0.6 + 0.3)
        assert result.success

    def test_contact_doctor(self, resolver, classifier):
        doctor = entity("Call My Doctor", rect=(0, 0, 100, 30))
        other = entity("Appointments", rect=(0, 100, 100, 30))
        result = resolve(resolver, classifier, "phone my physician", [other, doctor])
        assert result.entity is doctor

    def test_close_glyph(self, resolver, classifier):
        close = entity("×", rect=(0, 0, 20, 20))
        result = resolve(resolver, classifier, "close", [close])
        assert result.success
        assert "X close button detected" in result.candidates[0].reasons


# ============================================================================
# MONOTONICITY TESTS
# ============================================================================

class TestMonotonicity:
    """More target-word containments never lower the score."""

    @pytest.mark.parametrize("words", [
        ("back",),
        ("back", "menu"),
        ("back", "menu", "return"),
        ("back", "menu", "return", "home"),
    ])
    def test_score_non_decreasing(self, resolver, words):
        target = entity("Return back home menu")
        fewer = resolver.score("x", analysis(IntentCategory.ACTION, words[:-1]), target).score
        more = resolver.score("x", analysis(IntentCategory.ACTION, words), target).score
        assert more >= fewer
        assert more - fewer == pytest.approx(0.8)
