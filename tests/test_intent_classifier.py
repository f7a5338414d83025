"""
Tests for rule-based intent classification.

Run with: python -m pytest tests/test_intent_classifier.py -v
"""

import pytest

from nullistant.intent.classifier import (
    NAVIGATION_FALLBACK_TARGETS,
    TARGET_WORDS,
    IntentClassifier,
    normalize,
    split_words,
)
from nullistant.intent.models import IntentCategory, Transcript, Urgency


@pytest.fixture
def classifier():
    return IntentClassifier()


# ============================================================================
# NORMALIZATION TESTS
# ============================================================================

class TestNormalize:
    """Tests for transcript clean-up."""

    def test_lowercases_and_trims(self):
        assert normalize("  Go BACK  ") == "go back"

    def test_drops_fillers(self):
        assert normalize("uhh go um back") == "go back"

    def test_drops_garbage_phrase(self):
        assert normalize("click more to mouth open") == ""

    def test_collapses_whitespace(self):
        assert normalize("go    back\tnow") == "go back now"

    def test_empty_and_none(self):
        assert normalize("") == ""
        assert normalize(None) == ""

    def test_filler_inside_word_is_kept(self):
        """Only whole filler tokens are removed."""
        assert normalize("number") == "number"

    def test_split_words_drops_single_letters(self):
        assert split_words("a go b back") == ["go", "back"]


# ============================================================================
# CATEGORY TESTS
# ============================================================================

class TestCategories:
    """Tests for first-match category selection."""

    @pytest.mark.parametrize("text", [
        "help",
        "this is an emergency",
        "I need a doctor",
        "save me",
        "call 911",
        "call an ambulance",
        "call my doctor",
    ])
    def test_emergency(self, classifier, text):
        assert classifier.classify(text).category == IntentCategory.EMERGENCY

    @pytest.mark.parametrize("text", [
        "phone the nurse",
        "contact physician",
        "call mom",
        "ring the office",
    ])
    def test_contact(self, classifier, text):
        assert classifier.classify(text).category == IntentCategory.CONTACT

    @pytest.mark.parametrize("text", [
        "go back",
        "back",
        "exit",
        "close this",
        "return to menu",
        "main menu",
        "take me home",
        "get me out",
    ])
    def test_navigation(self, classifier, text):
        assert classifier.classify(text).category == IntentCategory.NAVIGATION

    @pytest.mark.parametrize("text", [
        "click submit",
        "open chat",
        "the blue button",
        "select option two",
    ])
    def test_action(self, classifier, text):
        assert classifier.classify(text).category == IntentCategory.ACTION

    def test_unknown(self, classifier):
        assert classifier.classify("what is the weather").category == IntentCategory.UNKNOWN

    def test_emergency_beats_contact(self, classifier):
        """'call ... doctor' matches both groups; emergency is tested first."""
        assert classifier.classify("please call the doctor").category == IntentCategory.EMERGENCY

    def test_help_beats_action(self, classifier):
        assert classifier.classify("click help").category == IntentCategory.EMERGENCY

    def test_navigation_beats_action(self, classifier):
        """'close ...' and 'button' match both groups; navigation is tested first."""
        analysis = classifier.classify("close the menu button")
        assert analysis.category == IntentCategory.NAVIGATION
        assert analysis.target_words == TARGET_WORDS[IntentCategory.NAVIGATION]

    def test_contact_beats_navigation(self, classifier):
        """'phone ... nurse' and 'return to menu' match both groups; contact is tested first."""
        assert classifier.classify("phone the nurse and return to menu").category == IntentCategory.CONTACT

    def test_call_without_back_is_contact(self, classifier):
        assert classifier.classify("call home").category == IntentCategory.CONTACT

    def test_empty_transcript_is_unknown(self, classifier):
        analysis = classifier.classify("")
        assert analysis.category == IntentCategory.UNKNOWN
        assert analysis.keywords == ()

    def test_accepts_transcript_objects(self, classifier):
        analysis = classifier.classify(Transcript("Go back", confidence=0.9))
        assert analysis.category == IntentCategory.NAVIGATION
        assert analysis.original_text == "Go back"

    @pytest.mark.parametrize("text", [
        "", "hello", "go back", "help", "phone nurse", "click it", "call back", "menu please",
    ])
    def test_exactly_one_category(self, classifier, text):
        assert classifier.classify(text).category in set(IntentCategory)


# ============================================================================
# NAVIGATION FALLBACK TESTS
# ============================================================================

class TestNavigationFallback:
    """Unknown commands containing back/exit words become navigation."""

    def test_menu_word(self, classifier):
        analysis = classifier.classify("menu please")
        assert analysis.category == IntentCategory.NAVIGATION
        assert analysis.target_words == NAVIGATION_FALLBACK_TARGETS

    def test_call_back_is_not_contact(self, classifier):
        """'call back' is excluded from contact and falls back to navigation."""
        assert classifier.classify("call back").category == IntentCategory.NAVIGATION

    def test_no_fallback_without_lexicon_word(self, classifier):
        assert classifier.classify("show me pictures").category == IntentCategory.UNKNOWN


# ============================================================================
# ANALYSIS CONTENT TESTS
# ============================================================================

class TestAnalysis:
    """Tests for keywords, target words and urgency."""

    def test_urgency_by_category(self, classifier):
        assert classifier.classify("emergency").urgency == Urgency.HIGH
        assert classifier.classify("phone the nurse").urgency == Urgency.MEDIUM
        assert classifier.classify("go back").urgency == Urgency.LOW

    def test_category_target_words(self, classifier):
        analysis = classifier.classify("emergency")
        assert analysis.target_words == TARGET_WORDS[IntentCategory.EMERGENCY]

    def test_action_target_words_drop_verbs(self, classifier):
        analysis = classifier.classify("click the submit button")
        assert analysis.target_words == ("submit", "button")

    def test_unknown_target_words_drop_stop_words(self, classifier):
        analysis = classifier.classify("show pictures of the campus")
        assert analysis.target_words == ("show", "pictures", "campus")

    def test_keywords_from_cleaned_text(self, classifier):
        analysis = classifier.classify("Uh GO back")
        assert analysis.keywords == ("go", "back")
        assert analysis.cleaned_text == "go back"

    def test_intent_name_and_dict(self, classifier):
        analysis = classifier.classify("go back")
        assert analysis.intent == "navigation"
        assert analysis.to_dict()["intent"] == "navigation"
