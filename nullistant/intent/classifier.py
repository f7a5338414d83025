"""nullistant.intent.classifier

Rule-based intent classification for spoken commands.

Classification is ordered-priority pattern matching, not scoring: the groups
are tested in PRIORITY order and the first group with any matching pattern
wins. A transcript that matches nothing is UNKNOWN, unless one of its words
belongs to the back/exit lexicon, in which case it is relabelled NAVIGATION.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from nullistant.core.logger import get_logger
from nullistant.intent.models import IntentAnalysis, IntentCategory, Transcript, Urgency


# ============================================================================
# NORMALIZATION
# ============================================================================

# Recognizer filler tokens ("uh", "uhh", "um", "umm", "er", "err")
_FILLER_RE = re.compile(r"\b(?:uh+|um+|er+)\b")

# Phrases the recognizer is known to hallucinate from background noise
GARBAGE_PHRASES: Tuple[str, ...] = (
    "click more to mouth open",
)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: Optional[str], garbage_phrases: Sequence[str] = GARBAGE_PHRASES) -> str:
    """Lowercase, trim, drop fillers and garbage phrases, collapse whitespace."""
    if not text:
        return ""
    cleaned = text.lower().strip()
    cleaned = _FILLER_RE.sub("", cleaned)
    for phrase in garbage_phrases:
        cleaned = cleaned.replace(phrase, "")
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def split_words(text: str) -> List[str]:
    """Words longer than one character"""
    return [w for w in text.split() if len(w) > 1]


# ============================================================================
# PATTERN GROUPS (tested in PRIORITY order)
# ============================================================================

PATTERNS: Dict[IntentCategory, List[re.Pattern]] = {
    IntentCategory.EMERGENCY: [
        re.compile(r"\b(help|emergency|save|urgent|crisis|danger|sos|mayday)\b"),
        re.compile(r"need.*(help|doctor|hospital)"),
        re.compile(r"save\s+me"),
        re.compile(r"\b911\b"),
        re.compile(r"call.*(ambulance|hospital|doctor)"),
    ],
    IntentCategory.CONTACT: [
        re.compile(r"\b(call|phone|contact|dial|ring)\b.*\b(doctor|physician|nurse)\b"),
        re.compile(r"contact.*(doctor|physician|emergency)"),
        # "call" but not "call back"
        re.compile(r"\b(call|phone|ring)\b(?!.*back)"),
    ],
    IntentCategory.NAVIGATION: [
        re.compile(r"^(go\s+)?(back|return|exit|leave|quit|close)(\s+.*)?$"),
        re.compile(r"\b(back|return)\s+(to\s+)?(menu|main|home)\b"),
        re.compile(r"\b(exit|leave|quit|close)\s+(this|the|screen|page|tab)?\b"),
        re.compile(r"\bgo\s+(back|home|to\s+menu|to\s+main)\b"),
        re.compile(r"\b(main\s+screen|main\s+menu|home\s+screen)\b"),
        re.compile(r"\bget\s+(me\s+)?(out|back)"),
        re.compile(r"\btake\s+me\s+(back|home)"),
    ],
    IntentCategory.ACTION: [
        re.compile(r"^(click|press|tap|select|choose|open|activate|launch)\s+"),
        re.compile(r"\b(button|link|option)\b"),
    ],
}

PRIORITY: Tuple[IntentCategory, ...] = (
    IntentCategory.EMERGENCY,
    IntentCategory.CONTACT,
    IntentCategory.NAVIGATION,
    IntentCategory.ACTION,
)

TARGET_WORDS: Dict[IntentCategory, Tuple[str, ...]] = {
    IntentCategory.EMERGENCY: ("emergency", "911", "help", "urgent", "call", "doctor"),
    IntentCategory.CONTACT: ("call", "doctor", "contact", "phone", "physician"),
    IntentCategory.NAVIGATION: ("back", "menu", "return", "exit", "close", "main", "home"),
}

URGENCY: Dict[IntentCategory, Urgency] = {
    IntentCategory.EMERGENCY: Urgency.HIGH,
    IntentCategory.CONTACT: Urgency.MEDIUM,
    IntentCategory.NAVIGATION: Urgency.LOW,
    IntentCategory.ACTION: Urgency.LOW,
    IntentCategory.UNKNOWN: Urgency.LOW,
}

ACTION_VERBS = frozenset({"click", "press", "tap", "the", "a", "an"})
STOP_WORDS = frozenset({"the", "a", "an", "to", "of", "in", "on", "at", "by", "for", "with", "from"})

# Words that make an otherwise unknown command sound like navigation
NAVIGATION_FALLBACK_LEXICON = frozenset({"back", "exit", "leave", "close", "quit", "return", "menu", "main"})
NAVIGATION_FALLBACK_TARGETS: Tuple[str, ...] = ("back", "menu", "return", "exit", "close")


class IntentClassifier:
    """Turns a transcript into an IntentAnalysis"""

    def __init__(self, garbage_phrases: Sequence[str] = GARBAGE_PHRASES):
        self.logger = get_logger()
        self.garbage_phrases = tuple(garbage_phrases)

    def match_category(self, cleaned: str) -> IntentCategory:
        """First pattern group (in PRIORITY order) with a match, else UNKNOWN"""
        for category in PRIORITY:
            if any(p.search(cleaned) for p in PATTERNS[category]):
                return category
        return IntentCategory.UNKNOWN

    def classify(self, transcript) -> IntentAnalysis:
        """
        Classify a finalized transcript.

        Args:
            transcript: Transcript or plain string

        Returns:
            IntentAnalysis with exactly one category
        """
        original = transcript.text if isinstance(transcript, Transcript) else (transcript or "")
        cleaned = normalize(original, self.garbage_phrases)
        words = split_words(cleaned)

        category = self.match_category(cleaned)

        if category == IntentCategory.ACTION:
            target_words = tuple(w for w in words if w not in ACTION_VERBS)
        elif category == IntentCategory.UNKNOWN:
            target_words = tuple(w for w in words if w not in STOP_WORDS)
            if any(w in NAVIGATION_FALLBACK_LEXICON for w in words):
                category = IntentCategory.NAVIGATION
                target_words = NAVIGATION_FALLBACK_TARGETS
        else:
            target_words = TARGET_WORDS[category]

        analysis = IntentAnalysis(
            category=category,
            keywords=tuple(words),
            urgency=URGENCY[category],
            target_words=target_words,
            cleaned_text=cleaned,
            original_text=original,
        )
        self.logger.info(
            f"[INTENT] '{cleaned}' -> {category.value} "
            f"(urgency={analysis.urgency.value}, targets={list(target_words[:5])})"
        )
        return analysis
