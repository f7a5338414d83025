"""nullistant.resolver.target_resolver

Scores on-screen entities against an intent and picks the one to activate.

Scoring is additive; every bonus is listed in ScoringWeights so the values
can be tuned without touching the scoring code. Only clickable entities are
eligible, the winner is the first entity (in scan order) with the highest
positive score, and a winner at or below `accept_threshold` is a failure.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, fields, replace
from typing import Dict, List, Optional, Sequence

from nullistant.core.logger import get_logger
from nullistant.intent.models import IntentAnalysis, IntentCategory
from nullistant.surface.models import TargetableEntity


@dataclass(frozen=True)
class ScoringWeights:
    """Empirical scoring constants (tunable, not derived)"""
    target_word: float = 0.8
    # emergency
    emergency_text: float = 1.0
    emergency_call_help: float = 0.8
    emergency_red: float = 0.6
    # contact
    contact_action: float = 0.8
    contact_doctor: float = 0.9
    # navigation
    nav_back_to_menu: float = 1.5
    nav_close_screen: float = 1.4
    nav_close_glyph: float = 1.3
    nav_generic: float = 1.2
    nav_close_exit: float = 1.1
    nav_back_arrow: float = 1.0
    nav_page_button: float = 0.3
    nav_bottom_margin: float = 100.0
    # shared
    similarity_weight: float = 0.5
    similarity_min: float = 0.3
    button_role: float = 0.3
    large_area: float = 0.2
    large_area_min: float = 5000.0
    accept_threshold: float = 0.4

    @classmethod
    def from_overrides(cls, overrides: Dict[str, float]) -> "ScoringWeights":
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown scoring weights: {sorted(unknown)}")
        return replace(cls(), **overrides)


# Text markers of the assistant's own floating UI
SELF_UI_MARKERS = ("ai voice", "nullistant", "listen")

_CLOSE_GLYPH_RE = re.compile(r"^(×|✕|x)$")


@dataclass
class ScoredCandidate:
    entity: TargetableEntity
    score: float
    reasons: List[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return ", ".join(self.reasons) or "partial match"


@dataclass
class ResolutionResult:
    success: bool
    action: str
    confidence: int
    reasoning: str
    entity: Optional[TargetableEntity] = None
    candidates: List[ScoredCandidate] = field(default_factory=list)


def word_overlap(text1: str, text2: str) -> float:
    """
    Word-overlap similarity.

    A word of text1 matches when it contains, or is contained in, any word of
    text2. Ratio = matches / max(word counts).
    """
    words1 = text1.lower().split()
    words2 = text2.lower().split()
    if not words1 or not words2:
        return 0.0

    matches = 0
    for w1 in words1:
        for w2 in words2:
            if w1 in w2 or w2 in w1:
                matches += 1
                break
    return matches / max(len(words1), len(words2))


def confidence_from_score(score: float) -> int:
    """round(score * 100) half-up, capped at 100"""
    return min(int(math.floor(score * 100 + 0.5)), 100)


def is_assistant_ui(entity: TargetableEntity) -> bool:
    text = entity.text.lower()
    return entity.assistant_ui or any(marker in text for marker in SELF_UI_MARKERS)


class TargetResolver:
    """Picks the best clickable entity for an intent"""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.logger = get_logger()
        self.weights = weights or ScoringWeights()

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def is_eligible(self, entity: TargetableEntity, analysis: IntentAnalysis) -> bool:
        if not entity.clickable:
            return False
        # Never let "go back" land on the assistant itself
        if analysis.category == IntentCategory.NAVIGATION and is_assistant_ui(entity):
            return False
        return True

    def score(
        self,
        transcript: str,
        analysis: IntentAnalysis,
        entity: TargetableEntity,
        viewport_height: Optional[float] = None,
    ) -> ScoredCandidate:
        """Score one entity. Eligibility is not checked here."""
        w = self.weights
        text = entity.text.lower()
        score = 0.0
        reasons: List[str] = []

        if text:
            for word in analysis.target_words:
                if word in text or text in word:
                    score += w.target_word
                    reasons.append(f'contains "{word}"')

        category = analysis.category
        if category == IntentCategory.EMERGENCY:
            if "emergency" in text or "911" in text:
                score += w.emergency_text
                reasons.append("emergency button")
            elif "call" in text and "help" in text:
                score += w.emergency_call_help
                reasons.append("emergency call")
            if entity.emergency_styled:
                score += w.emergency_red
                reasons.append("red button")

        elif category == IntentCategory.CONTACT:
            if "call" in text or "doctor" in text:
                score += w.contact_action
                reasons.append("contact action")
            if "my doctor" in text or "physician" in text:
                score += w.contact_doctor
                reasons.append("doctor contact")

        elif category == IntentCategory.NAVIGATION:
            if "back to menu" in text or "← back" in text:
                score += w.nav_back_to_menu
                reasons.append("back to menu button")
            if "close chat" in text or "✕ close" in text:
                score += w.nav_close_screen
                reasons.append("close screen button")
            if "back" in text or "menu" in text or "main" in text:
                score += w.nav_generic
                reasons.append("navigation button")
            if "close" in text or "exit" in text or "✕" in text:
                score += w.nav_close_exit
                reasons.append("close/exit button")
            if "←" in text or "return" in text or "home" in text:
                score += w.nav_back_arrow
                reasons.append("back navigation")
            if _CLOSE_GLYPH_RE.match(text):
                score += w.nav_close_glyph
                reasons.append("X close button detected")
            if viewport_height is not None and entity.rect.bottom < viewport_height - w.nav_bottom_margin:
                score += w.nav_page_button
                reasons.append("likely page button")

        similarity = word_overlap(transcript, entity.text)
        if similarity > w.similarity_min:
            score += similarity * w.similarity_weight
            reasons.append(f"{round(similarity * 100)}% text match")

        if entity.role == "button":
            score += w.button_role
            reasons.append("button element")

        if entity.rect.area > w.large_area_min:
            score += w.large_area
            reasons.append("large element")

        return ScoredCandidate(entity=entity, score=score, reasons=reasons)

    def rank(
        self,
        transcript: str,
        analysis: IntentAnalysis,
        entities: Sequence[TargetableEntity],
        viewport_height: Optional[float] = None,
    ) -> List[ScoredCandidate]:
        """Eligible candidates with a positive score, best first; ties keep scan order"""
        scored = []
        for entity in entities:
            if not self.is_eligible(entity, analysis):
                if entity.clickable:
                    self.logger.debug(f"[SCORE] skip assistant UI '{entity.describe()}'")
                continue
            candidate = self.score(transcript, analysis, entity, viewport_height)
            if candidate.score > 0:
                scored.append(candidate)
        # sorted() is stable, so equal scores stay in scan order
        return sorted(scored, key=lambda c: -c.score)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        transcript: str,
        analysis: IntentAnalysis,
        entities: Sequence[TargetableEntity],
        viewport_height: Optional[float] = None,
    ) -> ResolutionResult:
        ranked = self.rank(transcript, analysis, entities, viewport_height)
        best = ranked[0] if ranked else None

        if best is not None and best.score > self.weights.accept_threshold:
            confidence = confidence_from_score(best.score)
            self.logger.info(
                f"[RESOLVE] '{best.entity.describe()}' score={best.score:.2f} "
                f"confidence={confidence} ({best.reason})"
            )
            return ResolutionResult(
                success=True,
                action=f'clicked "{best.entity.text[:30]}"',
                confidence=confidence,
                reasoning=f"{analysis.intent} intent → {best.reason}",
                entity=best.entity,
                candidates=ranked,
            )

        clickable = sum(1 for e in entities if e.clickable)
        if best is not None:
            self.logger.info(
                f"[RESOLVE] best '{best.entity.describe()}' score={best.score:.2f} below threshold"
            )
        self.logger.debug(f"[RESOLVE] clickable: {[e.describe() for e in entities if e.clickable]}")
        return ResolutionResult(
            success=False,
            action="no suitable element found",
            confidence=0,
            reasoning=(
                f'No confident match for "{transcript}" (intent: {analysis.intent}). '
                f"Found {clickable} clickable elements."
            ),
            candidates=ranked,
        )
