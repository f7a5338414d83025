"""Intent analysis types."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class IntentCategory(Enum):
    EMERGENCY = "emergency"
    CONTACT = "contact"
    NAVIGATION = "navigation"
    ACTION = "action"
    UNKNOWN = "unknown"


class Urgency(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Transcript:
    """A recognized span of user speech"""
    text: str
    is_final: bool = True
    confidence: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "confidence", min(1.0, max(0.0, float(self.confidence))))


@dataclass(frozen=True)
class IntentAnalysis:
    """Deterministic classification of one transcript"""
    category: IntentCategory
    keywords: Tuple[str, ...]
    urgency: Urgency
    target_words: Tuple[str, ...]
    cleaned_text: str = ""
    original_text: str = field(default="", compare=False)

    @property
    def intent(self) -> str:
        return self.category.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.category.value,
            "urgency": self.urgency.value,
            "keywords": list(self.keywords),
            "target_words": list(self.target_words),
            "cleaned": self.cleaned_text,
            "original": self.original_text,
        }
