"""nullistant.policy

Confirmation gate for destructive commands.

HARD RULES:
- Yes/no decided by fixed lexicons, never by intent classification
- At most one pending action, owned by the session's RuntimeState
"""

from nullistant.policy.confirmation import (
    NEGATIVE_LEXICON,
    POSITIVE_LEXICON,
    classify_reply,
    is_no,
    is_yes,
    resolve_pending,
)

__all__ = [
    "NEGATIVE_LEXICON",
    "POSITIVE_LEXICON",
    "classify_reply",
    "is_no",
    "is_yes",
    "resolve_pending",
]
