"""
Confirmation gate for destructive commands.

Deterministic yes/no matching and resolution of the one pending action held
by the session's RuntimeState.

HARD RULES:
- Fixed lexicons only, no fuzzy parsing
- Pending action is taken out of the state BEFORE it runs (no double-run)
- No timeout: the pending action waits until a yes or a no arrives

Usage:
    result = resolve_pending(transcript, state, speak_fn=speak)
    if result == "executed":   # positive reply, action ran
    elif result == "failed":   # positive reply, action raised
    elif result == "cancelled":
    elif result == "ignored":  # not a yes/no; re-prompt, keep waiting
    elif result == "none":     # nothing pending
"""

import re
from typing import Callable, Literal, Optional, Tuple

from nullistant.core.logger import get_logger
from nullistant.core.state import RuntimeState


POSITIVE_LEXICON: Tuple[str, ...] = ("yes", "confirm", "do it", "proceed", "ok", "okay")
NEGATIVE_LEXICON: Tuple[str, ...] = ("no", "cancel", "never mind", "stop", "abort")

REPROMPT = "Please say yes to confirm or no to cancel"


def _phrase_pattern(phrases: Tuple[str, ...]) -> re.Pattern:
    # Longest first so "okay" is not shadowed by "ok"
    alternatives = sorted(phrases, key=len, reverse=True)
    body = "|".join(r"\s+".join(map(re.escape, p.split())) for p in alternatives)
    return re.compile(r"(?<![\w'])(?:" + body + r")(?![\w'])")


YES_PATTERN = _phrase_pattern(POSITIVE_LEXICON)
NO_PATTERN = _phrase_pattern(NEGATIVE_LEXICON)


def normalize(text: Optional[str]) -> str:
    """Lowercase, strip, collapse whitespace"""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text.lower().strip())


def _first_match(pattern: re.Pattern, text: str) -> Optional[int]:
    m = pattern.search(text)
    return m.start() if m else None


ReplyKind = Literal["yes", "no", "other"]


def classify_reply(text: Optional[str]) -> ReplyKind:
    """
    Classify a reply as yes, no or other.

    Lexicon phrases match as whole words anywhere in the reply. When both
    lexicons match ("no, don't do it"), the earlier phrase wins.
    """
    normalized = normalize(text)
    yes_at = _first_match(YES_PATTERN, normalized)
    no_at = _first_match(NO_PATTERN, normalized)
    if yes_at is None and no_at is None:
        return "other"
    if no_at is None:
        return "yes"
    if yes_at is None:
        return "no"
    return "yes" if yes_at < no_at else "no"


def is_yes(text: Optional[str]) -> bool:
    return classify_reply(text) == "yes"


def is_no(text: Optional[str]) -> bool:
    return classify_reply(text) == "no"


def is_confirmation_response(text: Optional[str]) -> bool:
    return classify_reply(text) != "other"


ResolveResult = Literal["executed", "failed", "cancelled", "ignored", "none"]


def resolve_pending(
    transcript: str,
    state: RuntimeState,
    speak_fn: Optional[Callable[[str], None]] = None,
) -> ResolveResult:
    """
    Resolve the session's pending action against a reply.

    - Nothing pending -> "none"
    - Positive reply  -> take pending, run it, "executed" (or "failed" if it raised)
    - Negative reply  -> take pending without running, "cancelled"
    - Anything else   -> state untouched, "ignored"

    `speak_fn` receives the spoken acknowledgement for each outcome.
    """
    logger = get_logger()

    if state.pending_action is None:
        return "none"

    reply = classify_reply(transcript)
    description = state.pending_action.description

    if reply == "yes":
        pending = state.take_pending()
        logger.info(f"[CONFIRM] confirmed -> running '{description}'")
        try:
            pending.run()
        except Exception as e:
            logger.error(f"[CONFIRM] execution error: {e}")
            _say(speak_fn, "Sorry, there was an error executing the command")
            return "failed"
        _say(speak_fn, "Command confirmed and executed")
        return "executed"

    if reply == "no":
        state.take_pending()
        logger.info(f"[CONFIRM] cancelled '{description}'")
        _say(speak_fn, "Command cancelled")
        return "cancelled"

    logger.debug(f"[CONFIRM] ignored - not yes/no: '{transcript[:50]}'")
    _say(speak_fn, REPROMPT)
    return "ignored"


def _say(speak_fn: Optional[Callable[[str], None]], text: str) -> None:
    if speak_fn is not None:
        speak_fn(text)
