"""
Error taxonomy for Nullistant.

Every failure is recovered inside the session; these types exist so the
session controller can pick the recovery path, not to stop the assistant.
"""
from typing import Optional


class NullistantError(Exception):
    """Base exception for Nullistant"""
    pass


class CapabilityUnavailable(NullistantError):
    """Speech recognition or synthesis is not available on this system"""

    def __init__(self, capability: str, detail: str = ""):
        self.capability = capability
        self.detail = detail
        message = f"{capability} unavailable"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class RecognitionError(NullistantError):
    """Transient recognizer failure (audio, network, no speech)"""

    def __init__(self, code: str, recognizer: Optional[str] = None):
        self.code = code
        self.recognizer = recognizer
        super().__init__(f"recognition error '{code}'" + (f" in {recognizer}" if recognizer else ""))


class PermissionDenied(RecognitionError):
    """Microphone access refused; fatal until the user grants access again"""
    pass


# Recognizer error codes that mean the user (or platform) refused microphone access
PERMISSION_ERROR_CODES = frozenset({"not-allowed", "service-not-allowed", "permission-denied"})


def recognition_error_from_code(code: str, recognizer: Optional[str] = None) -> RecognitionError:
    """Map a recognizer error code onto the taxonomy"""
    if code in PERMISSION_ERROR_CODES:
        return PermissionDenied(code, recognizer)
    return RecognitionError(code, recognizer)


class NoIntentMatch(NullistantError):
    """No command-table entry matched the transcript"""

    def __init__(self, transcript: str):
        self.transcript = transcript
        super().__init__(f"no command matches '{transcript}'")


class NoTargetFound(NullistantError):
    """The resolver found no candidate above the acceptance threshold"""

    def __init__(self, transcript: str, reasoning: str):
        self.transcript = transcript
        self.reasoning = reasoning
        super().__init__(reasoning)


class ActionExecutionError(NullistantError):
    """An action dispatch raised"""

    def __init__(self, action: str, cause: Optional[BaseException] = None):
        self.action = action
        self.cause = cause
        super().__init__(f"action '{action}' failed" + (f": {cause}" if cause else ""))
