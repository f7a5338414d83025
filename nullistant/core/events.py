"""
Events delivered to the session controller.

Recognizer and synthesizer backends never call into the core directly; they
emit these objects through an EventSink and the event loop hands them to the
controller one at a time.
"""
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict


# Recognizer roles; only one may be active at a time
WAKE = "wake"
COMMAND = "command"


@dataclass
class Event:
    """Base event"""
    timestamp: float = field(default_factory=time.monotonic, kw_only=True)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.__dict__)
        data["type"] = type(self).__name__
        return data


@dataclass
class RecognizerStarted(Event):
    recognizer: str


@dataclass
class RecognizerResult(Event):
    recognizer: str
    transcript: str
    is_final: bool
    confidence: float = 1.0


@dataclass
class RecognizerEnded(Event):
    recognizer: str


@dataclass
class RecognizerError(Event):
    recognizer: str
    code: str


@dataclass
class SynthesisStarted(Event):
    utterance_id: int


@dataclass
class SynthesisEnded(Event):
    utterance_id: int
    interrupted: bool = False


@dataclass
class SynthesisError(Event):
    utterance_id: int
    error: str = ""


EventSink = Callable[[Event], None]
