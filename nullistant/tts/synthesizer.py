"""
Speech synthesizer interface.

A synthesizer speaks one utterance at a time and reports progress through an
EventSink: SynthesisStarted when audio begins, SynthesisEnded when it stops
(interrupted=True when cancelled), SynthesisError on failure. `cancel()` stops
whatever is playing.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from nullistant.core.events import EventSink, SynthesisEnded, SynthesisStarted
from nullistant.core.logger import get_logger
from nullistant.core.scheduler import ScheduledCall, Scheduler
from nullistant.tts.audio_utils import estimate_duration_ms


class FeedbackPriority(Enum):
    LOW = "low"
    HIGH = "high"


@dataclass
class FeedbackUtterance:
    """One unit of synthesized speech"""
    text: str
    rate: float = 0.9
    volume: float = 0.8
    pitch: float = 1.0
    priority: FeedbackPriority = FeedbackPriority.LOW
    # May be spoken while the intro window is open even at LOW priority
    allow_during_intro: bool = False
    utterance_id: int = 0


class Synthesizer:
    """Base class for speech synthesizers"""

    def __init__(self, sink: Optional[EventSink] = None):
        self.sink = sink

    def bind(self, sink: EventSink) -> None:
        self.sink = sink

    def _emit(self, event) -> None:
        if self.sink is not None:
            self.sink(event)

    def speak(self, utterance: FeedbackUtterance) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        self.cancel()


class LogSynthesizer(Synthesizer):
    """
    Synthesizer that logs instead of producing audio.

    With a scheduler, the end event fires after the estimated spoken duration
    so the intro window behaves as it would with real speech; without one the
    end event fires immediately.
    """

    def __init__(self, sink: Optional[EventSink] = None, scheduler: Optional[Scheduler] = None):
        super().__init__(sink)
        self.logger = get_logger()
        self.scheduler = scheduler
        self._current: Optional[FeedbackUtterance] = None
        self._end_call: Optional[ScheduledCall] = None

    def speak(self, utterance: FeedbackUtterance) -> None:
        self.cancel()
        self._current = utterance
        self.logger.info(f"[SAY] {utterance.text}")
        self._emit(SynthesisStarted(utterance.utterance_id))

        if self.scheduler is None:
            self._finish(utterance.utterance_id)
            return
        self._end_call = self.scheduler.call_later(
            estimate_duration_ms(utterance.text, utterance.rate),
            lambda uid=utterance.utterance_id: self._finish(uid),
            label="speech end",
        )

    def _finish(self, utterance_id: int) -> None:
        if self._current is None or self._current.utterance_id != utterance_id:
            return
        self._current = None
        self._end_call = None
        self._emit(SynthesisEnded(utterance_id))

    def cancel(self) -> None:
        if self._current is None:
            return
        current = self._current
        self._current = None
        if self.scheduler is not None:
            self.scheduler.cancel(self._end_call)
        self._end_call = None
        self.logger.debug(f"[TTS] cancelled utterance {current.utterance_id}")
        self._emit(SynthesisEnded(current.utterance_id, interrupted=True))
