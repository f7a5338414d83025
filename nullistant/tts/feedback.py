"""
Feedback arbiter: the single speech output channel.

Every spoken utterance cancels the one in flight; there is no queue. While
the introduction is playing (context.intro_active), LOW priority feedback is
dropped unless flagged `allow_during_intro`. The intro window closes when the
synthesizer reports the end (or failure) of the intro utterance itself.
"""
import itertools
from typing import Optional

from nullistant.context.shared_context import SharedContext
from nullistant.core.config import Config
from nullistant.core.events import Event, SynthesisEnded, SynthesisError, SynthesisStarted
from nullistant.core.logger import get_logger
from nullistant.tts.synthesizer import FeedbackPriority, FeedbackUtterance, Synthesizer


class FeedbackArbiter:
    """Decides what gets spoken and when the intro window closes"""

    def __init__(self, synthesizer: Optional[Synthesizer], context: SharedContext):
        self.logger = get_logger()
        self.synthesizer = synthesizer
        self.context = context
        self._ids = itertools.count(1)
        self.current: Optional[FeedbackUtterance] = None
        self.intro_utterance_id: Optional[int] = None

    @property
    def available(self) -> bool:
        return self.synthesizer is not None

    def speak(
        self,
        text: str,
        priority: FeedbackPriority = FeedbackPriority.LOW,
        allow_during_intro: bool = False,
        rate: Optional[float] = None,
        volume: Optional[float] = None,
        pitch: Optional[float] = None,
    ) -> Optional[FeedbackUtterance]:
        """
        Speak `text`, cancelling whatever is playing.

        Returns:
            The utterance handed to the synthesizer, or None if it was dropped
        """
        if not text or not text.strip():
            return None
        if not self.context.settings.voice_feedback:
            self.logger.debug(f"[TTS] voice feedback off, not speaking: {text}")
            return None
        if self.synthesizer is None:
            self.logger.debug(f"[TTS] no synthesizer, not speaking: {text}")
            return None
        if (
            self.context.intro_active
            and priority is FeedbackPriority.LOW
            and not allow_during_intro
        ):
            self.logger.debug(f"[TTS] intro playing, dropped: {text}")
            return None

        utterance = FeedbackUtterance(
            text=text,
            rate=Config.TTS_RATE if rate is None else rate,
            volume=Config.TTS_VOLUME if volume is None else volume,
            pitch=Config.TTS_PITCH if pitch is None else pitch,
            priority=priority,
            allow_during_intro=allow_during_intro,
            utterance_id=next(self._ids),
        )
        self.current = utterance
        self.synthesizer.speak(utterance)
        return utterance

    def announce_intro(self, text: str) -> Optional[FeedbackUtterance]:
        """Speak the introduction and open the intro window until it ends"""
        utterance = self.speak(text, priority=FeedbackPriority.HIGH, allow_during_intro=True)
        if utterance is not None:
            self.intro_utterance_id = utterance.utterance_id
            self.context.intro_active = True
            self.logger.debug(f"[TTS] intro window opened ({utterance.utterance_id})")
        return utterance

    def handle_event(self, event: Event) -> None:
        if isinstance(event, SynthesisStarted):
            self.logger.debug(f"[TTS] started {event.utterance_id}")
            return
        if not isinstance(event, (SynthesisEnded, SynthesisError)):
            return

        if isinstance(event, SynthesisError):
            self.logger.warning(f"[TTS] utterance {event.utterance_id} failed: {event.error}")
        if self.current is not None and self.current.utterance_id == event.utterance_id:
            self.current = None
        if self.intro_utterance_id is not None and event.utterance_id == self.intro_utterance_id:
            self.intro_utterance_id = None
            self.context.intro_active = False
            self.logger.debug("[TTS] intro window closed")

    def stop(self) -> None:
        """Cancel whatever is being spoken"""
        if self.synthesizer is not None:
            self.synthesizer.cancel()
        self.current = None
