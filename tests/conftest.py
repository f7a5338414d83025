"""
Shared fakes and fixtures for the Nullistant tests.

The fakes stand in for the speech backends and the UI: recognizers and the
synthesizer record calls instead of touching audio, the clock only moves
when a test advances it.
"""

import pytest

from nullistant.actions.dispatcher import LoggingDispatcher
from nullistant.actions.executor import ActionExecutor
from nullistant.context.shared_context import SharedContext, VoiceSettings
from nullistant.core.config import Config
from nullistant.core.events import (
    COMMAND,
    WAKE,
    RecognizerEnded,
    RecognizerError,
    RecognizerResult,
    SynthesisEnded,
)
from nullistant.core.scheduler import ManualClock, Scheduler
from nullistant.core.session import SessionController
from nullistant.stt.recognizer import Recognizer
from nullistant.surface.models import Rect, SurfaceElement, TargetableEntity
from nullistant.surface.providers import StaticSurfaceProvider
from nullistant.surface.scanner import SurfaceScanner
from nullistant.tts.feedback import FeedbackArbiter
from nullistant.tts.synthesizer import Synthesizer


# ============================================================================
# FAKES
# ============================================================================

class FakeRecognizer(Recognizer):
    """Recognizer that only records start/stop calls"""

    def __init__(self, role, continuous=False):
        super().__init__(role, continuous=continuous)
        self.starts = 0
        self.stops = 0

    def start(self):
        self.active = True
        self.starts += 1

    def stop(self):
        self.active = False
        self.stops += 1


class FakeSynthesizer(Synthesizer):
    """Synthesizer that records utterances; tests deliver end events themselves"""

    def __init__(self):
        super().__init__()
        self.spoken = []
        self.cancels = 0

    def speak(self, utterance):
        self.spoken.append(utterance)

    def cancel(self):
        self.cancels += 1

    @property
    def texts(self):
        return [u.text for u in self.spoken]


class FailingDispatcher(LoggingDispatcher):
    """Dispatcher whose effects raise"""

    def activate(self, ref):
        raise RuntimeError("element detached")

    def perform(self, effect, **args):
        raise RuntimeError(f"{effect} failed")


# ============================================================================
# SURFACE HELPERS
# ============================================================================

def element(ref, text, tag="button", rect=(40, 40, 160, 44), **kwargs):
    return SurfaceElement(ref=ref, tag=tag, rect=Rect(*rect), text=text, **kwargs)


def entity(text, clickable=True, role="button", rect=(40, 40, 160, 44), ref=None, **kwargs):
    return TargetableEntity(
        ref=ref or text,
        text=text,
        role=role,
        clickable=clickable,
        rect=Rect(*rect),
        **kwargs,
    )


def demo_elements():
    return [
        element("back-to-menu", "← Back to Menu", rect=(24, 24, 160, 44)),
        element("title", "Student Health Portal", tag="h1", rect=(220, 24, 600, 48)),
        element("emergency", "Emergency Call", rect=(1000, 24, 220, 56), background=(244, 67, 54)),
        element("open-chat", "Open Chat", tag="div", rect=(40, 200, 300, 120), has_click_handler=True),
        element("listen", "Listen", rect=(1180, 720, 80, 60), assistant_ui=True),
    ]


# ============================================================================
# SESSION HARNESS
# ============================================================================

class SessionHarness:
    """A SessionController wired to fakes and a manual clock"""

    def __init__(self, elements=None, mode="intelligent", require_wake=True, intro_text=None,
                 dispatcher=None, table=None, with_recognizers=True):
        self.clock = ManualClock()
        self.scheduler = Scheduler(self.clock)
        self.context = SharedContext(VoiceSettings.from_config())
        self.context.apply_settings(processing_mode=mode)
        self.synth = FakeSynthesizer()
        self.feedback = FeedbackArbiter(self.synth, self.context)
        self.provider = StaticSurfaceProvider(demo_elements() if elements is None else elements)
        self.dispatcher = dispatcher or LoggingDispatcher()
        self.executor = ActionExecutor(self.dispatcher, self.scheduler)
        self.wake = FakeRecognizer(WAKE, continuous=True) if with_recognizers else None
        self.command = FakeRecognizer(COMMAND) if with_recognizers else None
        self.session = SessionController(
            scheduler=self.scheduler,
            feedback=self.feedback,
            scanner=SurfaceScanner(self.provider),
            executor=self.executor,
            wake_recognizer=self.wake,
            command_recognizer=self.command,
            context=self.context,
            table=table,
            require_wake=require_wake,
            intro_text=intro_text,
        )

    @property
    def state(self):
        return self.session.state.current_state

    @property
    def spoken(self):
        return self.synth.texts

    def advance(self, ms):
        self.clock.advance_ms(ms)
        self.scheduler.run_due()

    def hear(self, role, text, is_final=True, confidence=1.0):
        self.session.handle_event(RecognizerResult(role, text, is_final=is_final, confidence=confidence))

    def end(self, role):
        self.session.handle_event(RecognizerEnded(role))

    def error(self, role, code):
        self.session.handle_event(RecognizerError(role, code))

    def wake_up(self):
        self.hear(WAKE, "hey nullistant", is_final=False)
        self.advance(Config.WAKE_PAUSE_MS)

    def say(self, text, confidence=1.0):
        """One single-shot command utterance: final result, then end"""
        self.hear(COMMAND, text, confidence=confidence)
        self.end(COMMAND)

    def command_cycle(self, text):
        self.wake_up()
        self.say(text)

    def finish_speech(self):
        """Report the end of the last utterance"""
        last = self.synth.spoken[-1]
        self.session.handle_event(SynthesisEnded(last.utterance_id))


@pytest.fixture
def harness():
    """Activated session in intelligent mode"""
    h = SessionHarness()
    h.session.activate()
    return h


@pytest.fixture
def make_harness():
    def _make(**kwargs):
        return SessionHarness(**kwargs)
    return _make
