"""nullistant.core.assistant

Event loop and wiring for the Nullistant voice assistant.

Recognizer and synthesizer backends run on their own threads and only post
events into `events`; the loop hands each event to the SessionController
and runs due scheduler callbacks, so every piece of session state is touched
from this one thread.
"""
from queue import Empty, Queue
from typing import Callable, Optional

from nullistant.actions.dispatcher import ActionDispatcher, LoggingDispatcher
from nullistant.actions.executor import ActionExecutor
from nullistant.commands.table import CommandTable
from nullistant.context.shared_context import SharedContext
from nullistant.core.config import Config
from nullistant.core.errors import CapabilityUnavailable
from nullistant.core.events import COMMAND, WAKE, Event
from nullistant.core.logger import get_logger
from nullistant.core.scheduler import Scheduler
from nullistant.core.session import SessionController
from nullistant.stt.recognizer import ConsoleInput, ConsoleRecognizer
from nullistant.surface.providers import SurfaceProvider
from nullistant.surface.scanner import SurfaceScanner
from nullistant.tts.feedback import FeedbackArbiter
from nullistant.tts.synthesizer import LogSynthesizer, Synthesizer


DEFAULT_INTRO = (
    "Nullistant is ready. Say hey Nullistant, then tell me what to click, "
    "or say help for available commands."
)


class NullistantAssistant:
    """Main Nullistant coordinator"""

    def __init__(
        self,
        session: SessionController,
        events: Queue,
        scheduler: Scheduler,
        poll_sec: float = Config.LOOP_POLL_SEC,
    ):
        self.logger = get_logger()
        self.session = session
        self.events = events
        self.scheduler = scheduler
        self.poll_sec = poll_sec
        self.running = False

    def post(self, event: Event) -> None:
        """Thread-safe event sink handed to backends"""
        self.events.put(event)

    def start(self, stop_when: Optional[Callable[[], bool]] = None) -> None:
        """Activate the session and run the loop until stopped or Ctrl+C"""
        if self.running:
            self.logger.warning("Assistant already running")
            return

        self.logger.info("Starting Nullistant...")
        self.running = True
        self.session.activate()

        try:
            self._main_loop(stop_when)
        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
        finally:
            self.stop()

    def stop(self) -> None:
        if not self.running:
            return
        self.logger.info("Stopping Nullistant...")
        self.running = False
        self.session.shutdown()
        self.logger.info("Nullistant stopped")

    def _main_loop(self, stop_when: Optional[Callable[[], bool]] = None) -> None:
        while self.running:
            if stop_when is not None and stop_when():
                break
            self.run_once()

    def run_once(self) -> int:
        """
        Handle at most one event (waiting up to the next deadline) and run
        due callbacks. Returns the number of events handled.
        """
        timeout = self.poll_sec
        next_delay = self.scheduler.next_delay()
        if next_delay is not None:
            timeout = min(timeout, next_delay)

        handled = 0
        try:
            event = self.events.get(timeout=timeout) if timeout > 0 else self.events.get_nowait()
        except Empty:
            event = None
        if event is not None:
            self.session.handle_event(event)
            handled = 1
        self.scheduler.run_due()
        return handled

    def drain(self) -> int:
        """Handle every queued event and due callback without waiting"""
        handled = 0
        while True:
            try:
                event = self.events.get_nowait()
            except Empty:
                break
            self.session.handle_event(event)
            handled += 1
            self.scheduler.run_due()
        self.scheduler.run_due()
        return handled


def build_synthesizer(silent: bool, scheduler: Scheduler) -> Synthesizer:
    """Piper + sounddevice output, or log-only output when silent or unavailable"""
    logger = get_logger()
    if silent:
        return LogSynthesizer(scheduler=scheduler)
    try:
        # Imported here so PortAudio is only loaded when audio output is wanted
        from nullistant.tts.audio_player import AudioPlayer
        from nullistant.tts.piper_engine import PiperEngine, PiperSynthesizer

        engine = PiperEngine(
            exe_path=Config.PIPER_EXE_PATH,
            model_path=Config.PIPER_MODEL_PATH,
            speaker_id=Config.PIPER_SPEAKER_ID,
        )
        return PiperSynthesizer(engine, AudioPlayer(device=Config.TTS_OUTPUT_DEVICE))
    except (CapabilityUnavailable, OSError) as e:
        logger.warning(f"[TTS] {e}; speech will be logged instead")
        return LogSynthesizer(scheduler=scheduler)


def build_assistant(
    provider: SurfaceProvider,
    dispatcher: Optional[ActionDispatcher] = None,
    synthesizer: Optional[Synthesizer] = None,
    console: Optional[ConsoleInput] = None,
    context: Optional[SharedContext] = None,
    table: Optional[CommandTable] = None,
    scheduler: Optional[Scheduler] = None,
    require_wake: bool = True,
    intro_text: Optional[str] = DEFAULT_INTRO,
    silent: bool = False,
) -> NullistantAssistant:
    """Wire the console recognizers, speech output and session around one event queue"""
    events: Queue = Queue()
    scheduler = scheduler or Scheduler()
    context = context or SharedContext()
    sink = events.put

    synthesizer = synthesizer or build_synthesizer(silent, scheduler)
    synthesizer.bind(sink)

    console = console or ConsoleInput()
    wake = ConsoleRecognizer(WAKE, console, continuous=True, language=context.settings.language)
    command = ConsoleRecognizer(COMMAND, console, continuous=False, language=context.settings.language)
    wake.bind(sink)
    command.bind(sink)

    session = SessionController(
        scheduler=scheduler,
        feedback=FeedbackArbiter(synthesizer, context),
        scanner=SurfaceScanner(provider),
        executor=ActionExecutor(dispatcher or LoggingDispatcher(), scheduler),
        wake_recognizer=wake,
        command_recognizer=command,
        context=context,
        table=table,
        require_wake=require_wake,
        intro_text=intro_text,
    )
    return NullistantAssistant(session, events, scheduler)
