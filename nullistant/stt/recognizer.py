"""
Speech recognizer interface and the console backend.

Recognizers never touch session state. They report through an EventSink:
RecognizerStarted, RecognizerResult (interim or final), RecognizerEnded and
RecognizerError(code). A continuous recognizer keeps producing results until
stopped; a single-shot recognizer ends after its first final result.
"""
import sys
import threading
from typing import IO, Optional

from nullistant.core.events import (
    EventSink,
    RecognizerEnded,
    RecognizerError,
    RecognizerResult,
    RecognizerStarted,
)
from nullistant.core.logger import get_logger


class Recognizer:
    """Base class for speech recognizers"""

    def __init__(
        self,
        role: str,
        continuous: bool = False,
        interim_results: bool = True,
        language: str = "en-US",
        max_alternatives: int = 1,
        sink: Optional[EventSink] = None,
    ):
        self.role = role
        self.continuous = continuous
        self.interim_results = interim_results
        self.language = language
        self.max_alternatives = max_alternatives
        self.sink = sink
        self.active = False

    def bind(self, sink: EventSink) -> None:
        self.sink = sink

    def _emit(self, event) -> None:
        if self.sink is not None:
            self.sink(event)

    def start(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError


class ConsoleInput:
    """
    Reads lines from a text stream on a daemon thread and hands each line to
    whichever ConsoleRecognizer is listening. Lines typed while nobody
    listens are discarded.
    """

    def __init__(self, stream: Optional[IO[str]] = None):
        self.logger = get_logger()
        self.stream = stream or sys.stdin
        self._listener: Optional["ConsoleRecognizer"] = None
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.closed = threading.Event()

    def attach(self, recognizer: "ConsoleRecognizer") -> None:
        with self._lock:
            self._listener = recognizer
        self._ensure_thread()

    def detach(self, recognizer: "ConsoleRecognizer") -> None:
        with self._lock:
            if self._listener is recognizer:
                self._listener = None

    def _ensure_thread(self) -> None:
        if self._thread is None:
            self._thread = threading.Thread(target=self._read_loop, name="console-input", daemon=True)
            self._thread.start()

    def _read_loop(self) -> None:
        for line in self.stream:
            text = line.strip()
            if not text:
                continue
            with self._lock:
                listener = self._listener
            if listener is None:
                self.logger.debug(f"[STT] not listening, dropped: {text}")
                continue
            listener.deliver(text)
        self.logger.debug("[STT] console input closed")
        self.closed.set()


class ConsoleRecognizer(Recognizer):
    """Recognizer that treats each typed line as a final, fully confident result"""

    def __init__(self, role: str, console: ConsoleInput, continuous: bool = False, **kwargs):
        super().__init__(role, continuous=continuous, **kwargs)
        self.console = console
        self._lock = threading.Lock()

    def start(self) -> None:
        with self._lock:
            self.active = True
        self.console.attach(self)
        self._emit(RecognizerStarted(self.role))

    def stop(self) -> None:
        with self._lock:
            was_active = self.active
            self.active = False
        self.console.detach(self)
        if was_active:
            self._emit(RecognizerEnded(self.role))

    def deliver(self, text: str) -> None:
        """Called from the console thread with one typed line"""
        with self._lock:
            if not self.active:
                return
            if not self.continuous:
                self.active = False
        self._emit(RecognizerResult(self.role, text, is_final=True, confidence=1.0))
        if not self.continuous:
            self.console.detach(self)
            self._emit(RecognizerEnded(self.role))

    def fail(self, code: str) -> None:
        """Report a recognizer error and stop listening"""
        with self._lock:
            self.active = False
        self.console.detach(self)
        self._emit(RecognizerError(self.role, code))
