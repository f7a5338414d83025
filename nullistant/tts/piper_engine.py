"""
Piper speech synthesis.

PiperEngine renders text to a temporary WAV via the Piper executable;
PiperSynthesizer plays it on a background thread and reports Started/Ended/
Error events to the session's event sink.
"""
import os
import shutil
import subprocess
import tempfile
import threading
from typing import TYPE_CHECKING, Optional

from nullistant.core.errors import CapabilityUnavailable
from nullistant.core.events import EventSink, SynthesisEnded, SynthesisError, SynthesisStarted
from nullistant.core.logger import get_logger
from nullistant.tts.synthesizer import FeedbackUtterance, Synthesizer

if TYPE_CHECKING:
    from nullistant.tts.audio_player import AudioPlayer

# Upper bound on waiting for a cancelled worker to exit
CANCEL_JOIN_SEC = 0.3


class PiperEngine:
    """Piper executable wrapper"""

    def __init__(
        self,
        exe_path: str = "piper",
        model_path: str = "./assets/piper/en_US-voice.onnx",
        speaker_id: Optional[int] = None,
        timeout_sec: float = 10.0,
    ):
        self.logger = get_logger()
        self.exe_path = exe_path
        self.model_path = model_path
        self.speaker_id = speaker_id
        self.timeout_sec = timeout_sec
        self._validate_setup()

    def _validate_setup(self) -> None:
        if self.exe_path != "piper" and not os.path.exists(self.exe_path):
            self.logger.warning(f"Piper executable not found at: {self.exe_path}, trying 'piper' from PATH")
            self.exe_path = "piper"
        if os.path.basename(self.exe_path) == self.exe_path and shutil.which(self.exe_path) is None:
            raise CapabilityUnavailable("speech synthesis", f"'{self.exe_path}' is not on PATH")
        if not os.path.exists(self.model_path):
            raise CapabilityUnavailable("speech synthesis", f"Piper model not found at: {self.model_path}")
        self.logger.info(f"Piper TTS initialized with model: {self.model_path}")

    def build_command(self, output_path: str, rate: float = 1.0) -> list:
        cmd = [self.exe_path, "-m", self.model_path, "-f", output_path]
        if self.speaker_id is not None:
            cmd.extend(["--speaker", str(self.speaker_id)])
        if rate > 0 and rate != 1.0:
            # Piper expresses speed as phoneme length; slower speech = longer phonemes
            cmd.extend(["--length_scale", f"{1.0 / rate:.3f}"])
        return cmd

    def synthesize_to_wav(self, text: str, rate: float = 1.0) -> str:
        """
        Render `text` to a temporary WAV file and return its path

        Raises:
            RuntimeError if Piper fails or produces no audio
        """
        if not text or not text.strip():
            raise ValueError("empty text")

        handle = tempfile.NamedTemporaryFile(suffix=".wav", delete=False)
        handle.close()
        output_path = handle.name
        cmd = self.build_command(output_path, rate)
        self.logger.debug(f"[TTS] running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                input=text.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout_sec,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            _remove(output_path)
            raise RuntimeError(f"Piper synthesis failed: {e}") from e

        if result.returncode != 0:
            _remove(output_path)
            stderr = result.stderr.decode("utf-8", errors="ignore").strip()
            raise RuntimeError(f"Piper exited with {result.returncode}: {stderr}")
        if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
            _remove(output_path)
            raise RuntimeError("Piper produced no output")
        return output_path


def _remove(path: str) -> None:
    try:
        os.unlink(path)
    except OSError:
        pass


class PiperSynthesizer(Synthesizer):
    """
    Speaks utterances with Piper on a worker thread.

    `speak` stops any in-flight utterance before starting the next. A worker
    still rendering when it is cancelled never reaches the player; it reports
    its utterance as interrupted instead. Events are posted through the
    sink from the worker thread; the sink must be thread-safe (the
    assistant's event queue is).
    """

    def __init__(
        self,
        engine: PiperEngine,
        player: Optional["AudioPlayer"] = None,
        sink: Optional[EventSink] = None,
    ):
        super().__init__(sink)
        self.logger = get_logger()
        self.engine = engine
        if player is None:
            # Imported here so PortAudio is only loaded when audio output is wanted
            from nullistant.tts.audio_player import AudioPlayer
            player = AudioPlayer()
        self.player = player
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def speak(self, utterance: FeedbackUtterance) -> None:
        self.cancel()
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(utterance, self._stop_event),
            name=f"piper-{utterance.utterance_id}",
            daemon=True,
        )
        self._thread.start()

    def _run(self, utterance: FeedbackUtterance, stop_event: threading.Event) -> None:
        wav_path = ""
        try:
            wav_path = self.engine.synthesize_to_wav(utterance.text, utterance.rate)
            if stop_event.is_set():
                self._emit(SynthesisEnded(utterance.utterance_id, interrupted=True))
                return
            self._emit(SynthesisStarted(utterance.utterance_id))
            completed = self.player.play_wav(wav_path, stop_event, utterance.volume)
            self._emit(SynthesisEnded(utterance.utterance_id, interrupted=not completed))
        except Exception as e:
            self.logger.error(f"[TTS] synthesis error: {e}")
            self._emit(SynthesisError(utterance.utterance_id, error=str(e)))
        finally:
            if wav_path:
                _remove(wav_path)

    def cancel(self) -> None:
        thread = self._thread
        if thread is None:
            return
        self._stop_event.set()
        self.player.stop()
        thread.join(timeout=CANCEL_JOIN_SEC)
        if thread.is_alive():
            self.logger.debug(f"[TTS] {thread.name} still rendering; it will report itself interrupted")
        self._thread = None
