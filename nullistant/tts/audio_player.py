"""
Audio player for spoken feedback.
Supports interruptible playback with stop events.
"""
import threading
from typing import Optional

import numpy as np
import sounddevice as sd

from nullistant.core.logger import get_logger
from nullistant.tts.audio_utils import apply_volume, read_wav


class AudioPlayer:
    """Interruptible audio player for synthesized speech"""

    def __init__(self, device: Optional[int] = None, chunk_sec: float = 0.05):
        """
        Args:
            device: Optional sounddevice output device index
            chunk_sec: Playback chunk length; stop requests are honoured between chunks
        """
        self.logger = get_logger()
        self.device = device
        self.chunk_sec = chunk_sec
        self.current_stream: Optional[sd.OutputStream] = None
        self.stream_lock = threading.Lock()

    def play_wav(self, wav_path: str, stop_event: threading.Event, volume: float = 1.0) -> bool:
        """
        Play a WAV file in chunks until done or `stop_event` is set

        Returns:
            True if played to completion, False if interrupted

        Raises:
            OSError / ValueError / sd.PortAudioError on unreadable audio or device failure
        """
        audio, sample_rate, channels = read_wav(wav_path)
        return self.play(apply_volume(audio, volume), sample_rate, channels, stop_event)

    def play(self, audio: np.ndarray, sample_rate: int, channels: int, stop_event: threading.Event) -> bool:
        chunk_size = max(1, int(sample_rate * self.chunk_sec))
        total = len(audio)
        position = 0

        with self.stream_lock:
            stream = sd.OutputStream(
                samplerate=sample_rate,
                channels=channels,
                dtype="float32",
                device=self.device,
            )
            stream.start()
            self.current_stream = stream

        try:
            while position < total:
                if stop_event.is_set():
                    self.logger.debug("[TTS] playback interrupted")
                    return False
                end = min(position + chunk_size, total)
                if self.current_stream is not stream:
                    # stop() closed the stream from another thread
                    return False
                stream.write(audio[position:end])
                position = end
            self.logger.debug("[TTS] playback completed")
            return True
        finally:
            self._close_stream(stream)

    def _close_stream(self, stream: Optional[sd.OutputStream] = None) -> None:
        """Close `stream` (default: the current one); a newer stream is left playing"""
        with self.stream_lock:
            if stream is None:
                stream = self.current_stream
            if stream is None:
                return
            if self.current_stream is stream:
                self.current_stream = None
            if stream.closed:
                return
            try:
                stream.stop()
                stream.close()
            except sd.PortAudioError as e:
                self.logger.debug(f"[TTS] stream close error: {e}")

    def stop(self) -> None:
        """Stop current playback immediately"""
        self._close_stream()
