"""
Audio utility functions for Nullistant speech output.
"""
import wave
from typing import Tuple

import numpy as np


def pcm_to_float32(frames: bytes, sample_width: int) -> np.ndarray:
    """
    Convert raw PCM bytes to float32 samples in [-1.0, 1.0]

    Args:
        frames: Raw PCM frames
        sample_width: Bytes per sample (1, 2 or 4)

    Returns:
        Float32 sample array (interleaved if multi-channel)
    """
    if sample_width == 2:
        audio = np.frombuffer(frames, dtype=np.int16).astype(np.float32) / 32768.0
    elif sample_width == 1:
        # 8-bit PCM is unsigned
        audio = (np.frombuffer(frames, dtype=np.uint8).astype(np.float32) - 128.0) / 128.0
    elif sample_width == 4:
        audio = np.frombuffer(frames, dtype=np.int32).astype(np.float32) / 2147483648.0
    else:
        raise ValueError(f"Unsupported sample width: {sample_width}")
    return np.clip(audio, -1.0, 1.0)


def apply_volume(audio: np.ndarray, volume: float) -> np.ndarray:
    """Scale samples by `volume` (clamped to [0, 1])"""
    volume = min(1.0, max(0.0, float(volume)))
    return (audio * volume).astype(np.float32)


def read_wav(path: str) -> Tuple[np.ndarray, int, int]:
    """
    Read a WAV file as float32

    Returns:
        (samples, sample_rate, channels); samples are shaped (n, channels)
        when channels > 1
    """
    with wave.open(path, "rb") as wf:
        sample_rate = wf.getframerate()
        channels = wf.getnchannels()
        audio = pcm_to_float32(wf.readframes(wf.getnframes()), wf.getsampwidth())
    if channels > 1:
        audio = audio.reshape(-1, channels)
    return audio, sample_rate, channels


def estimate_duration_ms(text: str, rate: float = 1.0, words_per_minute: float = 160.0) -> float:
    """Rough spoken duration of `text` at the given speech rate"""
    words = max(1, len(text.split()))
    rate = rate if rate > 0 else 1.0
    return words / (words_per_minute * rate) * 60000.0
