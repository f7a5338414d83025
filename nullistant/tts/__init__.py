"""
Speech output for Nullistant.

PiperSynthesizer (and its sounddevice AudioPlayer) are imported from their
own modules so that the rest of the package loads without PortAudio.
"""
from nullistant.tts.feedback import FeedbackArbiter
from nullistant.tts.synthesizer import FeedbackPriority, FeedbackUtterance, LogSynthesizer, Synthesizer

__all__ = [
    "FeedbackArbiter",
    "FeedbackPriority",
    "FeedbackUtterance",
    "LogSynthesizer",
    "Synthesizer",
]
