"""
Speech recognition backends for Nullistant.
"""
from nullistant.stt.recognizer import ConsoleInput, ConsoleRecognizer, Recognizer

__all__ = ["ConsoleInput", "ConsoleRecognizer", "Recognizer"]
