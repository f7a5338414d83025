"""
Shared runtime context for Nullistant.
"""
from nullistant.context.shared_context import PROCESSING_MODES, SharedContext, VoiceSettings

__all__ = ["PROCESSING_MODES", "SharedContext", "VoiceSettings"]
