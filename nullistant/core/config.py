"""
Configuration module for Nullistant.
Centralizes all settings with environment variable overrides.
"""
import os
from typing import Dict, List, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


class Config:
    """Central configuration for Nullistant"""

    # Wake phrase detection
    WAKE_PHRASES: List[str] = [
        p.strip() for p in os.environ.get(
            "NULLISTANT_WAKE_PHRASES",
            "hey karunya,hi karunya,karunya,hey nullistant,nullistant"
        ).split(",") if p.strip()
    ]
    # Pause between wake phrase detection and opening the command recognizer
    WAKE_PAUSE_MS: int = int(os.environ.get("NULLISTANT_WAKE_PAUSE_MS", "500"))

    # Recognizer settings
    LANGUAGE: str = os.environ.get("NULLISTANT_LANGUAGE", "en-US")
    INTERIM_RESULTS: bool = _env_bool("NULLISTANT_INTERIM_RESULTS", "true")
    MAX_ALTERNATIVES: int = int(os.environ.get("NULLISTANT_MAX_ALTERNATIVES", "1"))
    # Results below this recognizer confidence are ignored
    MIN_CONFIDENCE: float = float(os.environ.get("NULLISTANT_MIN_CONFIDENCE", "0.7"))

    # Restart backoff after a transient recognizer error (doubles per failure)
    RECOGNIZER_RESTART_BASE_MS: int = int(os.environ.get("NULLISTANT_RESTART_BASE_MS", "1000"))
    RECOGNIZER_RESTART_MAX_MS: int = int(os.environ.get("NULLISTANT_RESTART_MAX_MS", "8000"))
    # Delay before restarting a continuous recognizer that ended on its own
    RECOGNIZER_RESUME_MS: int = int(os.environ.get("NULLISTANT_RESUME_MS", "100"))

    # Processing
    # "intelligent" (intent + target resolution), "commands" (command table), "hybrid"
    PROCESSING_MODE: str = os.environ.get("NULLISTANT_MODE", "intelligent")
    SETTLE_DELAY_MS: int = int(os.environ.get("NULLISTANT_SETTLE_DELAY_MS", "2000"))
    HIGHLIGHT_DELAY_MS: int = int(os.environ.get("NULLISTANT_HIGHLIGHT_DELAY_MS", "800"))
    COMMAND_HISTORY_SIZE: int = max(1, int(os.environ.get("NULLISTANT_HISTORY_SIZE", "50")))
    CONFIRMATION_REQUIRED: bool = _env_bool("NULLISTANT_CONFIRMATION_REQUIRED", "true")

    # Surface scanning
    MIN_ELEMENT_SIZE: int = int(os.environ.get("NULLISTANT_MIN_ELEMENT_SIZE", "10"))
    MAX_ENTITY_TEXT: int = int(os.environ.get("NULLISTANT_MAX_ENTITY_TEXT", "100"))

    # Speech feedback
    VOICE_FEEDBACK: bool = _env_bool("NULLISTANT_VOICE_FEEDBACK", "true")
    TTS_RATE: float = float(os.environ.get("NULLISTANT_TTS_RATE", "0.9"))
    TTS_VOLUME: float = float(os.environ.get("NULLISTANT_TTS_VOLUME", "0.8"))
    TTS_PITCH: float = float(os.environ.get("NULLISTANT_TTS_PITCH", "1.0"))
    PIPER_EXE_PATH: str = os.environ.get("NULLISTANT_PIPER_EXE_PATH", "piper")
    PIPER_MODEL_PATH: str = os.environ.get("NULLISTANT_PIPER_MODEL_PATH", "./assets/piper/en_US-voice.onnx")
    PIPER_SPEAKER_ID: Optional[int] = None if not os.environ.get("NULLISTANT_PIPER_SPEAKER_ID") else int(os.environ.get("NULLISTANT_PIPER_SPEAKER_ID"))
    TTS_OUTPUT_DEVICE: Optional[int] = None if not os.environ.get("NULLISTANT_TTS_OUTPUT_DEVICE") else int(os.environ.get("NULLISTANT_TTS_OUTPUT_DEVICE"))

    # Event loop
    LOOP_POLL_SEC: float = float(os.environ.get("NULLISTANT_LOOP_POLL_SEC", "0.05"))

    # Logging
    LOG_LEVEL: str = os.environ.get("NULLISTANT_LOG_LEVEL", "INFO")
    QUIET_MODE: bool = _env_bool("NULLISTANT_QUIET_MODE", "false")

    # Scoring weight overrides: NULLISTANT_SCORE_<FIELD>=<float>, e.g. NULLISTANT_SCORE_ACCEPT_THRESHOLD=0.5
    SCORE_ENV_PREFIX: str = "NULLISTANT_SCORE_"

    @classmethod
    def scoring_overrides(cls) -> Dict[str, float]:
        """Collect scoring weight overrides from the environment"""
        overrides: Dict[str, float] = {}
        for key, value in os.environ.items():
            if key.startswith(cls.SCORE_ENV_PREFIX):
                overrides[key[len(cls.SCORE_ENV_PREFIX):].lower()] = float(value)
        return overrides

    @classmethod
    def scoring_weights(cls):
        """Build resolver scoring weights with environment overrides applied"""
        from nullistant.resolver.target_resolver import ScoringWeights
        return ScoringWeights.from_overrides(cls.scoring_overrides())

    @classmethod
    def restart_backoff_ms(cls, attempt: int) -> int:
        """Backoff before restart number `attempt` (1-based)"""
        delay = cls.RECOGNIZER_RESTART_BASE_MS * (2 ** max(0, attempt - 1))
        return min(delay, cls.RECOGNIZER_RESTART_MAX_MS)
