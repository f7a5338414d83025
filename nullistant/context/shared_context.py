"""
Shared runtime context.

Holds the state several components read but only one writes: the intro
window flag (written by the FeedbackArbiter, read by anything that wants to
know whether the introduction is still playing) and the runtime-tunable
voice settings (written through `apply_settings`).
"""
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Tuple

from nullistant.core.config import Config


PROCESSING_MODES = ("intelligent", "commands", "hybrid")


@dataclass
class VoiceSettings:
    """Runtime-tunable voice settings"""
    enabled: bool = True
    language: str = "en-US"
    continuous: bool = True
    interim_results: bool = True
    max_alternatives: int = 1
    min_confidence: float = 0.7
    wake_phrases: Tuple[str, ...] = field(default_factory=tuple)
    confirmation_required: bool = True
    voice_feedback: bool = True
    processing_mode: str = "intelligent"

    @classmethod
    def from_config(cls) -> "VoiceSettings":
        return cls(
            language=Config.LANGUAGE,
            interim_results=Config.INTERIM_RESULTS,
            max_alternatives=Config.MAX_ALTERNATIVES,
            min_confidence=Config.MIN_CONFIDENCE,
            wake_phrases=tuple(Config.WAKE_PHRASES),
            confirmation_required=Config.CONFIRMATION_REQUIRED,
            voice_feedback=Config.VOICE_FEEDBACK,
            processing_mode=Config.PROCESSING_MODE,
        )

    def apply_settings(self, **changes: Any) -> Dict[str, Any]:
        """
        Validate and apply setting changes.

        Returns:
            Mapping of the keys that actually changed to their new values

        Raises:
            KeyError for unknown keys, ValueError for invalid values
        """
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise KeyError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        validated = {name: self._validate(name, value) for name, value in changes.items()}
        changed = {}
        for name, value in validated.items():
            if getattr(self, name) != value:
                setattr(self, name, value)
                changed[name] = value
        return changed

    @staticmethod
    def _validate(name: str, value: Any) -> Any:
        if name == "processing_mode":
            if value not in PROCESSING_MODES:
                raise ValueError(f"processing_mode must be one of {PROCESSING_MODES}, got {value!r}")
            return value
        if name == "min_confidence":
            value = float(value)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"min_confidence must be within [0, 1], got {value}")
            return value
        if name == "max_alternatives":
            value = int(value)
            if value < 1:
                raise ValueError("max_alternatives must be at least 1")
            return value
        if name == "wake_phrases":
            phrases = tuple(p.strip().lower() for p in value if p and p.strip())
            if not phrases:
                raise ValueError("wake_phrases must contain at least one phrase")
            return phrases
        if name == "language":
            if not value:
                raise ValueError("language must not be empty")
            return str(value)
        return bool(value)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SharedContext:
    """Context shared between the session, the arbiter and the CLI"""

    def __init__(self, settings: VoiceSettings = None):
        self.settings = settings or VoiceSettings.from_config()
        self.intro_active = False

    def apply_settings(self, **changes: Any) -> Dict[str, Any]:
        return self.settings.apply_settings(**changes)
