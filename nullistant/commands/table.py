"""
Command table: pattern -> CommandDefinition rule table and its matcher.

Matching order (first hit wins):
1. Exact pattern
2. Wildcard pattern (`*` captures the named parameter)
3. Partial: a pattern appears as whole words inside the transcript, or the
   transcript appears as whole words inside a pattern
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from nullistant.commands.definitions import CATEGORIES, CommandDefinition, default_commands
from nullistant.core.logger import get_logger


@dataclass
class CommandMatch:
    command: CommandDefinition
    pattern: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    kind: str = "exact"

    def call_args(self) -> Dict[str, Any]:
        """Static args merged with captured parameters"""
        merged = dict(self.command.args)
        merged.update(self.parameters)
        return merged


def _wildcard_regex(pattern: str) -> re.Pattern:
    head, _, tail = pattern.partition("*")
    return re.compile(re.escape(head) + r"(.+)" + re.escape(tail))


def _contains_words(haystack: str, needle: str) -> bool:
    return bool(re.search(r"(?<!\w)" + re.escape(needle) + r"(?!\w)", haystack))


class CommandTable:
    """Registry of voice commands keyed by pattern"""

    def __init__(self, commands: Optional[Iterable[CommandDefinition]] = None):
        self.logger = get_logger()
        self._commands: Dict[str, CommandDefinition] = {}
        for command in (default_commands() if commands is None else commands):
            self._add(command)

    def _add(self, command: CommandDefinition) -> None:
        for pattern in command.patterns:
            self._commands[pattern.lower().strip()] = command

    def register(self, command: CommandDefinition) -> None:
        """Register (or replace) every pattern of `command`"""
        self._add(command)
        self.logger.info(f"Registered voice command: {command.description}")

    def remove(self, pattern: str) -> bool:
        removed = self._commands.pop(pattern.lower().strip(), None) is not None
        if removed:
            self.logger.info(f"Removed voice command: {pattern}")
        return removed

    def patterns(self) -> List[str]:
        return list(self._commands)

    def commands(self) -> List[CommandDefinition]:
        """Distinct commands in registration order"""
        seen: List[CommandDefinition] = []
        for command in self._commands.values():
            if not any(command is s for s in seen):
                seen.append(command)
        return seen

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, pattern: str) -> bool:
        return pattern.lower().strip() in self._commands

    def match(self, transcript: str, allow_partial: bool = True) -> Optional[CommandMatch]:
        text = (transcript or "").lower().strip()
        if not text:
            return None

        command = self._commands.get(text)
        if command is not None:
            return CommandMatch(command, text, kind="exact")

        for pattern, command in self._commands.items():
            if "*" not in pattern:
                continue
            m = _wildcard_regex(pattern).search(text)
            if m:
                value = m.group(1).strip()
                if value:
                    return CommandMatch(command, pattern, {command.parameters[0]: value}, kind="wildcard")

        if not allow_partial:
            return None

        for pattern, command in self._commands.items():
            if "*" in pattern:
                continue
            if _contains_words(text, pattern) or _contains_words(pattern, text):
                return CommandMatch(command, pattern, kind="partial")

        return None

    def help_text(self, per_category: int = 2) -> str:
        """Spoken summary: the first pattern of up to `per_category` commands per category"""
        parts = ["Available voice commands: "]
        commands = self.commands()
        for category in CATEGORIES:
            in_category = [c for c in commands if c.category == category][:per_category]
            if in_category:
                parts.append(f"{category}: " + ", ".join(c.patterns[0] for c in in_category) + ". ")
        return "".join(parts).strip()
