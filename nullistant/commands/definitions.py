"""
Command definitions for the command-table variant.

Each definition is data: patterns (at most one `*` wildcard), an action
identifier understood by the action executor or the session controller,
static args, and named parameter slots filled from the wildcard capture.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


CATEGORIES: Tuple[str, ...] = ("navigation", "interaction", "accessibility", "content", "system")


@dataclass(frozen=True)
class CommandDefinition:
    patterns: Tuple[str, ...]
    action: str
    description: str
    category: str
    requires_confirmation: bool = False
    parameters: Tuple[str, ...] = ()
    args: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def __post_init__(self):
        if not self.patterns:
            raise ValueError("CommandDefinition needs at least one pattern")
        for pattern in self.patterns:
            if pattern.count("*") > 1:
                raise ValueError(f"Pattern '{pattern}' has more than one wildcard")
            if "*" in pattern and not self.parameters:
                raise ValueError(f"Wildcard pattern '{pattern}' needs a named parameter")
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown command category: {self.category}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CommandDefinition":
        return cls(
            patterns=tuple(p.lower().strip() for p in d["patterns"]),
            action=d["action"],
            description=d.get("description", d["action"]),
            category=d.get("category", "system"),
            requires_confirmation=bool(d.get("requires_confirmation", False)),
            parameters=tuple(d.get("parameters", ())),
            args=dict(d.get("args", {})),
        )


# Actions the session controller handles itself rather than dispatching
SESSION_ACTIONS = frozenset({"help", "repeat_last", "confirm", "cancel", "stop_speech"})


def _cmd(patterns, action, description, category, **kwargs) -> CommandDefinition:
    return CommandDefinition(patterns=tuple(patterns), action=action, description=description, category=category, **kwargs)


def default_commands() -> List[CommandDefinition]:
    """The built-in command table"""
    return [
        # Navigation
        _cmd(["go back", "navigate back", "back"], "navigate", "Navigate to previous page", "navigation",
             args={"direction": "back"}),
        _cmd(["go forward", "navigate forward", "forward"], "navigate", "Navigate to next page", "navigation",
             args={"direction": "forward"}),
        _cmd(["refresh page", "reload page", "refresh"], "navigate", "Refresh current page", "navigation",
             requires_confirmation=True, args={"direction": "reload"}),
        _cmd(["scroll up", "page up"], "scroll", "Scroll up on page", "navigation", args={"dy": -300}),
        _cmd(["scroll down", "page down"], "scroll", "Scroll down on page", "navigation", args={"dy": 300}),
        _cmd(["scroll to top", "go to top"], "scroll_to", "Scroll to top of page", "navigation",
             args={"position": "top"}),
        _cmd(["scroll to bottom", "go to bottom"], "scroll_to", "Scroll to bottom of page", "navigation",
             args={"position": "bottom"}),

        # Interaction
        _cmd(["click", "activate", "press", "select"], "activate_focused", "Click the currently focused element",
             "interaction"),
        _cmd(["next element", "tab forward", "next"], "focus", "Focus next interactive element", "interaction",
             args={"which": "next"}),
        _cmd(["previous element", "tab backward", "previous"], "focus", "Focus previous interactive element",
             "interaction", args={"which": "previous"}),
        _cmd(["focus first", "go to first"], "focus", "Focus first interactive element", "interaction",
             args={"which": "first"}),
        _cmd(["focus last", "go to last"], "focus", "Focus last interactive element", "interaction",
             args={"which": "last"}),
        _cmd(["type *", "enter text *"], "type", "Type text into the focused field", "interaction",
             parameters=("text",)),
        _cmd(["press key *"], "keypress", "Press a key", "interaction", parameters=("key",)),

        # Content
        _cmd(["find *", "search for *", "look for *"], "find_text", "Find text on the current page", "content",
             parameters=("text",)),
        _cmd(["read page", "read content", "read all"], "read_page", "Read the main content of the page aloud",
             "content"),
        _cmd(["read selected", "read selection"], "read_selection", "Read currently selected text aloud",
             "content"),
        _cmd(["stop reading", "stop speech", "be quiet"], "stop_speech", "Stop current speech synthesis",
             "content"),

        # Accessibility
        _cmd(["enable high contrast", "turn on high contrast"], "toggle_feature", "Enable high contrast mode",
             "accessibility", args={"feature": "high_contrast", "enabled": True}),
        _cmd(["disable high contrast", "turn off high contrast"], "toggle_feature", "Disable high contrast mode",
             "accessibility", args={"feature": "high_contrast", "enabled": False}),
        _cmd(["increase font size", "make text larger", "bigger text"], "font_size", "Increase font size",
             "accessibility", args={"direction": "increase"}),
        _cmd(["decrease font size", "make text smaller", "smaller text"], "font_size", "Decrease font size",
             "accessibility", args={"direction": "decrease"}),
        _cmd(["enable dark mode", "turn on dark mode"], "toggle_feature", "Enable dark mode", "accessibility",
             args={"feature": "dark_mode", "enabled": True}),
        _cmd(["disable dark mode", "turn off dark mode"], "toggle_feature", "Disable dark mode", "accessibility",
             args={"feature": "dark_mode", "enabled": False}),

        # System
        _cmd(["help", "show commands", "what can i say"], "help", "Show available voice commands", "system"),
        _cmd(["repeat last command", "do that again"], "repeat_last", "Repeat the last executed command", "system"),
        _cmd(["yes", "confirm", "do it"], "confirm", "Confirm pending action", "system"),
        _cmd(["no", "cancel", "never mind"], "cancel", "Cancel pending action", "system"),
    ]
