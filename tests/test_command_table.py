"""
Tests for the command table and its matcher.

Run with: python -m pytest tests/test_command_table.py -v
"""

import pytest

from nullistant.commands.definitions import CommandDefinition, default_commands
from nullistant.commands.table import CommandTable


@pytest.fixture
def table():
    return CommandTable()


# ============================================================================
# DEFINITION TESTS
# ============================================================================

class TestCommandDefinition:
    """Tests for definition validation."""

    def test_requires_pattern(self):
        with pytest.raises(ValueError):
            CommandDefinition(patterns=(), action="scroll", description="x", category="navigation")

    def test_single_wildcard_only(self):
        with pytest.raises(ValueError):
            CommandDefinition(patterns=("* and *",), action="type", description="x",
                              category="interaction", parameters=("a",))

    def test_wildcard_needs_parameter(self):
        with pytest.raises(ValueError):
            CommandDefinition(patterns=("find *",), action="find_text", description="x", category="content")

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            CommandDefinition(patterns=("x",), action="scroll", description="x", category="misc")

    def test_from_dict(self):
        command = CommandDefinition.from_dict({
            "patterns": ["Open Mail "],
            "action": "navigate",
            "args": {"url": "/mail"},
        })
        assert command.patterns == ("open mail",)
        assert command.category == "system"
        assert command.description == "navigate"
        assert command.args == {"url": "/mail"}

    def test_refresh_requires_confirmation(self):
        refresh = next(c for c in default_commands() if "refresh page" in c.patterns)
        assert refresh.requires_confirmation


# ============================================================================
# MATCHING TESTS
# ============================================================================

class TestMatch:
    """Tests for exact, wildcard and partial matching."""

    def test_exact(self, table):
        match = table.match("Scroll Down")
        assert match.kind == "exact"
        assert match.command.action == "scroll"
        assert match.call_args() == {"dy": 300}

    def test_wildcard_captures_parameter(self, table):
        match = table.match("find library hours")
        assert match.kind == "wildcard"
        assert match.command.action == "find_text"
        assert match.parameters == {"text": "library hours"}

    def test_wildcard_merges_with_static_args(self, table):
        table.register(CommandDefinition(
            patterns=("open tab *",), action="navigate", description="Open a tab",
            category="navigation", parameters=("target",), args={"new_tab": True},
        ))
        match = table.match("open tab grades")
        assert match.call_args() == {"new_tab": True, "target": "grades"}

    def test_wildcard_needs_non_empty_capture(self, table):
        match = table.match("type")
        assert match is None or match.kind != "wildcard"

    def test_partial_pattern_in_transcript(self, table):
        match = table.match("please scroll down a bit")
        assert match.kind == "partial"
        assert match.command.action == "scroll"

    def test_partial_transcript_in_pattern(self, table):
        match = table.match("contrast")
        assert match is not None
        assert match.kind == "partial"
        assert match.command.args["feature"] == "high_contrast"

    def test_partial_is_whole_word(self, table):
        """'no' must not match inside 'know'."""
        match = table.match("i know the answer")
        assert match is None or match.command.action != "cancel"

    def test_partial_can_be_disabled(self, table):
        assert table.match("please scroll down a bit", allow_partial=False) is None
        assert table.match("scroll down", allow_partial=False) is not None

    def test_exact_beats_partial(self, table):
        """'go back' is exact even though 'back' is also a pattern."""
        match = table.match("go back")
        assert match.kind == "exact"
        assert match.pattern == "go back"

    def test_empty(self, table):
        assert table.match("") is None
        assert table.match("   ") is None

    def test_no_match(self, table):
        assert table.match("sing me a song") is None


# ============================================================================
# REGISTRATION TESTS
# ============================================================================

class TestRegistration:
    """Tests for runtime registration and removal."""

    def test_register_adds_all_patterns(self, table):
        command = CommandDefinition(patterns=("open grades", "show grades"), action="navigate",
                                    description="Open grades", category="navigation")
        table.register(command)
        assert "open grades" in table
        assert "show grades" in table
        assert table.match("show grades").command is command

    def test_register_replaces_pattern(self, table):
        replacement = CommandDefinition(patterns=("scroll down",), action="scroll",
                                        description="Scroll a lot", category="navigation",
                                        args={"dy": 900})
        table.register(replacement)
        assert table.match("scroll down").call_args() == {"dy": 900}

    def test_remove(self, table):
        assert table.remove("Scroll Down")
        assert "scroll down" not in table
        assert not table.remove("scroll down")

    def test_empty_table(self):
        table = CommandTable([])
        assert len(table) == 0
        assert table.match("go back") is None

    def test_commands_are_distinct(self, table):
        commands = table.commands()
        assert len(commands) == len(default_commands())
        assert len(table) > len(commands)


# ============================================================================
# HELP TESTS
# ============================================================================

class TestHelpText:
    """Tests for the spoken help summary."""

    def test_two_per_category(self, table):
        text = table.help_text()
        assert text.startswith("Available voice commands:")
        assert "navigation: go back, go forward." in text
        assert "system: help, repeat last command." in text
        assert "refresh page" not in text

    def test_lists_every_category_present(self, table):
        text = table.help_text()
        for category in ("navigation", "interaction", "accessibility", "content", "system"):
            assert f"{category}:" in text
