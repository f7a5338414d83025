"""
Command table for Nullistant.
Data-driven pattern -> action rules with exact, wildcard and partial matching.
"""
from nullistant.commands.definitions import CommandDefinition, SESSION_ACTIONS, default_commands
from nullistant.commands.table import CommandMatch, CommandTable

__all__ = ["CommandDefinition", "CommandMatch", "CommandTable", "SESSION_ACTIONS", "default_commands"]
