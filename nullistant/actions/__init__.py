"""
Action execution for Nullistant.
"""
from nullistant.actions.dispatcher import ActionDispatcher, DispatchRecord, LoggingDispatcher
from nullistant.actions.executor import ActionExecutor, ActionOutcome, DIRECT_ACTIONS

__all__ = [
    "ActionDispatcher",
    "ActionExecutor",
    "ActionOutcome",
    "DIRECT_ACTIONS",
    "DispatchRecord",
    "LoggingDispatcher",
]
