"""Dialogue control for the Painel voice assistant.

Usage:
    controller = DialogueController.from_config(config, factory, channel, classifier, executor)
    await controller.run()
"""

from .controller import DialogueController
from .executor import ActionExecutor, ExecutionOutcome, run_blocking
from .state import (
    LISTENING_STATES,
    ControllerMessage,
    DialogueState,
    FollowUpContext,
    ResumeAmbient,
    RetryStart,
)

__all__ = [
    "LISTENING_STATES",
    "ActionExecutor",
    "ControllerMessage",
    "DialogueController",
    "DialogueState",
    "ExecutionOutcome",
    "FollowUpContext",
    "ResumeAmbient",
    "RetryStart",
    "run_blocking",
]
