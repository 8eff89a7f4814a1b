"""Interaction logging for the Painel voice assistant.

Each completed dialogue cycle is appended to `<log_dir>/YYYY-MM-DD.jsonl`.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from .interaction import CycleOutcome, DialogueCycle
from .storage import JSONLWriter

if TYPE_CHECKING:
    from ..config import LoggingConfig


def create_interaction_log(config: "LoggingConfig | None") -> JSONLWriter | None:
    """Create the cycle log writer, or None when logging is disabled."""
    if config is None or not config.enabled:
        return None
    return JSONLWriter(Path(config.log_dir).expanduser())


__all__ = ["CycleOutcome", "DialogueCycle", "JSONLWriter", "create_interaction_log"]
