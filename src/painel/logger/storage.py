"""JSONL storage for dialogue cycles."""

import json
import logging
from datetime import date
from pathlib import Path

from .interaction import DialogueCycle

logger = logging.getLogger(__name__)


class JSONLWriter:
    """JSONL file writer for dialogue cycles.

    Writes each cycle as a JSON line to daily log files.
    """

    def __init__(self, log_dir: Path) -> None:
        """Initialize JSONL writer.

        Args:
            log_dir: Directory for log files.
        """
        self._log_dir = log_dir
        log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def log_dir(self) -> Path:
        """Get the log directory."""
        return self._log_dir

    def _path_for(self, day: date) -> Path:
        return self._log_dir / f"{day.strftime('%Y-%m-%d')}.jsonl"

    def write(self, cycle: DialogueCycle) -> None:
        """Append a cycle to its daily log file.

        Write failures are logged and swallowed; the log is diagnostic only.
        """
        try:
            with open(self._path_for(cycle.timestamp.date()), "a", encoding="utf-8") as f:
                json.dump(cycle.to_dict(), f, ensure_ascii=False)
                f.write("\n")
        except OSError as e:
            logger.warning("Failed to write interaction log: %s", e)

    def read(self, target_date: date) -> list[DialogueCycle]:
        """Read cycles from a daily log file."""
        log_file = self._path_for(target_date)
        if not log_file.exists():
            return []

        with open(log_file, encoding="utf-8") as f:
            return [DialogueCycle.from_dict(json.loads(line)) for line in f if line.strip()]


__all__ = ["JSONLWriter"]
