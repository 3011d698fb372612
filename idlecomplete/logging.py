"""Idle-cycle logging for debugging and analysis."""

import itertools
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

# Log directory
LOG_DIR = Path.home() / ".idlecomplete" / "logs"


def ensure_log_dir(log_dir: Path = LOG_DIR) -> Path:
    """Create logs directory if it doesn't exist."""
    if not log_dir.exists():
        log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


class CycleLogger:
    """Logs idle cycles, toggles and failures to a JSONL file."""

    def __init__(self, log_dir: Optional[Path] = None, enabled: bool = True):
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._prompt_sessions = itertools.count(1)
        self.enabled = enabled
        self.log_file = ensure_log_dir(Path(log_dir) if log_dir else LOG_DIR) / f"session_{self.session_id}.jsonl"

    def next_session_id(self) -> int:
        """Number the next prompt session logged to this file."""
        return next(self._prompt_sessions)

    def log_session_start(self, session_id: int) -> None:
        """Log the start of a prompt session."""
        self._log("session_start", session=session_id)

    def log_session_end(self, session_id: int) -> None:
        """Log the end of a prompt session."""
        self._log("session_end", session=session_id)

    def log_cycle(self, session_id: int, count: int, exceeded: bool, decision: str, executed: bool) -> None:
        """Log one idle cycle and the decision it produced."""
        self._log(
            "cycle",
            session=session_id,
            count=count,
            exceeded_bound=exceeded,
            decision=decision,
            executed=executed,
        )

    def log_stale_fire(self, session_id: int) -> None:
        """Log an idle fire dropped because the session is gone."""
        self._log("stale_fire", session=session_id)

    def log_toggle(self, enabled: bool) -> None:
        """Log an auto-complete toggle."""
        self._log("toggle", enabled=enabled)

    def log_error(self, kind: str, error: str) -> None:
        """Log error."""
        self._log("error", kind=kind, error=error)

    def _log(self, entry_type: str, **data) -> None:
        if not self.enabled:
            return
        entry = {"type": entry_type}
        entry.update(data)
        entry["timestamp"] = datetime.now().isoformat()
        self._write_entry(entry)

    def _write_entry(self, entry: dict) -> None:
        """Write a log entry to file."""
        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except Exception:
            pass  # Fail silently - logging should not break the prompt

    @property
    def log_path(self) -> Path:
        """Return path to current log file."""
        return self.log_file


# Global logger instance
_logger: Optional[CycleLogger] = None


def get_logger() -> CycleLogger:
    """Get or create the global logger instance."""
    global _logger
    if _logger is None:
        _logger = CycleLogger()
    return _logger


def init_logger(log_dir: Optional[Path] = None, enabled: bool = True) -> CycleLogger:
    """Initialize the global logger."""
    global _logger
    _logger = CycleLogger(log_dir=log_dir, enabled=enabled)
    return _logger
