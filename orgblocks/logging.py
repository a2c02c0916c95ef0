"""Event logging for expansions and edit-context outcomes."""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

# Log directory
LOG_DIR = Path.home() / ".orgblocks" / "logs"


def ensure_log_dir() -> Path:
    """Create logs directory if it doesn't exist."""
    if not LOG_DIR.exists():
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    return LOG_DIR


class EventLogger:
    """Appends completion events to a JSONL file for debugging."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._log_file: Optional[Path] = None

    @property
    def log_path(self) -> Path:
        """Return path to current log file."""
        if self._log_file is None:
            self._log_file = ensure_log_dir() / f"session_{self.session_id}.jsonl"
        return self._log_file

    def log_expansion(self, selection: str, typed_prefix: str, begin: str, end: str) -> None:
        """Log an accepted candidate and the skeleton it produced."""
        if not self.enabled:
            return
        self._write_entry({
            "type": "expansion",
            "selection": selection,
            "typed_prefix": typed_prefix,
            "begin": begin,
            "end": end,
            "timestamp": datetime.now().isoformat(),
        })

    def log_edit_context(self, style: str, ran: bool, error: Optional[str] = None) -> None:
        """Log whether the dedicated block editor was entered."""
        if not self.enabled:
            return
        entry = {
            "type": "edit_context",
            "style": style,
            "ran": ran,
            "timestamp": datetime.now().isoformat(),
        }
        if error:
            entry["error"] = error
        self._write_entry(entry)

    def log_source_error(self, source: str, error: str) -> None:
        """Log a table source that could not be read."""
        if not self.enabled:
            return
        self._write_entry({
            "type": "source_error",
            "source": source,
            "error": error,
            "timestamp": datetime.now().isoformat(),
        })

    def log_error(self, error: str) -> None:
        """Log error."""
        if not self.enabled:
            return
        self._write_entry({
            "type": "error",
            "error": error,
            "timestamp": datetime.now().isoformat(),
        })

    def _write_entry(self, entry: dict) -> None:
        """Write a log entry to file."""
        try:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except Exception:
            pass  # Fail silently - logging should not break editing


# Global logger instance
_logger: Optional[EventLogger] = None


def get_logger() -> EventLogger:
    """Get or create the global logger instance."""
    global _logger
    if _logger is None:
        _logger = EventLogger()
    return _logger


def init_logger(enabled: bool = True) -> EventLogger:
    """Initialize the global logger."""
    global _logger
    _logger = EventLogger(enabled)
    return _logger
