"""Audit logger for identity changes."""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from ..config.schema import AuditConfig


class AuditLogger:
    """Append-only JSONL log of commands that change git config."""

    def __init__(self, config: AuditConfig, session_id: str):
        """Initialize audit logger.

        Args:
            config: Audit configuration
            session_id: Unique identifier for this invocation
        """
        self.config = config
        self.session_id = session_id
        self.log_dir = Path(config.log_dir).expanduser()
        self.log_file = None

        if config.enabled:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.log_file = self.log_dir / f"session_{timestamp}_{session_id}.jsonl"

    def _redact_sensitive(self, data: Any) -> Any:
        """Redact sensitive information from data.

        Args:
            data: Data to redact

        Returns:
            Redacted data
        """
        if isinstance(data, dict):
            return {k: self._redact_sensitive(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [self._redact_sensitive(item) for item in data]
        elif isinstance(data, str):
            redacted = data
            for pattern in self.config.redact_patterns:
                redacted = re.sub(pattern, "***REDACTED***", redacted, flags=re.IGNORECASE)
            return redacted
        else:
            return data

    def log_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Log an identity event.

        Args:
            event_type: Type of event (add, use, remove, uninstall)
            data: Event data
        """
        if not self.config.enabled:
            return

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "session_id": self.session_id,
            "event_type": event_type,
            **self._redact_sensitive(data),
        }

        self._write_log(log_entry)

    def log_failure(self, event_type: str, error: Exception) -> None:
        """Log a command that failed before completing."""
        self.log_event(
            event_type,
            {"success": False, "error": str(error), "error_type": type(error).__name__},
        )

    def _write_log(self, log_entry: Dict[str, Any]) -> None:
        """Write log entry to file.

        Args:
            log_entry: Log entry to write
        """
        with open(self.log_file, "a") as f:
            f.write(json.dumps(log_entry) + "\n")
