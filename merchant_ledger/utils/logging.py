"""Structured audit logging with PII redaction."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from merchant_ledger.config import settings
from merchant_ledger.utils.pii import hash_identifier, mask_card_numbers_in_text, redact_for_logging


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, level.upper()))
    return logger


class AuditLogger:
    """Audit logger for ledger queries with PII protection."""

    def __init__(self, log_dir: Path | None = None, user_id: str | None = None):
        self.log_dir = log_dir or Path("logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.user_id = user_id
        self.user_hash = hash_identifier(user_id) if user_id else "anonymous"
        self._logger = get_logger(f"audit.{self.user_hash}", settings.log_level)

    def _get_log_file(self) -> Path:
        """Get the current audit log file path."""
        date_str = datetime.now().strftime("%Y-%m-%d")
        return self.log_dir / f"audit_{date_str}.jsonl"

    def _write_entry(self, entry: dict):
        """Write an audit entry to the log file."""
        entry["timestamp"] = datetime.now().isoformat()
        entry["user_hash"] = self.user_hash

        with open(self._get_log_file(), "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, default=str) + "\n")

    def log_query(
        self,
        operation: str,
        arguments: dict[str, Any],
        returned: int,
        has_next_page: bool,
    ):
        """Log a completed listing or lookup."""
        entry = {
            "event": "query",
            "operation": operation,
            "arguments": redact_for_logging(arguments),
            "returned": returned,
            "has_next_page": has_next_page,
        }
        self._write_entry(entry)
        self._logger.debug(f"{operation} returned {returned} record(s)")

    def log_query_failed(
        self,
        operation: str,
        arguments: dict[str, Any],
        error: Exception,
    ):
        """Log a query that ended in a typed error."""
        entry = {
            "event": "query_failed",
            "operation": operation,
            "arguments": redact_for_logging(arguments),
            "error_type": type(error).__name__,
            "error": mask_card_numbers_in_text(str(error)),
        }
        self._write_entry(entry)
        self._logger.warning(f"{operation} failed: {type(error).__name__}")

    def log_access_denied(
        self,
        role: str,
        field_name: str,
        severity: str = "warning",
    ):
        """Log a denied capability check."""
        entry = {
            "event": "access_denied",
            "role": role,
            "field": field_name,
            "severity": severity,
        }
        self._write_entry(entry)
        log_method = getattr(self._logger, severity.lower(), self._logger.warning)
        log_method(f"Access denied: role {role} on {field_name}")
