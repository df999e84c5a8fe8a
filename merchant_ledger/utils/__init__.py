"""Utilities module - Logging, PII masking, session."""

from .pii import mask_card_number, hash_identifier, redact_for_logging
from .logging import get_logger, AuditLogger
from .session import get_current_context, set_current_context, reset_current_context

__all__ = [
    "mask_card_number",
    "hash_identifier",
    "redact_for_logging",
    "get_logger",
    "AuditLogger",
    "get_current_context",
    "set_current_context",
    "reset_current_context",
]
