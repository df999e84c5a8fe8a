"""PII masking utilities."""

import hashlib
import re


# Fields that never reach a log line in clear text
SENSITIVE_FIELDS = {
    "pan", "card_number", "tax_id", "vat_number",
    "password", "api_key", "token", "secret",
}

_CARD_NUMBER_RE = re.compile(r"\b(?:\d{4}[-\s]?){3}\d{1,4}\b")


def mask_card_number(card_number: str) -> str:
    """Mask a card number, showing only last 4 digits."""
    if not card_number:
        return ""
    # If already just last 4, return as-is with asterisks
    if len(card_number) <= 4:
        return f"****{card_number}"
    # Otherwise mask all but last 4
    return f"****{card_number[-4:]}"


def hash_identifier(value: str) -> str:
    """Hash a user or merchant identifier for audit logging."""
    return hashlib.sha256(value.encode()).hexdigest()[:12]


def mask_card_numbers_in_text(text: str) -> str:
    """Replace anything shaped like a full card number in free text."""
    if not text:
        return text
    return _CARD_NUMBER_RE.sub("[REDACTED_CREDIT_CARD]", text)


def redact_for_logging(data: dict) -> dict:
    """Redact sensitive fields from a dictionary for logging."""
    redacted = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_FIELDS:
            if key.lower() == "pan" and value:
                redacted[key] = mask_card_number(str(value))
            else:
                redacted[key] = "[REDACTED]"
        elif isinstance(value, dict):
            redacted[key] = redact_for_logging(value)
        elif isinstance(value, list):
            redacted[key] = [
                redact_for_logging(v) if isinstance(v, dict) else v
                for v in value
            ]
        elif isinstance(value, str):
            redacted[key] = mask_card_numbers_in_text(value)
        else:
            redacted[key] = value

    return redacted
