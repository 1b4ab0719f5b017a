"""
Logging helpers shared by services and routers.
"""

import logging
from typing import Any, Dict


SENSITIVE_FIELDS = {
    'secret', 'api_key', 'api-key', 'secret-key', 'token', 'authorization', 'payment_number'
}
PHONE_FIELDS = {'phone', 'recipient_phone'}


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def mask_phone(phone: str) -> str:
    """Keep the last three digits of a phone number, e.g. '********678'."""
    if not phone:
        return phone
    visible = phone[-3:]
    return "*" * (len(phone) - len(visible)) + visible


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of data that is safe to put in `extra=`.

    Courier credentials, bearer tokens and payment numbers are redacted
    (tokens keep their first 8 characters), phone numbers are masked, and
    nested dicts and lists of dicts are sanitized recursively.
    """
    sanitized = data.copy()

    for key, value in sanitized.items():
        lowered = key.lower()
        if any(sensitive in lowered for sensitive in SENSITIVE_FIELDS):
            if isinstance(value, str):
                if 'token' in lowered and len(value) > 8:
                    sanitized[key] = f"{value[:8]}..."
                else:
                    sanitized[key] = "***REDACTED***"
        elif lowered in PHONE_FIELDS and isinstance(value, str):
            sanitized[key] = mask_phone(value)
        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_log_data(v) if isinstance(v, dict) else v for v in value
            ]

    return sanitized


def describe_error(exc: BaseException) -> str:
    """
    Short, log-safe description of an exception.

    Database errors are reduced to the driver's own message; the SQL
    statement and its bound parameters (customer names, phones,
    addresses) are left out.
    """
    orig = getattr(exc, "orig", None)
    detail = str(orig) if orig is not None else str(exc)
    return f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__
