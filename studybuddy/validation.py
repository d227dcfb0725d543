"""Request validation applied before any stream is opened."""

from __future__ import annotations

import logging

from .constants import INJECTION_PATTERNS, MAX_INPUT_LENGTH
from .errors import InputError, SessionError

logger = logging.getLogger(__name__)


def validate_message(message: str, *, max_length: int = MAX_INPUT_LENGTH) -> str:
    """
    Validate the user's question.

    - Rejects empty or whitespace-only text
    - Enforces maximum length to prevent memory exhaustion
    - Logs obvious prompt injection attempts without blocking them

    Raises:
        InputError: If the message fails validation
    """
    if not message or not message.strip():
        raise InputError("Message cannot be empty")

    if len(message) > max_length:
        logger.warning("Input too long: %s chars (max: %s)", len(message), max_length)
        raise InputError(
            f"Message too long. Maximum {max_length} characters allowed.",
            details={"length": len(message), "max_length": max_length},
        )

    for pattern in INJECTION_PATTERNS:
        if pattern.search(message):
            logger.warning("Potential prompt injection detected: %s", pattern.pattern)
            break

    return message


def validate_session_id(session_id: str) -> str:
    if not session_id or not session_id.strip():
        raise SessionError("sessionId is required")
    return session_id
