"""Limits, defaults, and wire constants for the relay."""

import re

# Input limits
MAX_INPUT_LENGTH = 10000
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

# Provider defaults
DEFAULT_CHAT_MODEL = "gpt-4o"
DEFAULT_MAX_OUTPUT_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.7
STREAMING_TIMEOUT_SECONDS = 300  # 5 minutes

# Stream wire format
DONE_MARKER = "[DONE]"
ERROR_EVENT = "error"

# Prompt layout
QUESTION_LABEL = "User Question:"
REFERENCE_HEADER = "Reference Materials:"
DOCUMENT_LABEL = "Content from {filename}:"

# Suffix -> kind name, matched case-insensitively
SUFFIX_KINDS = {
    ".txt": "text",
    ".pdf": "pdf",
    ".csv": "csv",
}

# Phrases that hint at attempts to override the persona. Logged, never blocked.
INJECTION_PATTERNS = [
    re.compile(r"ignore\s+(?:all\s+)?(?:previous|above|prior)\s+(?:instructions|prompts?|commands?)", re.IGNORECASE),
    re.compile(r"disregard\s+(?:all\s+)?(?:previous|above|prior)\s+(?:instructions|prompts?)", re.IGNORECASE),
    re.compile(r"new\s+instructions?:", re.IGNORECASE),
    re.compile(r"system\s+prompt:", re.IGNORECASE),
    re.compile(r"you\s+are\s+now\s+(?:a|an)", re.IGNORECASE),
    re.compile(r"\[SYSTEM\]", re.IGNORECASE),
]
