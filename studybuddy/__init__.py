"""StudyBuddy package exposing extraction, prompt assembly, and the streaming relay."""

from .assembly import assemble_prompt, build_user_message
from .errors import (
    FormatError,
    InferenceError,
    InferenceTimeoutError,
    InputError,
    ParseError,
    RelayError,
    SessionError,
)
from .extraction import extract_document, extract_documents, infer_kind
from .inference import GenerationOptions, InferenceClient, OpenAIInferenceClient
from .relay import StreamRelay, format_event, parse_event
from .state import ExtractedDocument, FileKind, PromptPayload, RelayState, Turn, UploadedFile

__all__ = [
    "assemble_prompt",
    "build_user_message",
    "extract_document",
    "extract_documents",
    "infer_kind",
    "format_event",
    "parse_event",
    "GenerationOptions",
    "InferenceClient",
    "OpenAIInferenceClient",
    "StreamRelay",
    "ExtractedDocument",
    "FileKind",
    "PromptPayload",
    "RelayState",
    "Turn",
    "UploadedFile",
    "RelayError",
    "FormatError",
    "ParseError",
    "InputError",
    "SessionError",
    "InferenceError",
    "InferenceTimeoutError",
]
