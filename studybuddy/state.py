"""Dataclasses for turns, uploads, and the prompt payload sent to the provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple


class FileKind(str, Enum):
    TEXT = "text"
    PDF = "pdf"
    CSV = "csv"
    UNSUPPORTED = "unsupported"


class RelayState(str, Enum):
    """Lifecycle of one streamed exchange."""

    AWAITING_FIRST_FRAGMENT = "awaiting_first_fragment"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Turn:
    """One role-tagged message in a session history."""

    role: str
    content: str

    def to_message(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class UploadedFile:
    """A request-scoped upload: declared filename plus raw bytes."""

    filename: str
    data: bytes
    kind: FileKind = FileKind.UNSUPPORTED


@dataclass(frozen=True)
class ExtractedDocument:
    filename: str
    text: str


@dataclass(frozen=True)
class PromptPayload:
    """Provider-ready request. Built fresh per request and never mutated."""

    system: str
    turns: Tuple[Turn, ...] = field(default_factory=tuple)

    def to_messages(self, include_system: bool = True) -> List[Dict[str, str]]:
        messages: List[Dict[str, str]] = []
        if include_system and self.system:
            messages.append({"role": "system", "content": self.system})
        messages.extend(turn.to_message() for turn in self.turns)
        return messages

    @property
    def user_turn(self) -> Turn:
        return self.turns[-1]


class SessionStore(Protocol):
    """Mapping from session id to an append-only list of turns."""

    def get_or_create(self, session_id: str) -> List[Turn]:
        ...

    def get(self, session_id: str) -> Optional[List[Turn]]:
        ...

    def append(self, session_id: str, turn: Turn) -> None:
        ...
