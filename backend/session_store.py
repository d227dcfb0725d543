"""In-memory session store for caller-named chat sessions."""

from __future__ import annotations

from typing import Dict, List, Optional

from studybuddy.state import Turn


class InMemorySessionStore:
    """Holds conversation histories keyed by caller-supplied session IDs.

    Sessions live for the lifetime of the process. There is no eviction, so
    memory grows with the number of sessions and turns.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, List[Turn]] = {}

    def get_or_create(self, session_id: str) -> List[Turn]:
        return self._sessions.setdefault(session_id, [])

    def get(self, session_id: str) -> Optional[List[Turn]]:
        return self._sessions.get(session_id)

    def append(self, session_id: str, turn: Turn) -> None:
        self.get_or_create(session_id).append(turn)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
