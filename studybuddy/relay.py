"""Bridge provider fragments to a server-sent event stream and commit finished turns."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Tuple

from .constants import DONE_MARKER, ERROR_EVENT, STREAMING_TIMEOUT_SECONDS
from .errors import InferenceError, InferenceTimeoutError
from .inference import InferenceClient
from .state import PromptPayload, RelayState, SessionStore, Turn

logger = logging.getLogger(__name__)

DisconnectProbe = Callable[[], Awaitable[bool]]


def format_event(payload: dict, event: Optional[str] = None) -> str:
    """Encode one SSE frame. Content frames carry no ``event:`` line."""

    data = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    if event:
        return f"event: {event}\ndata: {data}\n\n"
    return f"data: {data}\n\n"


def parse_event(frame: str) -> Tuple[Optional[str], dict]:
    """Inverse of ``format_event`` for a single frame."""

    event: Optional[str] = None
    data = "{}"
    for line in frame.strip().splitlines():
        if line.startswith("event: "):
            event = line[len("event: ") :]
        elif line.startswith("data: "):
            data = line[len("data: ") :]
    return event, json.loads(data)


class StreamRelay:
    """Relays one exchange: forward every fragment, then commit both turns.

    The session store is written once the provider finishes, just before the
    terminal frame goes out. A failed, timed out, or abandoned exchange commits nothing.
    """

    def __init__(
        self,
        inference: InferenceClient,
        store: SessionStore,
        session_id: str,
        payload: PromptPayload,
        *,
        timeout_seconds: float = STREAMING_TIMEOUT_SECONDS,
    ) -> None:
        self.inference = inference
        self.store = store
        self.session_id = session_id
        self.payload = payload
        self.timeout_seconds = timeout_seconds
        self.state = RelayState.AWAITING_FIRST_FRAGMENT
        self.fragments: List[str] = []
        self._committed = False

    @property
    def reply(self) -> str:
        return "".join(self.fragments)

    async def events(self, is_disconnected: Optional[DisconnectProbe] = None) -> AsyncIterator[str]:
        if self.state is not RelayState.AWAITING_FIRST_FRAGMENT:
            raise RuntimeError("StreamRelay.events() can only be consumed once")

        logger.info(
            "Streaming reply for session %s (history=%s turns)",
            self.session_id,
            len(self.payload.turns) - 1,
        )
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds
        fragments = self.inference.generate(self.payload)
        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise InferenceTimeoutError(
                        f"Generation exceeded {self.timeout_seconds}s",
                        details={"session_id": self.session_id},
                    )
                try:
                    fragment = await asyncio.wait_for(fragments.__anext__(), timeout=remaining)
                except StopAsyncIteration:
                    break
                except asyncio.TimeoutError as exc:
                    raise InferenceTimeoutError(
                        f"Generation exceeded {self.timeout_seconds}s",
                        cause=exc,
                        details={"session_id": self.session_id},
                    ) from exc

                if is_disconnected is not None and await is_disconnected():
                    self._abandon("caller disconnected")
                    return

                if not fragment:
                    continue
                self.state = RelayState.STREAMING
                self.fragments.append(fragment)
                yield format_event({"content": fragment})

            # Committed before the terminal frame so a consumer that stops reading
            # at [DONE] still leaves the finished exchange in history.
            self._commit()
            logger.info(
                "Completed reply for session %s (%s fragments, %s chars)",
                self.session_id,
                len(self.fragments),
                len(self.reply),
            )
            yield format_event({"content": DONE_MARKER})
        except InferenceError as exc:
            self.state = RelayState.FAILED
            logger.error(
                "Inference failed for session %s after %s fragments: %s",
                self.session_id,
                len(self.fragments),
                exc.message,
            )
            yield self._error_frame(exc.error_code)
        except asyncio.CancelledError:
            if self.state is not RelayState.COMPLETED:
                self._abandon("stream cancelled")
            raise
        except GeneratorExit:
            if self.state is not RelayState.COMPLETED:
                self._abandon("consumer closed stream")
            raise
        except Exception:
            self.state = RelayState.FAILED
            logger.exception("Unexpected relay failure for session %s", self.session_id)
            yield self._error_frame(InferenceError.error_code)
        finally:
            await fragments.aclose()

    def _commit(self) -> None:
        if self._committed:
            return
        # No await between the two appends, so no other request observes half an exchange.
        self.store.append(self.session_id, self.payload.user_turn)
        self.store.append(self.session_id, Turn(role="assistant", content=self.reply))
        self._committed = True
        self.state = RelayState.COMPLETED

    def _abandon(self, reason: str) -> None:
        self.state = RelayState.FAILED
        logger.warning(
            "Abandoning stream for session %s after %s fragments: %s",
            self.session_id,
            len(self.fragments),
            reason,
        )

    @staticmethod
    def _error_frame(error_code: str) -> str:
        return format_event(
            {"error": error_code, "message": "The response could not be completed. Please try again."},
            event=ERROR_EVENT,
        )
