"""CLI entry point for the StudyBuddy study assistant."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from openai import AsyncOpenAI

from backend.session_store import InMemorySessionStore
from prompts.prompt import load_persona_prompt
from studybuddy import (
    InferenceClient,
    OpenAIInferenceClient,
    RelayError,
    StreamRelay,
    UploadedFile,
    assemble_prompt,
    extract_documents,
    parse_event,
)
from studybuddy.config import RelayConfig, load_relay_config
from studybuddy.constants import DONE_MARKER, ERROR_EVENT
from studybuddy.validation import validate_message

CLI_SESSION_ID = "cli"


class StudyChat:
    """Runs single exchanges against the relay for a terminal user."""

    def __init__(
        self,
        inference: InferenceClient,
        config: RelayConfig,
        *,
        store: InMemorySessionStore | None = None,
        session_id: str = CLI_SESSION_ID,
    ) -> None:
        self.inference = inference
        self.config = config
        self.store = store or InMemorySessionStore()
        self.session_id = session_id
        self.persona = load_persona_prompt(config.persona_path)
        self.pending_files: List[UploadedFile] = []

    def attach(self, path: Path) -> None:
        self.pending_files.append(UploadedFile(filename=path.name, data=path.read_bytes()))

    async def ask(self, question: str, emit=print) -> bool:
        """Stream one answer through ``emit``. Returns True when the reply completed."""

        validate_message(question, max_length=self.config.max_message_length)
        uploads, self.pending_files = self.pending_files, []
        documents = await extract_documents(uploads, max_bytes=self.config.max_upload_bytes, session_id=self.session_id)
        history = self.store.get_or_create(self.session_id)
        payload = assemble_prompt(self.persona, history, question, documents)
        relay = StreamRelay(
            self.inference,
            self.store,
            self.session_id,
            payload,
            timeout_seconds=self.config.streaming_timeout_seconds,
        )
        completed = False
        async for frame in relay.events():
            event, data = parse_event(frame)
            if event == ERROR_EVENT:
                emit(f"\n[Error: {data.get('message')}]")
            elif data.get("content") == DONE_MARKER:
                emit("")
                completed = True
            else:
                emit(data.get("content", ""), end="", flush=True)
        return completed


def build_chat() -> StudyChat:
    load_dotenv()
    config = load_relay_config()
    client = AsyncOpenAI(api_key=config.openai_api_key)
    return StudyChat(OpenAIInferenceClient(client, config.generation_options()), config)


async def run(chat: StudyChat) -> None:
    print("StudyBuddy is ready. Use '/file <path>' to attach notes. (Type 'exit' or 'quit' to stop.)")
    while True:
        try:
            user_text = (await asyncio.to_thread(input, "You: ")).strip()
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            break

        if not user_text:
            continue

        if user_text.lower() in {"exit", "quit"}:
            print("Goodbye!")
            break

        if user_text.startswith("/file "):
            path = Path(user_text[len("/file ") :].strip()).expanduser()
            try:
                chat.attach(path)
            except OSError as exc:
                print(f"[Could not read {path}: {exc}]")
                continue
            print(f"[Attached {path.name}]")
            continue

        print("StudyBuddy: ", end="", flush=True)
        try:
            await chat.ask(user_text)
        except RelayError as exc:
            print(f"[{exc.message}]")
        print()


def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    asyncio.run(run(build_chat()))


if __name__ == "__main__":
    main()
