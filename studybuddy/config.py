"""Configuration helpers shared by the HTTP backend and the terminal client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_CHAT_MODEL,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_TEMPERATURE,
    MAX_INPUT_LENGTH,
    MAX_UPLOAD_BYTES,
    STREAMING_TIMEOUT_SECONDS,
)
from .inference import GenerationOptions

load_dotenv()


def _path_from_env(var_name: str) -> Optional[Path]:
    value = os.getenv(var_name)
    if value:
        return Path(value).expanduser()
    return None


def _coerce_int(value: Optional[str], fallback: int) -> int:
    try:
        return int(value) if value is not None else fallback
    except ValueError:
        return fallback


def _coerce_float(value: Optional[str], fallback: float) -> float:
    try:
        return float(value) if value is not None else fallback
    except ValueError:
        return fallback


def _read_openai_key() -> str:
    key = os.getenv("OPENAI_API_KEY")
    if not key:
        raise ValueError("Set OPENAI_API_KEY in your environment.")
    return key


@dataclass
class RelayConfig:
    """Holds runtime settings for extraction, generation, and streaming."""

    openai_api_key: str
    chat_model: str = DEFAULT_CHAT_MODEL
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    streaming_timeout_seconds: int = STREAMING_TIMEOUT_SECONDS
    max_message_length: int = MAX_INPUT_LENGTH
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    persona_path: Optional[Path] = None

    def generation_options(self) -> GenerationOptions:
        return GenerationOptions(
            model=self.chat_model,
            max_output_tokens=self.max_output_tokens,
            temperature=self.temperature,
        )


def load_relay_config() -> RelayConfig:
    """Load configuration from .env with safe defaults."""

    return RelayConfig(
        openai_api_key=_read_openai_key(),
        chat_model=os.getenv("OPENAI_MODEL", DEFAULT_CHAT_MODEL),
        max_output_tokens=_coerce_int(os.getenv("MAX_OUTPUT_TOKENS"), DEFAULT_MAX_OUTPUT_TOKENS),
        temperature=_coerce_float(os.getenv("TEMPERATURE"), DEFAULT_TEMPERATURE),
        streaming_timeout_seconds=_coerce_int(os.getenv("STREAMING_TIMEOUT_SECONDS"), STREAMING_TIMEOUT_SECONDS),
        max_message_length=_coerce_int(os.getenv("MAX_MESSAGE_LENGTH"), MAX_INPUT_LENGTH),
        max_upload_bytes=_coerce_int(os.getenv("MAX_UPLOAD_BYTES"), MAX_UPLOAD_BYTES),
        persona_path=_path_from_env("STUDY_PROMPT_PATH"),
    )
