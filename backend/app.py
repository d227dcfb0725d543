"""FastAPI backend that relays study questions to the model as a server-sent event stream."""

import logging
import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from openai import AsyncOpenAI
from slowapi.errors import RateLimitExceeded

from prompts.prompt import load_persona_prompt
from studybuddy import (
    InferenceClient,
    OpenAIInferenceClient,
    RelayError,
    StreamRelay,
    UploadedFile,
    assemble_prompt,
    extract_documents,
)
from studybuddy.config import RelayConfig, load_relay_config
from studybuddy.validation import validate_message, validate_session_id

from .middleware.rate_limit import MESSAGE_RATE_LIMIT, limiter, rate_limit_exceeded_handler
from .models import ErrorDetail, HistoryResponse, TurnModel
from .session_store import InMemorySessionStore

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

session_store = InMemorySessionStore()


@lru_cache(maxsize=1)
def get_config() -> RelayConfig:
    return load_relay_config()


@lru_cache(maxsize=1)
def get_inference_client() -> InferenceClient:
    config = get_config()
    client = AsyncOpenAI(api_key=config.openai_api_key)
    return OpenAIInferenceClient(client, config.generation_options())


def get_session_store() -> InMemorySessionStore:
    return session_store


def get_persona(config: RelayConfig = Depends(get_config)) -> str:
    return load_persona_prompt(config.persona_path)


app = FastAPI(title="StudyBuddy Relay API", version="0.1.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    # Only errors raised before a stream opens reach this handler.
    detail = ErrorDetail(error=exc.error_code, message=exc.message)
    return JSONResponse(status_code=400, content={"detail": detail.model_dump()})


@app.get("/healthz")
def health_check() -> dict:
    return {"status": "ok"}


@app.get("/sessions/{session_id}/history", response_model=HistoryResponse)
def read_history(
    session_id: str,
    store: InMemorySessionStore = Depends(get_session_store),
) -> HistoryResponse:
    history = store.get(session_id)
    if history is None:
        raise HTTPException(status_code=404, detail="Unknown session")
    return HistoryResponse(
        session_id=session_id,
        turns=[TurnModel(role=turn.role, content=turn.content) for turn in history],
    )


@app.post("/chat")
@limiter.limit(MESSAGE_RATE_LIMIT)
async def chat(
    request: Request,
    message: str = Form(...),
    session_id: str = Form(..., alias="sessionId"),
    files: Optional[List[UploadFile]] = File(None),
    config: RelayConfig = Depends(get_config),
    persona: str = Depends(get_persona),
    inference: InferenceClient = Depends(get_inference_client),
    store: InMemorySessionStore = Depends(get_session_store),
) -> StreamingResponse:
    validate_session_id(session_id)
    validate_message(message, max_length=config.max_message_length)

    uploads = [UploadedFile(filename=upload.filename or "", data=await upload.read()) for upload in files or []]
    documents = await extract_documents(uploads, max_bytes=config.max_upload_bytes, session_id=session_id)

    history = store.get_or_create(session_id)
    payload = assemble_prompt(persona, history, message, documents)
    logger.info(
        "Accepted message for session %s (%s prior turns, %s files)",
        session_id,
        len(history),
        len(documents),
    )

    relay = StreamRelay(
        inference,
        store,
        session_id,
        payload,
        timeout_seconds=config.streaming_timeout_seconds,
    )
    return StreamingResponse(
        relay.events(is_disconnected=request.is_disconnected),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
