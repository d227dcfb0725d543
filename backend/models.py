"""Pydantic schemas for the FastAPI backend."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class TurnModel(BaseModel):
    role: str = Field(..., description="Either 'user' or 'assistant'.")
    content: str = Field(..., description="Full text of the turn.")


class HistoryResponse(BaseModel):
    session_id: str = Field(..., description="Opaque session identifier.")
    turns: List[TurnModel] = Field(default_factory=list, description="Turns in chronological order.")


class ErrorDetail(BaseModel):
    error: str = Field(..., description="Machine-readable error code.")
    message: str = Field(..., description="Human-readable explanation.")
