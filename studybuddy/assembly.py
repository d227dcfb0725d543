"""Prompt assembly: persona slot, prior turns, then one new user turn."""

from __future__ import annotations

from typing import Sequence

from .constants import DOCUMENT_LABEL, QUESTION_LABEL, REFERENCE_HEADER
from .state import ExtractedDocument, PromptPayload, Turn


def build_user_message(question: str, documents: Sequence[ExtractedDocument]) -> str:
    """Return the raw question, or the question plus a reference materials section."""

    if not documents:
        return question
    blocks = "".join(
        f"{DOCUMENT_LABEL.format(filename=document.filename)}\n{document.text}\n\n"
        for document in documents
    )
    return f"{QUESTION_LABEL} {question}\n\n{REFERENCE_HEADER}\n{blocks}"


def assemble_prompt(
    persona_instructions: str,
    history: Sequence[Turn],
    user_message: str,
    documents: Sequence[ExtractedDocument] = (),
) -> PromptPayload:
    # History is copied into a tuple so later appends to the session do not leak in.
    turns = tuple(history) + (Turn(role="user", content=build_user_message(user_message, documents)),)
    return PromptPayload(system=persona_instructions, turns=turns)
