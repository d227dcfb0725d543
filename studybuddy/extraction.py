"""Turn uploaded reference documents into plain text for the prompt.

Dispatch is by filename suffix only. Each file is extracted all-or-nothing:
either the full text comes back or a ``FormatError``/``ParseError`` is raised
and nothing from that file is used.
"""

from __future__ import annotations

import asyncio
import csv
import io
import logging
from pathlib import PurePath
from typing import Callable, Dict, List, Optional, Sequence

from pypdf import PdfReader
from pypdf.errors import PdfReadError
from starlette.concurrency import run_in_threadpool

from .constants import MAX_UPLOAD_BYTES, SUFFIX_KINDS
from .errors import FormatError, ParseError
from .state import ExtractedDocument, FileKind, UploadedFile

logger = logging.getLogger(__name__)


def infer_kind(filename: str) -> FileKind:
    suffix = PurePath(filename or "").suffix.lower()
    kind_name = SUFFIX_KINDS.get(suffix)
    if kind_name is None:
        return FileKind.UNSUPPORTED
    return FileKind(kind_name)


def _decode_utf8(upload: UploadedFile, *, strip_bom: bool = False) -> str:
    encoding = "utf-8-sig" if strip_bom else "utf-8"
    try:
        return upload.data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise ParseError(
            f"{upload.filename} is not valid UTF-8 text",
            details={"filename": upload.filename, "position": exc.start},
        ) from exc


def _extract_text(upload: UploadedFile) -> str:
    return _decode_utf8(upload)


def _extract_csv(upload: UploadedFile) -> str:
    text = _decode_utf8(upload, strip_bom=True)
    try:
        rows = list(csv.reader(io.StringIO(text, newline="")))
    except csv.Error as exc:
        raise ParseError(
            f"{upload.filename} could not be parsed as CSV: {exc}",
            details={"filename": upload.filename},
        ) from exc
    return "\n".join(", ".join(cell.strip() for cell in row) for row in rows)


def _extract_pdf(upload: UploadedFile) -> str:
    try:
        reader = PdfReader(io.BytesIO(upload.data))
        if reader.is_encrypted:
            raise ParseError(
                f"{upload.filename} is encrypted",
                details={"filename": upload.filename},
            )
        # Empty pages are kept so page positions line up with the source.
        pages = [page.extract_text() or "" for page in reader.pages]
    except ParseError:
        raise
    except PdfReadError as exc:
        raise ParseError(
            f"{upload.filename} is not a readable PDF: {exc}",
            details={"filename": upload.filename},
        ) from exc
    except Exception as exc:
        # pypdf surfaces malformed streams through a range of builtin exceptions.
        raise ParseError(
            f"{upload.filename} could not be parsed as PDF",
            details={"filename": upload.filename, "reason": type(exc).__name__},
        ) from exc
    return "\n".join(pages)


_EXTRACTORS: Dict[FileKind, Callable[[UploadedFile], str]] = {
    FileKind.TEXT: _extract_text,
    FileKind.CSV: _extract_csv,
    FileKind.PDF: _extract_pdf,
}


def extract_document(upload: UploadedFile, *, max_bytes: int = MAX_UPLOAD_BYTES) -> ExtractedDocument:
    """Extract one upload into an ``ExtractedDocument``.

    Raises:
        FormatError: unsupported suffix or file larger than ``max_bytes``.
        ParseError: supported kind whose content cannot be decoded.
    """
    upload.kind = infer_kind(upload.filename)
    extractor = _EXTRACTORS.get(upload.kind)
    if extractor is None:
        supported = ", ".join(sorted(SUFFIX_KINDS))
        raise FormatError(
            f"Unsupported file type for {upload.filename!r}. Supported types: {supported}",
            details={"filename": upload.filename},
        )
    if len(upload.data) > max_bytes:
        raise FormatError(
            f"{upload.filename} exceeds the {max_bytes} byte upload limit",
            details={"filename": upload.filename, "size": len(upload.data)},
        )
    return ExtractedDocument(filename=upload.filename, text=extractor(upload))


async def extract_documents(
    uploads: Sequence[UploadedFile],
    *,
    max_bytes: int = MAX_UPLOAD_BYTES,
    session_id: Optional[str] = None,
) -> List[ExtractedDocument]:
    """Extract every upload off the event loop, preserving upload order.

    The first failing file aborts the whole batch.
    """
    if not uploads:
        return []

    async def _run(upload: UploadedFile) -> ExtractedDocument:
        try:
            return await run_in_threadpool(extract_document, upload, max_bytes=max_bytes)
        except (FormatError, ParseError) as exc:
            logger.warning(
                "Extraction failed for %s (session=%s): %s",
                upload.filename,
                session_id,
                exc.message,
            )
            raise

    return list(await asyncio.gather(*(_run(upload) for upload in uploads)))
