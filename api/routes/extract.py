"""
Extraction API routes for Rapport.

Classifies conversation text into interests, important dates, places and
notes. /extract always answers with all four lists, including on errors,
so clients never need special-case parsing.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from config.settings import settings
from api.services.extraction import get_extraction_service
from api.services.facts import empty_envelope
from api.services.file_text import (
    FileTextError,
    cap_text,
    detect_file_type,
    extract_text,
    normalize_text,
)
from api.services.model_extractor import ExtractionError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["extract"])

PREVIEW_CHARS = 500


class ExtractRequest(BaseModel):
    """Request to classify a piece of conversation text."""
    # Any: non-string text is rejected by the handler with the envelope 400
    text: Any = Field(default=None, description="Text to classify")
    messageId: Optional[str] = Field(default=None, description="Client-side message ID (echoed in logs)")


class ExtractedItem(BaseModel):
    value: str


class ExtractResponse(BaseModel):
    """The four-list envelope returned by /extract."""
    interests: list[ExtractedItem]
    importantDates: list[ExtractedItem]
    places: list[ExtractedItem]
    notes: list[ExtractedItem]


def envelope_error(status_code: int, error: str, message: str) -> JSONResponse:
    """Error response carrying the same four empty lists as a success."""
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, **empty_envelope()},
    )


def _valid_text(text: Any) -> bool:
    return isinstance(text, str) and bool(text.strip())


@router.post("/extract", response_model=ExtractResponse)
async def extract(request: ExtractRequest):
    """
    **Classify conversation text** into the four item lists.

    Returns `{interests, importantDates, places, notes}`, each a list of
    `{value}`. Missing or blank text is a 400; a failed extraction is a 500.
    Both errors keep the four (empty) lists.
    """
    if not _valid_text(request.text):
        return envelope_error(
            400, "ValidationError", "Missing or invalid 'text' field in request body"
        )

    service = get_extraction_service()
    try:
        envelope = await service.extract(request.text)
    except ExtractionError as e:
        logger.error(f"AI extraction failed: {e}")
        return envelope_error(500, "AI extraction failed", str(e))
    except Exception as e:
        logger.exception(f"Unexpected extraction error: {e}")
        return envelope_error(500, "AI extraction failed", str(e))

    logger.info(
        f"Extracted for message {request.messageId or '-'}: "
        + ", ".join(f"{len(v)} {k}" for k, v in envelope.items())
    )
    return envelope


@router.post("/extract-facts")
async def extract_facts(request: ExtractRequest):
    """
    Return the model's raw fact list (debugging aid).

    Shape: `{intent, payload: {facts: [{type, value, source_text}]}, confidence, needs_clarification}`.
    """
    if not _valid_text(request.text):
        return JSONResponse(status_code=400, content={"error": "No text provided"})

    service = get_extraction_service()
    try:
        result = await service.extract_raw(request.text)
    except Exception as e:
        logger.error(f"Raw extraction failed: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    return result.to_dict()


async def _read_upload(file: Optional[UploadFile]) -> tuple[Optional[str], Optional[str], Optional[JSONResponse]]:
    """
    Read an upload into normalized, capped text.

    Returns:
        (file type, text, None) on success or (None, None, error response)
    """
    if file is None:
        return None, None, JSONResponse(
            status_code=400, content={"error": "No file uploaded. Use form-data key 'file'."}
        )

    kind = detect_file_type(file.content_type, file.filename)
    if kind is None:
        return None, None, JSONResponse(
            status_code=415, content={"error": "Unsupported file type. Use .txt, .pdf, or .docx"}
        )

    data = await file.read()
    if len(data) > settings.max_upload_bytes:
        return None, None, JSONResponse(
            status_code=413,
            content={"error": f"File too large. Limit is {settings.max_upload_bytes} bytes."},
        )

    try:
        text = normalize_text(extract_text(kind, data))
    except FileTextError as e:
        logger.warning(f"Failed to read upload {file.filename}: {e}")
        return None, None, JSONResponse(
            status_code=500, content={"error": "Failed to extract text", "details": str(e)}
        )

    if not text:
        return None, None, JSONResponse(
            status_code=400, content={"error": "No extractable text found in file."}
        )

    return kind, cap_text(text, settings.max_text_chars), None


@router.post("/api/extract/text")
async def extract_file_text(file: Optional[UploadFile] = File(default=None)):
    """Extract plain text from an uploaded .txt, .pdf or .docx file."""
    kind, text, error = await _read_upload(file)
    if error is not None:
        return error

    return {
        "type": kind,
        "extracted_text_length": len(text),
        "extracted_text_preview": text[:PREVIEW_CHARS],
        "text": text,
    }


@router.post("/api/extract/facts")
async def extract_file_facts(file: Optional[UploadFile] = File(default=None)):
    """Extract text from an uploaded file and classify it like /extract."""
    kind, text, error = await _read_upload(file)
    if error is not None:
        return error

    service = get_extraction_service()
    try:
        envelope = await service.extract(text)
    except Exception as e:
        logger.error(f"File fact extraction failed: {e}")
        return JSONResponse(
            status_code=500, content={"error": "Failed to extract facts", "details": str(e)}
        )

    return {
        "type": kind,
        "extracted_text_length": len(text),
        "extracted_text_preview": text[:PREVIEW_CHARS],
        "ai_result": envelope,
    }
