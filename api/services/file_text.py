"""
Text extraction from uploaded files.

Supported formats:
- text: .txt / .md / text/plain (UTF-8, latin-1 fallback)
- pdf: page text via PyPDF2
- docx: paragraph text read from word/document.xml inside the zip
"""
import html
import io
import logging
import re
import zipfile
import xml.etree.ElementTree as ET
from typing import Literal, Optional

from PyPDF2 import PdfReader

logger = logging.getLogger(__name__)

FileKind = Literal["text", "pdf", "docx"]

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class FileTextError(Exception):
    """An uploaded file could not be read."""
    pass


def detect_file_type(mime: Optional[str], filename: Optional[str]) -> Optional[FileKind]:
    """
    Detect a supported file type from MIME type or extension.

    Returns:
        "text", "pdf", "docx", or None if unsupported
    """
    mime = (mime or "").lower()
    name = (filename or "").lower()

    if mime == "text/plain" or name.endswith(".txt") or name.endswith(".md"):
        return "text"
    if mime == "application/pdf" or name.endswith(".pdf"):
        return "pdf"
    if mime == DOCX_MIME or name.endswith(".docx"):
        return "docx"
    return None


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def _extract_pdf(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    pages = []
    for index, page in enumerate(reader.pages):
        try:
            pages.append(page.extract_text() or "")
        except Exception as e:
            logger.warning(f"PDF page {index + 1} text extraction failed: {e}")
    return "\n".join(pages)


def _extract_docx(data: bytes) -> str:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        xml_bytes = zf.read("word/document.xml")

    root = ET.fromstring(xml_bytes)
    paragraphs = []
    for p in root.iter():
        if not str(p.tag).endswith("}p"):
            continue
        parts = [t.text for t in p.iter() if str(t.tag).endswith("}t") and t.text]
        line = "".join(parts).strip()
        if line:
            paragraphs.append(line)
    return html.unescape("\n".join(paragraphs))


def extract_text(kind: FileKind, data: bytes) -> str:
    """
    Extract raw text from file bytes.

    Raises:
        FileTextError: If the file is corrupt or unreadable
    """
    try:
        if kind == "text":
            text = _decode_text(data)
        elif kind == "pdf":
            text = _extract_pdf(data)
        else:
            text = _extract_docx(data)
    except Exception as e:
        raise FileTextError(f"Failed to read {kind} file: {e}") from e
    return text.strip()


def normalize_text(text: str) -> str:
    """Normalize line endings and whitespace runs; at most one blank line in a row."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def cap_text(text: str, limit: int) -> str:
    """Truncate text to at most limit characters."""
    return text[:limit] if len(text) > limit else text
