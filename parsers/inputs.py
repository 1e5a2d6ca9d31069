"""
Input collector: turns uploads and pasted text into what the AI client takes.

CV and job description may be a PDF, an image, or plain text pasted by the
recruiter. Word processor formats are refused rather than sent as binary
noise; the recruiter is asked to paste the text instead.
"""
import base64
import binascii
import logging
import os
import re
from typing import Optional, Tuple

from generation.errors import InputValidationError, UnsupportedFileError
from parsers.pdf import pdf_page_count
from schemas import DocumentInput, FilePayload

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"

EXTENSION_MIME = {
    ".pdf": PDF_MIME,
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".heic": "image/heic",
    ".heif": "image/heif",
}

# Formats people try to upload that the AI service cannot read
PASTE_INSTEAD = {".doc", ".docx", ".odt", ".rtf", ".pages", ".txt"}

MAGIC_MIME = (
    (b"%PDF", PDF_MIME),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF8", "image/gif"),
)

MIN_TEXT_CHARS = 2

DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


def guess_mime_type(filename: str, raw: bytes = b"", declared: Optional[str] = None) -> str:
    """Declared type first, then the extension, then the leading bytes."""
    if declared and declared not in ("application/octet-stream", ""):
        return declared.lower()
    ext = os.path.splitext(filename or "")[1].lower()
    if ext in EXTENSION_MIME:
        return EXTENSION_MIME[ext]
    if raw[:4] == b"RIFF" and raw[8:12] == b"WEBP":
        return "image/webp"
    for magic, mime in MAGIC_MIME:
        if raw.startswith(magic):
            return mime
    return "application/octet-stream"


def _is_supported(mime: str, allow_pdf: bool) -> bool:
    return mime.startswith("image/") or (allow_pdf and mime == PDF_MIME)


def _to_payload(filename: str, raw: bytes, mime: str) -> FilePayload:
    return FilePayload(filename=filename or "", mime_type=mime, data=base64.b64encode(raw).decode("ascii"))


def load_document(filename: str, raw: bytes, declared: Optional[str] = None) -> FilePayload:
    """Normalize a CV / JD upload. Accepts PDF and common image formats."""
    if not raw:
        raise InputValidationError(f"The file '{filename}' is empty.")

    ext = os.path.splitext(filename or "")[1].lower()
    if ext in PASTE_INSTEAD:
        raise UnsupportedFileError(f"Refused {ext} upload: {filename}")

    mime = guess_mime_type(filename, raw, declared)
    if not _is_supported(mime, allow_pdf=True):
        raise UnsupportedFileError(f"Refused {mime} upload: {filename}")

    if mime == PDF_MIME:
        pages = pdf_page_count(raw)
        if pages == 0:
            raise InputValidationError(
                f"The PDF '{filename}' could not be read. Export it again or paste its text instead."
            )
        logger.info("Loaded PDF %s (%d pages, %d bytes)", filename, pages, len(raw))
    else:
        logger.info("Loaded image %s (%s, %d bytes)", filename, mime, len(raw))

    return _to_payload(filename, raw, mime)


def load_photo(filename: str, raw: bytes, declared: Optional[str] = None) -> FilePayload:
    """Normalize a headshot upload. Images only."""
    if not raw:
        raise InputValidationError("The photo file is empty.")
    mime = guess_mime_type(filename, raw, declared)
    if not _is_supported(mime, allow_pdf=False):
        raise UnsupportedFileError(
            f"Refused {mime} photo: {filename}",
            user_message="The headshot must be an image (JPG, PNG or WEBP).",
        )
    return _to_payload(filename, raw, mime)


def resolve_text_or_file(text: Optional[str], payload: Optional[FilePayload], label: str) -> DocumentInput:
    """A file wins over pasted text; pasted text needs a couple of real characters."""
    if payload is not None:
        return payload
    if text and len(text.strip()) >= MIN_TEXT_CHARS:
        return text.strip()
    raise InputValidationError(f"{label} is required: upload a file or paste the text.")


def require_photo(payload: Optional[FilePayload]) -> FilePayload:
    if payload is None:
        raise InputValidationError("A headshot photo is required.")
    return payload


def payload_bytes(payload: FilePayload) -> bytes:
    return base64.b64decode(payload.data)


def to_data_uri(raw: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def from_data_uri(uri: str) -> Tuple[bytes, str]:
    m = DATA_URI_RE.match(uri or "")
    if not m:
        raise ValueError("Not a base64 data URI")
    try:
        raw = base64.b64decode(m.group("data"), validate=False)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 in data URI: {e}") from e
    return raw, m.group("mime")
