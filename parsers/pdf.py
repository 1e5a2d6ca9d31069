import fitz  # PyMuPDF
import logging

logger = logging.getLogger(__name__)


def pdf_page_count(data: bytes) -> int:
    """
    Number of pages in an in-memory PDF.
    Returns 0 when the bytes cannot be opened as a PDF.
    """
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            return doc.page_count
    except Exception as e:
        logger.warning("PDF could not be opened: %s", e)
        return 0


def pdf_to_text(data: bytes, max_chars: int = None) -> str:
    """Extract the text layer of an in-memory PDF (empty for scans)."""
    with fitz.open(stream=data, filetype="pdf") as doc:
        text = "\n".join(page.get_text("text") for page in doc)
    text = text.strip()
    if max_chars is not None:
        text = text[:max_chars]
    return text
