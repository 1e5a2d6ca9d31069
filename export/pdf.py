"""
PDF export for the EIV template.

Each logical page from the paginator is drawn on its own A4 portrait page with
PyMuPDF, then rasterized to JPEG and placed full-bleed on a page of the output
document, so the file looks the same in every viewer. One logical page always
becomes exactly one physical page.
"""
import re
import unicodedata
import logging
from typing import List, Optional

import fitz  # PyMuPDF
import requests

import config
from export.template import BRAND_COLOR, DEFAULT_LOGO_URL, MAIN_CSS, SIDEBAR_CSS, render_page
from layout.paginate import paginate_result
from parsers.inputs import from_data_uri
from schemas import CVResult, Page, PaginationConfig

logger = logging.getLogger(__name__)

A4 = fitz.paper_rect("a4")  # 595 x 842 pt, 210 x 297 mm
SIDEBAR_WIDTH = A4.width * 0.35
MARGIN = 28
PHOTO_RECT = fitz.Rect(MARGIN, MARGIN, SIDEBAR_WIDTH - MARGIN, MARGIN + (SIDEBAR_WIDTH - 2 * MARGIN) * 4 / 3)
SIDEBAR_TEXT_RECT = fitz.Rect(MARGIN, PHOTO_RECT.y1 + 20, SIDEBAR_WIDTH - MARGIN, A4.height - MARGIN)
MAIN_X = SIDEBAR_WIDTH + 28
LOGO_RECT = fitz.Rect(A4.width - 24 - 90, 22, A4.width - 24, 62)
NAME_RECT = fitz.Rect(MAIN_X, 40, LOGO_RECT.x0 - 10, 110)
BODY_RECT = fitz.Rect(MAIN_X, 115, A4.width - 28, A4.height - 40)
FOOTER_RECT = fitz.Rect(A4.width - 180, A4.height - 30, A4.width - 24, A4.height - 14)

LOGO_TIMEOUT = 10


def _hex_to_rgb(value: str):
    value = value.lstrip("#")
    return tuple(int(value[i:i + 2], 16) / 255 for i in (0, 2, 4))


def load_image(url: Optional[str]) -> Optional[bytes]:
    """Image bytes from a data URI or an http(s) URL. None when unavailable."""
    if not url:
        return None
    if url.startswith("data:"):
        try:
            return from_data_uri(url)[0]
        except ValueError as e:
            logger.warning("Ignoring bad image data URI: %s", e)
            return None
    if url.startswith(("http://", "https://")):
        try:
            response = requests.get(url, timeout=LOGO_TIMEOUT)
            response.raise_for_status()
            return response.content
        except requests.exceptions.RequestException as e:
            logger.warning("Could not fetch image %s: %s", url, e)
            return None
    logger.warning("Unsupported image reference: %s", url[:60])
    return None


def _insert_image(page: "fitz.Page", rect: "fitz.Rect", data: Optional[bytes]) -> bool:
    if not data:
        return False
    try:
        page.insert_image(rect, stream=data, keep_proportion=True)
        return True
    except Exception as e:
        # corrupt or unsupported image data, leave the slot empty
        logger.warning("Could not place image: %s", e)
        return False


def draw_page(doc: "fitz.Document", result: CVResult, page: Page, total_pages: int,
              photo: Optional[bytes], logo: Optional[bytes]) -> "fitz.Page":
    """Draw one logical page of the template as vector content."""
    pdf_page = doc.new_page(width=A4.width, height=A4.height)
    fragments = render_page(result, page, total_pages)

    pdf_page.draw_rect(fitz.Rect(0, 0, SIDEBAR_WIDTH, A4.height), color=None, fill=_hex_to_rgb(BRAND_COLOR))
    pdf_page.draw_rect(PHOTO_RECT, color=(1, 1, 1), fill=(0.89, 0.91, 0.94), width=3)
    _insert_image(pdf_page, PHOTO_RECT, photo)

    pdf_page.insert_htmlbox(SIDEBAR_TEXT_RECT, fragments.sidebar, css=SIDEBAR_CSS)
    _insert_image(pdf_page, LOGO_RECT, logo)
    pdf_page.insert_htmlbox(NAME_RECT, fragments.name, css=MAIN_CSS)

    spare, scale = pdf_page.insert_htmlbox(BODY_RECT, fragments.body, css=MAIN_CSS)
    if scale < 1:
        logger.info("Page %d content scaled to %.0f%% to fit", page.page_index + 1, scale * 100)
    pdf_page.insert_htmlbox(FOOTER_RECT, fragments.footer, css=MAIN_CSS)
    return pdf_page


def rasterize(doc: "fitz.Document", dpi: int, jpeg_quality: int) -> "fitz.Document":
    """New document with every page replaced by a full-page JPEG of itself."""
    out = fitz.open()
    for src in doc:
        jpeg = src.get_pixmap(dpi=dpi).tobytes("jpeg", jpg_quality=jpeg_quality)
        dst = out.new_page(width=src.rect.width, height=src.rect.height)
        dst.insert_image(dst.rect, stream=jpeg)
    return out


def export_pdf(
    result: CVResult,
    pages: Optional[List[Page]] = None,
    pagination: Optional[PaginationConfig] = None,
    dpi: Optional[int] = None,
    jpeg_quality: int = 95,
    raster: bool = True,
) -> bytes:
    """Render the CV to PDF bytes, one A4 page per logical page."""
    if pages is None:
        pages = paginate_result(result, pagination)
    dpi = dpi or config.EXPORT_DPI

    photo = load_image(result.photo_url)
    logo = load_image(result.company_logo_url or DEFAULT_LOGO_URL)

    doc = fitz.open()
    try:
        for page in pages:
            draw_page(doc, result, page, len(pages), photo, logo)
        if not raster:
            return doc.tobytes(garbage=3, deflate=True)
        out = rasterize(doc, dpi, jpeg_quality)
        try:
            return out.tobytes(garbage=3, deflate=True)
        finally:
            out.close()
    finally:
        doc.close()


def export_filename(result: CVResult) -> str:
    """EIV_CV_<Name>.pdf, ASCII only so it is safe in a Content-Disposition header."""
    name = unicodedata.normalize("NFKD", result.sidebar_info.name).encode("ascii", "ignore").decode("ascii")
    name = re.sub(r"\s+", "_", name.strip())
    name = re.sub(r"[^\w.-]", "", name) or "Candidate"
    return f"EIV_CV_{name}.pdf"
