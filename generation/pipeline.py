"""
Submit and refine flows.

A submission runs three steps strictly one after another: crop the headshot,
optimize the CV against the JD, attach the processed photo. Cropping is best
effort; every other failure propagates to the caller with its error type.
"""
import logging
from typing import Optional, Tuple

from generation.errors import InputValidationError
from parsers.inputs import payload_bytes, to_data_uri
from schemas import CVResult, DocumentInput, FilePayload

logger = logging.getLogger(__name__)


def crop_or_original(client, photo: bytes, mime_type: str) -> Tuple[bytes, str]:
    try:
        cropped, cropped_mime = client.crop_headshot(photo, mime_type)
    except Exception as e:
        logger.warning("Headshot crop failed, using the original photo: %s", e)
        return photo, mime_type
    if not cropped:
        logger.warning("Headshot crop returned no data, using the original photo")
        return photo, mime_type
    return cropped, cropped_mime


def submit(
    client,
    cv: DocumentInput,
    jd: DocumentInput,
    photo: FilePayload,
    notes: Optional[str] = None,
) -> CVResult:
    """Crop the photo, optimize the CV, return the result with the photo attached."""
    raw = payload_bytes(photo)
    logger.info("Submission: cv=%s jd=%s photo=%s (%d bytes)",
                _describe(cv), _describe(jd), photo.mime_type, len(raw))

    photo_bytes, photo_mime = crop_or_original(client, raw, photo.mime_type)
    result = client.optimize_cv(cv, jd, notes)
    logger.info("Optimized CV for %r: score=%d, %d experience entries",
                result.sidebar_info.name, result.match_score, len(result.experience))
    return result.model_copy(update={"photo_url": to_data_uri(photo_bytes, photo_mime)})


def refine(client, prior: CVResult, instruction: str) -> CVResult:
    """Revise a result from a free-text instruction, keeping the prior photo and logo."""
    if not instruction or not instruction.strip():
        raise InputValidationError("Write an instruction describing what to change.")
    refined = client.refine_cv(prior, instruction)
    return refined.model_copy(update={
        "photo_url": prior.photo_url,
        "company_logo_url": prior.company_logo_url,
    })


def _describe(doc: DocumentInput) -> str:
    if isinstance(doc, str):
        return f"text({len(doc)} chars)"
    return f"file({doc.mime_type})"
