import json
import base64
import logging
import requests
from typing import Any, Dict, List, Optional, Tuple
from pydantic import ValidationError

import config
from generation.errors import (
    AuthenticationError,
    ConfigurationError,
    MalformedResponseError,
    ServiceTimeoutError,
    TransportError,
)
from generation.prompts import CROP_PROMPT, CV_RESULT_SCHEMA, NOTES_TEMPLATE, OPTIMIZE_PROMPT, REFINE_PROMPT
from schemas import CVResult, DocumentInput, FilePayload

logger = logging.getLogger(__name__)


def _strip_fences(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_cv_result(raw: str) -> CVResult:
    """Validate the model's JSON text against the CVResult shape."""
    try:
        data = json.loads(_strip_fences(raw))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"AI response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponseError("AI response is not a JSON object")
    # the model never owns these assets
    data.pop("photoUrl", None)
    data.pop("companyLogoUrl", None)
    try:
        return CVResult.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"AI response does not match the CV shape: {e}") from e


class GeminiClient:
    """Thin client over the Gemini generateContent REST endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        image_model: Optional[str] = None,
        timeout: Optional[float] = None,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self.model = model or config.GEMINI_MODEL
        self.image_model = image_model or config.GEMINI_IMAGE_MODEL
        self.timeout = timeout or config.GEMINI_TIMEOUT
        self.base_url = (base_url or config.GEMINI_BASE_URL).rstrip("/")

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------
    def _generate(self, model: str, parts: List[Dict[str, Any]], generation_config: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set")

        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        payload = {"contents": [{"role": "user", "parts": parts}], "generationConfig": generation_config}

        size = sum(len(p.get("text", "")) + len(p.get("inlineData", {}).get("data", "")) for p in parts)
        logger.info("Calling Gemini model=%s parts=%d payload_chars=%d", model, len(parts), size)

        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.error("Gemini request timed out after %ss", self.timeout)
            raise ServiceTimeoutError(str(e)) from e
        except requests.exceptions.RequestException as e:
            logger.error("Gemini request failed: %s", e)
            raise TransportError(str(e)) from e

        if response.status_code in (401, 403) or (
            response.status_code == 400 and "API_KEY_INVALID" in response.text
        ):
            logger.error("Gemini rejected the API key (HTTP %s)", response.status_code)
            raise AuthenticationError(f"HTTP {response.status_code}: {response.text[:300]}")
        if response.status_code == 408 or response.status_code == 504:
            raise ServiceTimeoutError(f"HTTP {response.status_code}")
        if response.status_code >= 400:
            logger.error("Gemini HTTP %s: %s", response.status_code, response.text[:500])
            raise TransportError(f"HTTP {response.status_code}: {response.text[:300]}")

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError("Gemini returned a non-JSON body") from e

    @staticmethod
    def _response_parts(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise MalformedResponseError(f"Gemini returned no candidates ({reason})")
        return (candidates[0].get("content") or {}).get("parts") or []

    def _response_text(self, data: Dict[str, Any]) -> str:
        text = "".join(p.get("text", "") for p in self._response_parts(data) if not p.get("thought"))
        if not text.strip():
            raise MalformedResponseError("Gemini returned an empty answer")
        return text

    @staticmethod
    def _document_parts(label: str, doc: DocumentInput) -> List[Dict[str, Any]]:
        if isinstance(doc, str):
            return [{"text": f"{label} CONTENT:\n{doc}"}]
        return [
            {"text": f"{label} FILE:"},
            {"inlineData": {"mimeType": doc.mime_type, "data": doc.data}},
        ]

    def _json_config(self) -> Dict[str, Any]:
        return {
            "responseMimeType": "application/json",
            "responseSchema": CV_RESULT_SCHEMA,
            "thinkingConfig": {"thinkingBudget": 2000},
        }

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def crop_headshot(self, photo: bytes, mime_type: str) -> Tuple[bytes, str]:
        """Ask the image model for a framed headshot. Returns (bytes, mime)."""
        parts = [
            {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(photo).decode("ascii")}},
            {"text": CROP_PROMPT},
        ]
        data = self._generate(self.image_model, parts, {"responseModalities": ["IMAGE"]})
        for part in self._response_parts(data):
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                mime = inline.get("mimeType") or inline.get("mime_type") or "image/png"
                return base64.b64decode(inline["data"]), mime
        raise MalformedResponseError("Image model returned no image")

    def optimize_cv(self, cv: DocumentInput, jd: DocumentInput, notes: Optional[str] = None) -> CVResult:
        parts = [{"text": OPTIMIZE_PROMPT}]
        parts += self._document_parts("CANDIDATE CV", cv)
        parts += self._document_parts("JOB DESCRIPTION (JD)", jd)
        if notes and notes.strip():
            parts.append({"text": NOTES_TEMPLATE.format(notes=notes.strip())})

        data = self._generate(self.model, parts, self._json_config())
        return parse_cv_result(self._response_text(data))

    def refine_cv(self, prior: CVResult, instruction: str) -> CVResult:
        cv_json = prior.model_dump_json(by_alias=True, exclude={"photo_url", "company_logo_url"}, indent=2)
        parts = [{"text": REFINE_PROMPT.format(instruction=instruction.strip(), cv_json=cv_json)}]
        data = self._generate(self.model, parts, self._json_config())
        return parse_cv_result(self._response_text(data))
