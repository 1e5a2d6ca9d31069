import os
import json
import base64
import requests
from typing import Optional

from generation.errors import (
    CVServiceError,
    MalformedResponseError,
    ServiceTimeoutError,
    TransportError,
    error_from_code,
)
from schemas import CVResult, DocumentInput, FilePayload, PaginationConfig

API_URL = os.getenv("API_URL", "http://localhost:8000")
# The service itself may wait this long on the AI model
REQUEST_TIMEOUT = float(os.getenv("API_TIMEOUT", "300"))


class ApiBackend:
    """Session backend that delegates to the FastAPI service."""

    def __init__(self, base_url: str = API_URL, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _raise_for_error(self, r: requests.Response) -> None:
        if r.status_code < 400:
            return
        try:
            body = r.json()
        except ValueError:
            raise TransportError(f"HTTP {r.status_code} from {r.url}")
        detail = body.get("detail")
        if "error" in body:
            raise error_from_code(body["error"], detail)
        if not isinstance(detail, str):
            detail = json.dumps(detail)
        raise CVServiceError(detail, user_message=detail)

    def _post(self, path: str, **kwargs) -> requests.Response:
        return self._request(requests.post, path, **kwargs)

    def _get(self, path: str, **kwargs) -> requests.Response:
        return self._request(requests.get, path, **kwargs)

    def _request(self, method, path: str, **kwargs) -> requests.Response:
        try:
            r = method(f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise ServiceTimeoutError(str(e)) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(
                str(e), user_message=f"Could not reach the CV service at {self.base_url}. Is it running?"
            ) from e
        self._raise_for_error(r)
        return r

    def _result(self, r: requests.Response) -> CVResult:
        try:
            return CVResult.model_validate(r.json())
        except ValueError as e:
            raise MalformedResponseError(str(e)) from e

    def optimize(
        self,
        cv: DocumentInput,
        jd: DocumentInput,
        photo: FilePayload,
        notes: Optional[str] = None,
    ) -> CVResult:
        files = {"photo": (photo.filename or "photo", base64.b64decode(photo.data), photo.mime_type)}
        data = {"notes": notes or ""}
        for name, doc in (("cv", cv), ("jd", jd)):
            if isinstance(doc, str):
                data[f"{name}_text"] = doc
            else:
                files[f"{name}_file"] = (doc.filename or name, base64.b64decode(doc.data), doc.mime_type)
        return self._result(self._post("/cv/optimize", data=data, files=files))

    def refine(self, prior: CVResult, instruction: str) -> CVResult:
        body = {"result": prior.model_dump(by_alias=True), "instruction": instruction}
        return self._result(self._post("/cv/refine", json=body))

    def pagination_config(self) -> PaginationConfig:
        """Weights the service splits pages with, so the preview matches the PDF."""
        r = self._get("/pagination/config")
        try:
            return PaginationConfig.model_validate(r.json())
        except ValueError as e:
            raise MalformedResponseError(str(e)) from e

    def export(self, result: CVResult, pagination: Optional[PaginationConfig] = None) -> bytes:
        body = {"result": result.model_dump(by_alias=True)}
        if pagination is not None:
            body["config"] = pagination.model_dump(by_alias=True)
        return self._post("/cv/export", json=body).content
