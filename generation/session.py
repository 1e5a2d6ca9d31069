import logging
from typing import List, Optional

import config
from export.pdf import export_pdf
from generation import pipeline
from generation.errors import CVServiceError, describe_error
from layout.edits import apply_edit
from layout.paginate import paginate_result
from schemas import CVResult, DocumentInput, EditOp, FilePayload, Page, PaginationConfig

logger = logging.getLogger(__name__)

IDLE = "idle"
PROCESSING = "processing"
COMPLETED = "completed"
ERROR = "error"


class LocalBackend:
    """Runs the flows in-process against a Gemini client."""

    def __init__(self, client):
        self.client = client

    def optimize(self, cv: DocumentInput, jd: DocumentInput, photo: FilePayload,
                 notes: Optional[str] = None) -> CVResult:
        return pipeline.submit(self.client, cv, jd, photo, notes)

    def refine(self, prior: CVResult, instruction: str) -> CVResult:
        return pipeline.refine(self.client, prior, instruction)

    def pagination_config(self) -> PaginationConfig:
        return PaginationConfig(**config.pagination_overrides())

    def export(self, result: CVResult, pagination: Optional[PaginationConfig] = None) -> bytes:
        return export_pdf(result, pagination=pagination)


class CVSession:
    """
    Owner of the CV being worked on.

    All changes go through this object: a new result replaces the old one only
    when the operation that produced it succeeded, so a failed refine leaves the
    last good result in place.
    """

    def __init__(self, backend, config: Optional[PaginationConfig] = None):
        self.backend = backend
        self.config = config or PaginationConfig()
        self.result: Optional[CVResult] = None
        self.status = IDLE
        self.error: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.status == PROCESSING

    def _run(self, action, *args) -> Optional[CVResult]:
        if self.busy:
            raise RuntimeError("A request is already in progress")
        self.status = PROCESSING
        self.error = None
        try:
            result = action(*args)
        except CVServiceError as e:
            logger.error("%s failed: %s", getattr(action, "__name__", "action"), e)
            self.error = describe_error(e)
            self.status = ERROR
            return None
        except Exception as e:
            # never leave the session stuck in PROCESSING
            logger.exception("%s failed unexpectedly", getattr(action, "__name__", "action"))
            self.error = describe_error(e)
            self.status = ERROR
            return None
        self.result = result
        self.status = COMPLETED
        return result

    def submit(self, cv, jd, photo: FilePayload, notes: Optional[str] = None) -> Optional[CVResult]:
        return self._run(self.backend.optimize, cv, jd, photo, notes)

    def refine(self, instruction: str) -> Optional[CVResult]:
        if self.result is None:
            raise RuntimeError("Nothing to refine yet")
        return self._run(self.backend.refine, self.result, instruction)

    def edit(self, op: EditOp) -> CVResult:
        if self.result is None:
            raise RuntimeError("Nothing to edit yet")
        self.result = apply_edit(self.result, op)
        return self.result

    def pages(self) -> List[Page]:
        if self.result is None:
            return []
        return paginate_result(self.result, self.config)

    def export(self) -> bytes:
        """PDF of the current result, split with the same weights as the preview."""
        if self.result is None:
            raise RuntimeError("Nothing to export yet")
        return self.backend.export(self.result, self.config)

    def reset(self) -> None:
        self.result = None
        self.status = IDLE
        self.error = None
