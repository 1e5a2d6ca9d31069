from __future__ import annotations
import logging
from typing import List, Optional
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

import config
from schemas import CVResult, EditRequest, FilePayload, LayoutRequest, Page, PaginationConfig, RefineRequest
from generation.errors import CVServiceError, EditError
from generation.llm_gemini import GeminiClient
from generation import pipeline
from layout.edits import apply_edit
from layout.paginate import paginate_result
from parsers.inputs import load_document, load_photo, require_photo, resolve_text_or_file
from export.pdf import export_filename, export_pdf

logger = logging.getLogger("cv_studio")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    config.setup_logging()
    logger.info("Gemini model: %s (image model: %s)", config.GEMINI_MODEL, config.GEMINI_IMAGE_MODEL)
    if not config.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; AI endpoints will answer 503 until it is configured")
    yield
    logger.info("Application shutting down.")


app = FastAPI(title="EIV CV Template Studio (Gemini)", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # internal tool
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_client() -> GeminiClient:
    return GeminiClient()


def default_pagination() -> PaginationConfig:
    return PaginationConfig(**config.pagination_overrides())


@app.exception_handler(CVServiceError)
async def cv_service_error_handler(request: Request, exc: CVServiceError):
    logger.error("%s %s failed [%s]: %s", request.method, request.url.path, exc.code, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": exc.user_message})


async def _read_upload(upload: Optional[UploadFile]) -> Optional[tuple]:
    if upload is None or not upload.filename:
        return None
    return upload.filename, await upload.read(), upload.content_type


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok", "model": config.GEMINI_MODEL, "configured": bool(config.GEMINI_API_KEY)}


@app.get("/pagination/config", response_model=PaginationConfig)
def pagination_config():
    return default_pagination()


@app.post("/cv/optimize", response_model=CVResult)
async def optimize_cv(
    cv_file: Optional[UploadFile] = File(None),
    cv_text: Optional[str] = Form(None),
    jd_file: Optional[UploadFile] = File(None),
    jd_text: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    notes: Optional[str] = Form(None),
    client: GeminiClient = Depends(get_client),
):
    """Crop the headshot, standardize the CV against the JD."""
    cv_upload = await _read_upload(cv_file)
    jd_upload = await _read_upload(jd_file)
    photo_upload = await _read_upload(photo)

    # all validation happens before the first AI call
    cv = resolve_text_or_file(cv_text, load_document(*cv_upload) if cv_upload else None, "CV")
    jd = resolve_text_or_file(jd_text, load_document(*jd_upload) if jd_upload else None, "Job description")
    photo_payload: FilePayload = require_photo(load_photo(*photo_upload) if photo_upload else None)

    return await run_in_threadpool(pipeline.submit, client, cv, jd, photo_payload, notes)


@app.post("/cv/refine", response_model=CVResult)
def refine_cv(body: RefineRequest, client: GeminiClient = Depends(get_client)):
    return pipeline.refine(client, body.result, body.instruction)


@app.post("/cv/edit", response_model=CVResult)
def edit_cv(body: EditRequest):
    try:
        return apply_edit(body.result, body.edit)
    except (IndexError, ValueError) as e:
        raise EditError(str(e)) from e


@app.post("/cv/pages", response_model=List[Page])
def cv_pages(body: LayoutRequest):
    return paginate_result(body.result, body.config or default_pagination())


@app.post("/cv/export")
def export_cv(body: LayoutRequest):
    pdf = export_pdf(body.result, pagination=body.config or default_pagination())
    filename = export_filename(body.result)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
