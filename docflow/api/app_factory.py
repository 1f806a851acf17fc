import base64
import binascii
from typing import Any

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from docflow.exceptions import DocumentValidationError, PipelineError
from docflow.logging.logger import Log
from docflow.pipeline.models import UploadPayload
from docflow.pipeline.service import DocumentService
from docflow.telemetry.metrics import MetricsRecorder

DEFAULT_FILE_NAME = "document.pdf"
DEFAULT_MIME_TYPE = "application/pdf"
INTERNAL_ERROR_MESSAGE = "Internal server error"


class RouteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    analysis_id: str | None = Field(default=None, alias="analysisId")


class FeedbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    analysis_id: str | None = Field(default=None, alias="analysisId")
    corrections: Any = None
    comments: str | None = None


def create_app(*, service: DocumentService, metrics: MetricsRecorder) -> FastAPI:
    app = FastAPI(title="Document Workflow Service")

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
        Log.error(
            f"{request.method} {request.url.path} failed ({exc.kind.value}, "
            f"{exc.status_code}): {exc.message}"
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        Log.warning(f"{request.method} {request.url.path} rejected: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        Log.warning(f"{request.method} {request.url.path} answered {exc.status_code}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        Log.exception(f"{request.method} {request.url.path} failed unexpectedly: {exc}")
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/metrics")
    async def metrics_snapshot() -> dict[str, object]:
        return metrics.snapshot()

    @app.post("/documents", status_code=201)
    async def upload_document(request: Request) -> dict[str, Any]:
        payload = await _read_upload(request)
        return await run_in_threadpool(service.upload, payload)

    @app.get("/documents")
    def list_documents() -> list[dict[str, Any]]:
        return service.views.list_documents()

    @app.get("/documents/{document_id}")
    def get_document(document_id: str) -> dict[str, Any]:
        return service.views.get_document(document_id)

    @app.post("/documents/{document_id}/analyze")
    def analyze_document(document_id: str) -> dict[str, Any]:
        return service.analyze(document_id)

    @app.post("/documents/{document_id}/route")
    def route_document(document_id: str, body: RouteRequest | None = None) -> dict[str, Any]:
        return service.route(document_id, body.analysis_id if body else None)

    @app.post("/documents/{document_id}/feedback", status_code=201)
    def submit_feedback(
        document_id: str,
        body: FeedbackRequest,
        x_user_id: str | None = Header(default=None),
    ) -> dict[str, Any]:
        return service.submit_feedback(
            document_id,
            corrections=body.corrections,
            analysis_id=body.analysis_id,
            comments=body.comments,
            submitted_by=x_user_id,
        )

    @app.get("/workflow/status")
    def workflow_status() -> list[dict[str, Any]]:
        return service.views.workflow_statuses()

    return app


async def _read_upload(request: Request) -> UploadPayload:
    """Decode a multipart ``file`` field or a JSON body with base64 ``data``."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("file")
        if isinstance(upload, UploadFile):
            return UploadPayload(
                content=await upload.read(),
                file_name=upload.filename or DEFAULT_FILE_NAME,
                mime_type=upload.content_type or DEFAULT_MIME_TYPE,
                title=_form_text(form.get("title")),
                description=_form_text(form.get("description")),
            )
        raise DocumentValidationError("No file payload received")

    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict) or not body.get("data"):
        raise DocumentValidationError("No file payload received")
    try:
        content = base64.b64decode(body["data"])
    except (binascii.Error, TypeError, ValueError) as exc:
        raise DocumentValidationError("File payload is not valid base64") from exc
    return UploadPayload(
        content=content,
        file_name=_json_text(body, "fileName") or DEFAULT_FILE_NAME,
        mime_type=_json_text(body, "mimeType") or DEFAULT_MIME_TYPE,
        title=_json_text(body, "title"),
        description=_json_text(body, "description"),
    )


def _form_text(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def _json_text(body: dict[str, Any], field: str) -> str | None:
    value = body.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DocumentValidationError(f"Field '{field}' must be a string")
    return value or None
