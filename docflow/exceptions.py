"""Error types shared by every stage of the document workflow pipeline.

Each error carries an explicit kind and the HTTP status the request boundary
should answer with. Upstream errors keep whatever body the remote side sent
(parsed JSON or ``{"raw": text}``) in ``detail`` for diagnostics.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFIGURATION = "configuration"
    UPSTREAM = "upstream"


class PipelineError(Exception):
    """Base exception for all document pipeline failures."""

    kind: ErrorKind = ErrorKind.VALIDATION
    default_status: int = 400

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: object = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.default_status
        self.detail = detail


class DocumentValidationError(PipelineError):
    """Raised when caller input is rejected (file type, size, missing payload)."""

    kind = ErrorKind.VALIDATION
    default_status = 400


class NotFoundError(PipelineError):
    """Raised when a document or analysis id does not exist."""

    kind = ErrorKind.NOT_FOUND
    default_status = 404


class ConfigurationError(PipelineError):
    """Raised when the service is missing configuration an operator must supply."""

    kind = ErrorKind.CONFIGURATION
    default_status = 500

    def __init__(self, message: str, *, stage: object = None, detail: object = None) -> None:
        super().__init__(message, detail=detail)
        self.stage = stage


class UpstreamError(PipelineError):
    """Raised when a remote service answers with a non-2xx status or cannot be reached."""

    kind = ErrorKind.UPSTREAM
    default_status = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: object = None,
        stage: object = None,
    ) -> None:
        super().__init__(message, status_code=status_code, detail=detail)
        self.stage = stage
