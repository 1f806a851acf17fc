from collections.abc import Collection

from docflow.exceptions import DocumentValidationError
from docflow.pipeline.models import UploadPayload


def validate_payload(
    payload: UploadPayload,
    allowed_mime_types: Collection[str],
    max_size: int,
) -> None:
    """Check the upload against the MIME allow-list and size limits.

    Raises:
        DocumentValidationError: on the first rule the payload breaks.
    """
    if payload.mime_type not in allowed_mime_types:
        raise DocumentValidationError("Unsupported file type")
    if not payload.content:
        raise DocumentValidationError("File is empty")
    if len(payload.content) > max_size:
        raise DocumentValidationError("File exceeds maximum allowed size")
