from dataclasses import dataclass


@dataclass(frozen=True)
class UploadPayload:
    """A decoded upload, independent of how it reached the service."""

    content: bytes
    file_name: str
    mime_type: str
    title: str | None = None
    description: str | None = None
