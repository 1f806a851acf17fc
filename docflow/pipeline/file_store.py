import re
from pathlib import Path

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def safe_file_name(original_name: str | None) -> str:
    """Replace every character outside ``[a-zA-Z0-9._-]`` with ``_``."""
    if not original_name:
        return "document"
    return _UNSAFE_CHARS.sub("_", original_name)


def document_file_path(storage_root: Path, document_id: str, original_name: str | None) -> Path:
    """Build path to a stored upload: {storage_root}/{document_id}-{safe name}"""
    return storage_root / f"{document_id}-{safe_file_name(original_name)}"


class FileStore:
    """Writes uploaded document bytes to local disk."""

    def __init__(self, storage_root: Path) -> None:
        self._storage_root = storage_root

    def save(self, content: bytes, document_id: str, original_name: str | None) -> Path:
        self._storage_root.mkdir(parents=True, exist_ok=True)
        path = document_file_path(self._storage_root, document_id, original_name)
        path.write_bytes(content)
        return path
