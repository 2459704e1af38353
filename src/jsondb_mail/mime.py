"""Content-type inference for relayed attachments.

The mapping is a fixed table keyed on the lowercase filename suffix and is
deliberately independent of :mod:`mimetypes`, so the same file always goes
out with the same content type regardless of the host's MIME database.
"""

from __future__ import annotations

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".rar": "application/x-rar-compressed",
    ".7z": "application/x-7z-compressed",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def content_type_for(filename: str) -> str:
    """Return the content type for ``filename``, case-insensitively."""
    lowered = filename.lower()
    for suffix, content_type in CONTENT_TYPES.items():
        if lowered.endswith(suffix):
            return content_type
    return DEFAULT_CONTENT_TYPE


def split_content_type(content_type: str) -> tuple[str, str]:
    """Split ``type/subtype`` into the pair expected by ``EmailMessage``."""
    maintype, _, subtype = content_type.partition("/")
    return maintype, subtype or "octet-stream"
