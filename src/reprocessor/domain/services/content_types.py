"""MIME type inference for staged components."""

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    "md": "text/markdown",
    "txt": "text/plain",
    "json": "application/json",
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "html": "text/html",
    "xml": "application/xml",
    "csv": "text/csv",
}


def infer_content_type(filename: str) -> str:
    """Look up the MIME type for a component name by its extension."""
    if "." not in filename:
        return DEFAULT_CONTENT_TYPE
    extension = filename.rsplit(".", 1)[-1].lower()
    return CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)
