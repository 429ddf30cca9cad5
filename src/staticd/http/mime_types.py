"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to their MIME types for the Content-Type header.

The lookup is a static table keyed by lowercase suffix. Anything not in the
table is served as application/octet-stream ("unknown binary data"), which
makes browsers download it instead of trying to render it.

    get_mime_type("index.html")      → "text/html"
    get_mime_type("logo.PNG")        → "image/png"
    get_mime_type("archive.unknown") → "application/octet-stream"

The header value is the bare MIME type. No charset parameter is appended:
the server never transcodes files, so it cannot promise an encoding.

=============================================================================
"""

from pathlib import Path
from typing import Optional


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Maps file extensions (lowercase, with dot) to MIME types.
# For a comprehensive list, see:
# https://www.iana.org/assignments/media-types/media-types.xhtml
#
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # FONT TYPES
    # -------------------------------------------------------------------------
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO TYPES
    # -------------------------------------------------------------------------
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",

    # -------------------------------------------------------------------------
    # DOCUMENTS / ARCHIVES
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    ".wasm": "application/wasm",
    ".map": "application/json",    # Source maps
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: str | Path, default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or name with extension.
        default: MIME type for unknown extensions.
                 Uses application/octet-stream if not specified.

    Returns:
        The MIME type string.

    Examples:
        >>> get_mime_type("/srv/www/style.css")
        'text/css'

        >>> get_mime_type("data.xyz", default="text/plain")
        'text/plain'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()  # .PNG → .png
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)
