"""
=============================================================================
PATH RESOLUTION AND TRAVERSAL PROTECTION
=============================================================================

Maps the path from a request line to a file that is guaranteed to live
inside the root directory, or rejects it.

=============================================================================
PATH TRAVERSAL ATTACKS
=============================================================================

    Attacker requests:  GET /../../../etc/passwd HTTP/1.1

    Naive server:
        file_path = root_dir + "/../../../etc/passwd"
        → /var/www/../../../etc/passwd
        → /etc/passwd   ← reads a file outside the root!

The same escape works with percent-encoding (%2e%2e%2f) and with symlinks
that point outside the root. String filtering misses cases; the reliable
defence is to compare CANONICAL paths:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    resolve_path() Flow                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   "/docs/%2e%2e/index.html"                                          │
    │        │ percent-decode (strict UTF-8), trim whitespace              │
    │        ▼                                                             │
    │   "/docs/../index.html"                                              │
    │        │ "/" or "" → index file, else strip leading "/"              │
    │        ▼                                                             │
    │   root / "docs/../index.html"                                        │
    │        │ Path.resolve(strict=True): follow symlinks, fold ".."       │
    │        ▼                                                             │
    │   /var/www/index.html                                                │
    │        │ inside root.resolve()?  regular file?                       │
    │        ▼                                                             │
    │   Path or None                                                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every rejection returns None and becomes a 404. The client cannot tell a
blocked traversal from a file that does not exist.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote


logger = logging.getLogger(__name__)


def decode_path(requested: str) -> Optional[str]:
    """
    Percent-decode a request path.

    Returns None if the decoded bytes are not valid UTF-8 (e.g. ``/%ff``).
    Malformed escapes such as ``%zz`` are kept literally.
    """
    try:
        return unquote(requested, errors="strict")
    except UnicodeDecodeError:
        return None


def resolve_path(root: str | Path, requested: str, index_file: str) -> Optional[Path]:
    """
    Resolve a requested URL path to a safe file path under ``root``.

    Args:
        root: Root directory. Does not need to be canonical already.
        requested: Raw path token from the request line (still encoded).
        index_file: File served for "/" and the empty path.

    Returns:
        The canonical path of an existing regular file inside root,
        or None if the request must be rejected.
    """
    if not str(root) or not index_file:
        return None

    decoded = decode_path(requested)
    if decoded is None:
        return None
    decoded = decoded.strip()

    root = Path(root)
    if decoded in ("/", ""):
        target = root / index_file
    else:
        # Always relative to root, never an absolute host path
        target = root / decoded.lstrip("/")

    try:
        canonical_root = root.resolve(strict=True)
        canonical = target.resolve(strict=True)
    except (OSError, RuntimeError, ValueError):
        # Missing path, symlink loop, or an embedded NUL byte
        return None

    try:
        canonical.relative_to(canonical_root)
    except ValueError:
        logger.warning(f"Path traversal attempt: {requested}")
        return None

    if not canonical.is_file():
        return None

    return canonical
