"""
Input Sanitization Module

Normalizes client-supplied filenames, URLs and search text before they are
stored or echoed back in headers.
"""

import re
from typing import Optional
from urllib.parse import quote, urlparse

from .constants import DEFAULT_PDF_FILENAME, MAX_FILENAME_LENGTH, MAX_URL_LENGTH

# Characters kept in stored filenames (ASCII only, header safe)
UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9 ._()-]")
ALLOWED_URL_SCHEMES = ("http", "https")


def sanitize_filename(filename: Optional[str], default: str = DEFAULT_PDF_FILENAME) -> str:
    """
    Reduce an uploaded filename to a safe basename.

    Strips directory components (either separator), null bytes, characters
    outside a conservative ASCII set and leading dots. Falls back to
    ``default`` when nothing usable is left.

    Examples:
        >>> sanitize_filename("C:\\\\fakepath\\\\Lecture 1.pdf")
        'Lecture_1.pdf'
        >>> sanitize_filename("../../etc/passwd")
        'passwd'
    """
    if not filename:
        return default

    name = filename.replace("\x00", "")
    name = re.split(r"[\\/]", name)[-1].strip()
    name = UNSAFE_FILENAME_CHARS.sub("", name)
    name = re.sub(r"\s+", "_", name)
    name = name.lstrip(".")

    if not name:
        return default

    if len(name) > MAX_FILENAME_LENGTH:
        stem, dot, ext = name.rpartition(".")
        if dot and len(ext) < 10:
            name = stem[:MAX_FILENAME_LENGTH - len(ext) - 1] + "." + ext
        else:
            name = name[:MAX_FILENAME_LENGTH]

    return name


def content_disposition(filename: str, disposition: str = "inline") -> str:
    """Build a Content-Disposition value that survives latin-1 header encoding."""
    if filename.isascii() and '"' not in filename and "\\" not in filename:
        return f'{disposition}; filename="{filename}"'
    fallback = sanitize_filename(filename)
    return f"{disposition}; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def validate_http_url(url: str) -> str:
    """
    Check that a URL is absolute http(s) with a host.

    Raises:
        ValueError: with a user-facing reason
    """
    url = url.strip()
    if not url:
        raise ValueError("URL cannot be empty")
    if len(url) > MAX_URL_LENGTH:
        raise ValueError(f"URL too long. Maximum {MAX_URL_LENGTH} characters.")

    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        raise ValueError("URL must start with http:// or https://")
    if not parsed.netloc:
        raise ValueError("URL must include a host")
    return url


def normalize_search_query(query: Optional[str]) -> str:
    """Trim and case-fold a search query; empty string means no query."""
    if query is None:
        return ""
    return query.strip().casefold()
