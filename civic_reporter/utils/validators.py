"""Input validation for emails, uploaded file names and redirect targets."""

import re
from pathlib import PurePosixPath
from typing import Iterable, Optional
from urllib.parse import urlparse

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Anything else is dropped from client supplied file names
UNSAFE_FILENAME_CHARS = re.compile(r"[^\w\-. ]")


def is_valid_email(email: Optional[str]) -> bool:
    """Check an address has the shape ``local@domain.tld``."""
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def sanitize_filename(filename: Optional[str]) -> str:
    """
    Reduce a client supplied file name to a single safe path component.

    Directory parts and NUL bytes are flattened, other unexpected
    characters removed and the result capped at 255 characters.
    """
    if not filename:
        return ""

    flattened = filename.replace("\x00", "").replace("\\", "_").replace("/", "_")
    cleaned = UNSAFE_FILENAME_CHARS.sub("", flattened)[:255]

    if cleaned.strip(".") == "":
        return "unnamed"
    return cleaned


def file_extension(filename: Optional[str]) -> str:
    """Lowercase extension of the sanitized name, without the dot."""
    return PurePosixPath(sanitize_filename(filename)).suffix.lstrip(".").lower()


def is_image_content_type(content_type: Optional[str]) -> bool:
    """Check a declared MIME type is some ``image/*`` type."""
    if not content_type:
        return False
    main_type = content_type.split(";", 1)[0].strip().lower()
    return main_type.startswith("image/")


def is_safe_url(url: Optional[str], allowed_hosts: Optional[Iterable[str]] = None) -> bool:
    """
    Check a redirect target stays on this site.

    Relative paths are always safe. Absolute http(s) URLs are safe when
    their host is in ``allowed_hosts`` (or no hosts are given).
    Protocol-relative URLs and other schemes never are.
    """
    if not url or url.startswith("//") or "\\" in url:
        return False
    if url.startswith("/"):
        return True

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    if allowed_hosts is None:
        return True
    return parsed.netloc in set(allowed_hosts)
