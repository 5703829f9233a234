"""Utility functions and helpers."""

from civic_reporter.utils.geo import Coordinates, parse_location
from civic_reporter.utils.text_sanitizer import clean_text, strip_all_html
from civic_reporter.utils.validators import (
    is_safe_url,
    is_valid_email,
    sanitize_filename,
)

__all__ = [
    "Coordinates",
    "parse_location",
    "clean_text",
    "strip_all_html",
    "is_safe_url",
    "is_valid_email",
    "sanitize_filename",
]
