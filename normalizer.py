"""Turn the raw URL text blocks into ordered lists of entries."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple
from urllib.parse import unquote

from constants import DEFAULT_SCHEME, SCHEME_REGEX
from models import UrlEntry

__all__ = [
    "split_lines",
    "with_default_scheme",
    "decode_url",
    "normalize",
    "normalize_existing",
    "normalize_recommended",
]

logger = logging.getLogger(__name__)

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def split_lines(text: str) -> List[str]:
    """Return trimmed non-empty lines, in input order."""
    lines = (text or "").split("\n")
    return [ln.strip() for ln in lines if ln.strip()]


def with_default_scheme(url: str) -> str:
    """Prefix ``https://`` unless the value already has an http(s) scheme."""
    if SCHEME_REGEX.match(url):
        return url
    return f"{DEFAULT_SCHEME}{url}"


def decode_url(value: str) -> Tuple[str, Optional[str]]:
    """Percent-decode a URL component.

    Returns the decoded value and ``None``, or an empty string and the
    reason when the value holds a malformed escape or invalid UTF-8.
    """
    if _MALFORMED_ESCAPE.search(value):
        return "", "malformed percent-encoding"
    try:
        return unquote(value, errors="strict"), None
    except UnicodeDecodeError as exc:
        return "", str(exc)


def normalize(text: str, *, default_scheme: bool = False, decode: bool = False) -> List[UrlEntry]:
    entries: List[UrlEntry] = []
    for line in split_lines(text):
        normalized = with_default_scheme(line) if default_scheme else line
        error: Optional[str] = None
        if decode:
            normalized, error = decode_url(normalized)
            if error is None and not normalized:
                error = "decoded to an empty value"
            if error is not None:
                logger.warning("Could not decode URL %r: %s", line, error)
        entries.append({"raw": line, "normalized": normalized, "decode_error": error})
    return entries


def normalize_existing(text: str) -> List[UrlEntry]:
    """Entries for the existing-URL list: scheme defaulted, never decoded."""
    return normalize(text, default_scheme=True)


def normalize_recommended(text: str) -> List[UrlEntry]:
    """Entries for the recommended-URL list: decoded, raw kept for display."""
    return normalize(text, decode=True)
