"""Open the existing URLs in the browser, one tab each."""

from __future__ import annotations

import logging
import webbrowser
from typing import Callable, List

from normalizer import with_default_scheme

__all__ = ["extract_links", "open_all_links"]

logger = logging.getLogger(__name__)


def extract_links(text: str) -> List[str]:
    """Split on any whitespace and default the scheme of every token."""
    return [with_default_scheme(token) for token in (text or "").split()]


def open_all_links(text: str, opener: Callable[[str], bool] = webbrowser.open_new_tab) -> List[str]:
    """Open every link from ``text`` and return the ones handed to the browser."""
    opened: List[str] = []
    for url in extract_links(text):
        try:
            opener(url)
        except webbrowser.Error as exc:
            logger.warning("Could not open %s: %s", url, exc)
            continue
        opened.append(url)
    return opened
