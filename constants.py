"""Shared configuration constants for the application."""

from __future__ import annotations

import os
import re
from typing import List

from models import VerificationResult

DEFAULT_TIMEOUT = int(os.getenv("REDIRECT_CHECK_TIMEOUT", "30"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

SCHEME_REGEX = re.compile(r"^https?://", flags=re.IGNORECASE)
DEFAULT_SCHEME = "https://"

NO_RECOMMENDED_URL = "(no recommended URL)"
EMPTY_EXISTING_ERROR = "All Existing URLs textarea is empty"
EMPTY_RECOMMENDED_ERROR = "All recommended URLs textarea is empty"
ALL_MATCH_MESSAGE = "All URLs match!"
MISMATCH_MESSAGE = "Errors or mismatches found!"

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

LAST_RESULTS: List[VerificationResult] = []

_EXPORTED_NAMES = (
    "DEFAULT_TIMEOUT",
    "LOG_LEVEL",
    "HOST",
    "PORT",
    "USER_AGENT",
    "SCHEME_REGEX",
    "DEFAULT_SCHEME",
    "NO_RECOMMENDED_URL",
    "EMPTY_EXISTING_ERROR",
    "EMPTY_RECOMMENDED_ERROR",
    "ALL_MATCH_MESSAGE",
    "MISMATCH_MESSAGE",
    "STATUS_SUCCESS",
    "STATUS_ERROR",
    "LAST_RESULTS",
)

__all__ = [name for name in _EXPORTED_NAMES if name in globals()]
