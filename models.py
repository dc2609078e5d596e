"""Data structures used across the application."""

from __future__ import annotations

from typing import Callable, List, Optional, TypedDict


class UrlEntry(TypedDict):
    """One trimmed, non-empty line of user input."""

    raw: str
    normalized: str
    decode_error: Optional[str]


class VerificationResult(TypedDict):
    """Outcome of checking a single existing/recommended pair."""

    line: int
    existing_url: str
    recommended_url: str
    existing_url_error: Optional[str]
    recommended_url_error: Optional[str]
    status: str


class ProgressEvent(TypedDict):
    """Emitted after each existing URL has been processed."""

    line: int
    percent: float
    result: VerificationResult


class RunState(TypedDict):
    progress_percent: float
    results: List[VerificationResult]
    run_error: Optional[str]


ProgressSink = Callable[[float], None]


__all__ = [
    "UrlEntry",
    "VerificationResult",
    "ProgressEvent",
    "RunState",
    "ProgressSink",
]
