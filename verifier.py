"""Core redirect verification: fetch each existing URL and compare destinations."""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import LocationParseError

from constants import (
    ALL_MATCH_MESSAGE,
    DEFAULT_TIMEOUT,
    EMPTY_EXISTING_ERROR,
    EMPTY_RECOMMENDED_ERROR,
    MISMATCH_MESSAGE,
    NO_RECOMMENDED_URL,
    STATUS_ERROR,
    STATUS_SUCCESS,
    USER_AGENT,
)
from models import ProgressEvent, ProgressSink, RunState, UrlEntry, VerificationResult
from normalizer import decode_url, normalize_existing, normalize_recommended

__all__ = [
    "build_session",
    "is_absolute_url",
    "resolve_url",
    "check_redirect",
    "check_preconditions",
    "iter_verification",
    "reconcile_lengths",
    "verify",
    "verify_text",
    "all_succeeded",
    "summary_message",
    "to_csv_bytes",
]

logger = logging.getLogger(__name__)

INVALID_URL_ERROR = "Failed to fetch (invalid URL format)"
NETWORK_ERROR = "Failed to fetch (possible network error)"


def build_session() -> requests.Session:
    """Create a `requests.Session` with pooled connections and no retries."""
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def is_absolute_url(url: str) -> bool:
    """Return True for a well-formed http(s) URL with a host."""
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError:
        return False
    if parsed.scheme.lower() not in ("http", "https") or not host:
        return False
    try:
        host.encode("idna")
    except UnicodeError:
        # empty label or label longer than 63 characters
        return False
    return True


def resolve_url(session: requests.Session, url: str, timeout: int = DEFAULT_TIMEOUT) -> Tuple[int, str]:
    """GET the URL following redirects; return the final status and URL."""
    resp = session.get(url, timeout=timeout, allow_redirects=True)
    return resp.status_code, str(resp.url)


def _make_result(line: int, existing_url: str, recommended_url: str) -> VerificationResult:
    return {
        "line": line,
        "existing_url": existing_url,
        "recommended_url": recommended_url,
        "existing_url_error": None,
        "recommended_url_error": None,
        "status": STATUS_SUCCESS,
    }


def _fetch_error(exc: Exception) -> str:
    invalid = (
        LocationParseError,
        requests.exceptions.InvalidURL,
        requests.exceptions.MissingSchema,
        requests.exceptions.InvalidSchema,
    )
    if isinstance(exc, invalid):
        return INVALID_URL_ERROR
    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return NETWORK_ERROR
    return f"Failed to fetch ({exc})"


def check_redirect(
    session: requests.Session,
    line: int,
    url: str,
    recommended: Optional[UrlEntry],
    timeout: int = DEFAULT_TIMEOUT,
) -> VerificationResult:
    """Resolve one existing URL and compare it with its recommended URL.

    ``recommended`` is ``None`` when the recommended list has no entry for
    this line; the fetch is still checked but nothing is compared.
    """
    if recommended is not None:
        recommended_url = recommended["normalized"] or NO_RECOMMENDED_URL
        display_recommended_url = recommended["raw"]
    else:
        recommended_url = NO_RECOMMENDED_URL
        display_recommended_url = NO_RECOMMENDED_URL

    result = _make_result(line, url, display_recommended_url)

    if not is_absolute_url(url):
        result["existing_url_error"] = INVALID_URL_ERROR
        result["status"] = STATUS_ERROR
        logger.warning("Line %d: invalid URL %r", line, url)
        return result

    try:
        status_code, final_url = resolve_url(session, url, timeout=timeout)
    except (requests.exceptions.RequestException, LocationParseError) as exc:
        result["existing_url_error"] = _fetch_error(exc)
        result["status"] = STATUS_ERROR
        logger.warning("Line %d: fetch failed for %s: %s", line, url, exc)
        return result

    if status_code != 200:
        result["existing_url_error"] = f"Returned status {status_code}"
        result["status"] = STATUS_ERROR
        logger.info("Line %d: %s returned status %d", line, url, status_code)
        return result

    decoded_final, decode_error = decode_url(final_url)
    if decode_error is not None:
        decoded_final = final_url

    if recommended is not None and decoded_final != recommended_url:
        result["recommended_url_error"] = (
            f'Redirect URL "{decoded_final}" does not match Recommended URL "{recommended_url}"'
        )
        result["status"] = STATUS_ERROR
        logger.info("Line %d: %s redirected to %s", line, url, decoded_final)
    else:
        logger.debug("Line %d: %s resolved to %s", line, url, decoded_final)
    return result


def check_preconditions(
    existing_entries: Sequence[UrlEntry], recommended_entries: Sequence[UrlEntry]
) -> Optional[str]:
    """Return the run-level error message, or None when the run may start."""
    if not existing_entries:
        return EMPTY_EXISTING_ERROR
    if not recommended_entries:
        return EMPTY_RECOMMENDED_ERROR
    return None


def iter_verification(
    existing_entries: Sequence[UrlEntry],
    recommended_entries: Sequence[UrlEntry],
    session: requests.Session,
    timeout: int = DEFAULT_TIMEOUT,
) -> Iterator[ProgressEvent]:
    """Check existing URLs one at a time, yielding after each line."""
    total = len(existing_entries)
    for index, entry in enumerate(existing_entries):
        recommended = recommended_entries[index] if index < len(recommended_entries) else None
        result = check_redirect(session, index + 1, entry["normalized"], recommended, timeout=timeout)
        percent = (index + 1) * 100 / total
        yield {"line": index + 1, "percent": percent, "result": result}


def reconcile_lengths(
    existing_entries: Sequence[UrlEntry], recommended_entries: Sequence[UrlEntry]
) -> Optional[VerificationResult]:
    """Build the single extra row reporting differing list lengths."""
    n_existing = len(existing_entries)
    n_recommended = len(recommended_entries)
    if n_existing == n_recommended:
        return None

    existing_url = existing_entries[n_recommended]["raw"] if n_existing > n_recommended else ""
    recommended_url = recommended_entries[n_existing]["raw"] if n_recommended > n_existing else ""
    result = _make_result(max(n_existing, n_recommended), existing_url, recommended_url)
    result["recommended_url_error"] = (
        f"Length mismatch: {n_existing} existing URLs vs {n_recommended} recommended URLs"
    )
    result["status"] = STATUS_ERROR
    return result


def _new_run_state() -> RunState:
    return {"progress_percent": 0.0, "results": [], "run_error": None}


def verify(
    existing_entries: Sequence[UrlEntry],
    recommended_entries: Sequence[UrlEntry],
    *,
    on_progress: Optional[ProgressSink] = None,
    session: Optional[requests.Session] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> RunState:
    """Run a full verification and return the final run state.

    A session passed by the caller is reused and left open; otherwise one is
    built for the run and closed afterwards.
    """
    state = _new_run_state()
    run_error = check_preconditions(existing_entries, recommended_entries)
    if run_error is not None:
        logger.warning("Verification not started: %s", run_error)
        state["run_error"] = run_error
        return state

    logger.info(
        "Verifying %d existing URLs against %d recommended URLs",
        len(existing_entries),
        len(recommended_entries),
    )
    owns_session = session is None
    active_session = build_session() if session is None else session
    try:
        for event in iter_verification(existing_entries, recommended_entries, active_session, timeout=timeout):
            state["results"].append(event["result"])
            state["progress_percent"] = event["percent"]
            if on_progress is not None:
                on_progress(event["percent"])
    finally:
        if owns_session:
            active_session.close()

    extra = reconcile_lengths(existing_entries, recommended_entries)
    if extra is not None:
        state["results"].append(extra)
    state["progress_percent"] = 100.0

    failures = sum(1 for res in state["results"] if res["status"] != STATUS_SUCCESS)
    logger.info("Verification finished: %d rows, %d failed", len(state["results"]), failures)
    return state


def verify_text(existing_text: str, recommended_text: str, **kwargs: Any) -> RunState:
    """Normalize both text blocks and verify them."""
    return verify(normalize_existing(existing_text), normalize_recommended(recommended_text), **kwargs)


def all_succeeded(results: Sequence[VerificationResult]) -> bool:
    return bool(results) and all(res["status"] == STATUS_SUCCESS for res in results)


def summary_message(results: Sequence[VerificationResult]) -> str:
    return ALL_MATCH_MESSAGE if all_succeeded(results) else MISMATCH_MESSAGE


def to_csv_bytes(rows: Iterable[VerificationResult]) -> bytes:
    """Serialize verification results into CSV and return the encoded bytes."""
    output = io.StringIO()
    fieldnames = [
        "line",
        "existing_url",
        "recommended_url",
        "status",
        "existing_url_error",
        "recommended_url_error",
    ]
    writer = csv.DictWriter(output, fieldnames=fieldnames)
    writer.writeheader()
    for r in rows:
        row: Dict[str, Any] = dict(r)
        writer.writerow(row)
    return output.getvalue().encode("utf-8")
