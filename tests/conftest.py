"""Shared fixtures: stub HTTP transport and the Flask test client."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

import pytest
import requests


class DummyResponse:  # pylint: disable=too-few-public-methods
    """Minimal stub mimicking requests.Response for tests."""

    def __init__(self, *, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url


class DummySession(requests.Session):
    """Session answering from a URL -> response (or exception) mapping."""

    def __init__(self, routes: Mapping[str, Union[DummyResponse, Exception]]) -> None:
        super().__init__()
        self._routes: Dict[str, Union[DummyResponse, Exception]] = dict(routes)
        self.get_calls: List[str] = []
        self.get_kwargs: List[Dict[str, Any]] = []
        self.closed = False

    def get(  # type: ignore[override]  # pragma: no cover - signature mirrors requests
        self, url: str, **kwargs: Any
    ) -> DummyResponse:
        """Return the routed response while recording the call."""
        self.get_calls.append(url)
        self.get_kwargs.append(kwargs)
        outcome = self._routes.get(url)
        if outcome is None:
            raise requests.exceptions.ConnectionError(f"no route to {url}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:  # pragma: no cover - mirror close contract
        self.closed = True


@pytest.fixture
def client():
    """Flask test client for the web service."""
    from app import app as flask_app

    flask_app.config.update(TESTING=True)
    with flask_app.test_client() as test_client:
        yield test_client
