"""
Shared fixtures for unit tests.

HTTP goes through a `Mock` spec'd on `requests.Session`; nothing leaves the process.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import Mock

import pytest
import requests

from cowork_booking.network.client import ApiClient
from cowork_booking.notifications import Notifier
from cowork_booking.schemas.auth import AuthResponse
from cowork_booking.session import SessionContext


def _make_response(status_code: int = 200, body: Any = None, content: bytes = b"") -> Mock:
    res = Mock(spec=requests.Response)
    res.status_code = status_code
    res.reason = "OK" if status_code < 400 else "Error"
    if body is not None:
        res.content = json.dumps(body).encode("utf-8")
        res.text = json.dumps(body)
        res.json.return_value = body
    else:
        res.content = content
        res.text = ""
        res.json.side_effect = ValueError("No JSON body")
    return res


@pytest.fixture
def make_response() -> Callable[..., Mock]:
    """Factory for mocked `requests.Response` objects."""
    return _make_response


@pytest.fixture
def session(tmp_path: Path) -> SessionContext:
    """A signed-in session persisted under tmp_path."""
    ctx = SessionContext(tmp_path / "currentUser.json")
    ctx.set_user(
        AuthResponse(
            token="test-token",
            user_id=7,
            username="alice",
            email="alice@example.com",
            role="RECEPTIONISTE",
        )
    )
    return ctx


@pytest.fixture
def http() -> Mock:
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session: SessionContext, http: Mock) -> ApiClient:
    return ApiClient(session, base_url="http://backend.test", timeout=5, http=http)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()
