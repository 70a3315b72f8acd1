"""
Shared pytest fixtures for the Miva API client tests.

HTTP is never touched: clients and requests are given a ``MagicMock``
standing in for ``requests.Session`` whose ``prepare_request`` builds a real
prepared request and whose ``send`` returns a canned response object with
``status_code`` and ``text``.
"""

from __future__ import annotations

import base64
from unittest.mock import MagicMock

import pytest
import requests
from requests.adapters import BaseAdapter


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ACCESS_TOKEN = "tok"
STORE_CODE = "PS"
API_URL = "https://www.example.com/mm5/json.mvc"

# base64("secret")
PRIVATE_KEY = base64.b64encode(b"secret").decode("ascii")


def make_http_response(text: str, status_code: int = 200) -> MagicMock:
    """Minimal stand-in for ``requests.Response``."""
    response = MagicMock(spec=requests.Response)
    response.text = text
    response.status_code = status_code
    return response


class RecordingAdapter(BaseAdapter):
    """Transport adapter that records prepared requests instead of sending them."""

    def __init__(self, body: bytes = b'{"success": 1}') -> None:
        super().__init__()
        self.body = body
        self.sent: list[requests.PreparedRequest] = []

    def send(self, request, **kwargs):
        self.sent.append(request)
        response = requests.Response()
        response.status_code = 200
        response._content = self.body
        response.encoding = "utf-8"
        response.request = request
        response.url = request.url
        return response

    def close(self):
        pass


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def options():
    """Valid client options for a signed (HMAC-SHA256) store."""
    return {
        "url": API_URL,
        "access_token": ACCESS_TOKEN,
        "private_key": PRIVATE_KEY,
        "store_code": STORE_CODE,
    }


@pytest.fixture
def session():
    """Mock session returning a successful empty response by default."""
    mock_session = MagicMock(spec=requests.Session)
    mock_session.prepare_request.side_effect = lambda request: request.prepare()
    mock_session.send.return_value = make_http_response('{"success": 1, "data": {}}')
    return mock_session
