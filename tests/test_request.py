"""
Unit tests for miva_api/request.py.

Covers JSON body encoding and its failure modes, header merging, signing
over the exact body bytes, transport option forwarding, and retention of
the previous request, including sends through a real ``requests.Session``
with a recording transport adapter.
"""

from __future__ import annotations

import json

import pytest
import requests

from conftest import PRIVATE_KEY, RecordingAdapter, make_http_response
from miva_api.auth import Auth
from miva_api.exceptions import JsonSerializeError, MissingRequiredValueError
from miva_api.request import Request, encode_json
from miva_api.request_builder import RequestBuilder


URL = "https://www.example.com/mm5/json.mvc"


def _request_builder(**params) -> RequestBuilder:
    builder = RequestBuilder("PS", add_timestamp=False)
    builder.add_function(builder.start_function("ProductList_Load_Query").set_params(params))
    return builder


def _recording_session() -> tuple[requests.Session, RecordingAdapter]:
    adapter = RecordingAdapter()
    session = requests.Session()
    session.headers["X-Session-Header"] = "yes"
    session.mount("https://", adapter)
    return session, adapter


# ---------------------------------------------------------------------------
# Body encoding
# ---------------------------------------------------------------------------

class TestGetBody:

    def test_body_is_wire_request(self):
        request = Request(_request_builder(code="A"))
        body = request.get_body()
        assert json.loads(body) == {
            "Store_Code": "PS",
            "Function": "ProductList_Load_Query",
            "Code": "A",
        }
        assert request.body == body

    def test_pretty_printed_by_default(self):
        assert "\n    " in Request(_request_builder()).get_body()

    def test_compact(self):
        body = Request(_request_builder()).get_body(indent=None)
        assert "\n" not in body

    def test_empty_request(self):
        with pytest.raises(MissingRequiredValueError):
            Request(RequestBuilder("PS")).get_body()

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_number(self, value):
        with pytest.raises(JsonSerializeError):
            Request(_request_builder(price=value)).get_body()

    def test_unsupported_type(self):
        with pytest.raises(JsonSerializeError, match="not JSON serializable"):
            Request(_request_builder(when=object())).get_body()

    def test_circular_reference(self):
        loop: dict = {}
        loop["self"] = loop
        with pytest.raises(JsonSerializeError, match="Circular"):
            Request(_request_builder(data=loop)).get_body()

    def test_max_depth(self):
        nested: list = []
        for _ in range(10):
            nested = [nested]
        with pytest.raises(JsonSerializeError, match="depth"):
            Request(_request_builder(data=nested)).get_body(max_depth=5)

    def test_encode_json_within_depth(self):
        assert encode_json({"a": [1, {"b": 2}]}, indent=None, max_depth=3) == '{"a": [1, {"b": 2}]}'


# ---------------------------------------------------------------------------
# Sending
# ---------------------------------------------------------------------------

class TestSend:

    def test_posts_signed_body(self, session):
        auth = Auth("tok", PRIVATE_KEY)
        request = Request(_request_builder(code="A"), session=session)

        response = request.send(URL, auth)

        prepared = session.send.call_args.args[0]
        assert prepared.method == "POST"
        assert prepared.url == URL
        assert prepared.body == request.body.encode("utf-8")
        assert prepared.headers["Content-Type"] == "application/json"
        assert prepared.headers["X-Miva-API-Authorization"] == Auth("tok", PRIVATE_KEY).compute_header_value(prepared.body)
        assert response is session.send.return_value

    def test_default_timeout(self, session):
        Request(_request_builder(), session=session).send(URL, Auth("tok", ""))
        assert session.send.call_args.kwargs == {"timeout": 60}

    def test_transport_options_forwarded(self, session):
        request = Request(_request_builder(), {"timeout": 5, "verify": False}, session=session)
        request.send(URL, Auth("tok", ""))
        assert session.send.call_args.kwargs == {"timeout": 5, "verify": False}

    def test_caller_headers_cannot_replace_auth(self, session):
        request = Request(_request_builder(), session=session)
        request.send(
            URL,
            Auth("tok", ""),
            {"X-Custom": "1", "X-Miva-API-Authorization": "forged"},
        )
        headers = session.send.call_args.args[0].headers
        assert headers["X-Custom"] == "1"
        assert headers["X-Miva-API-Authorization"] == "MIVA tok"

    def test_one_attempt_per_send(self, session):
        request = Request(_request_builder(), session=session)
        request.send(URL, Auth("tok", ""))
        assert session.send.call_count == 1

    def test_previous_request_and_response_kept(self, session):
        session.send.return_value = make_http_response("[]")
        request = Request(_request_builder(), session=session)
        request.send(URL, Auth("tok", ""))
        assert request.previous_request is session.send.call_args.args[0]
        assert request.previous_response is session.send.return_value

    def test_transport_error_propagates(self, session):
        session.send.side_effect = requests.ConnectionError("refused")
        request = Request(_request_builder(), session=session)

        with pytest.raises(requests.ConnectionError):
            request.send(URL, Auth("tok", ""))

        assert request.previous_request is not None
        assert request.previous_response is None


class TestSendThroughSession:

    def test_session_headers_merged(self):
        session, adapter = _recording_session()
        request = Request(_request_builder(), session=session)

        request.send(URL, Auth("tok", ""), {"X-Custom": "1"})

        sent = adapter.sent[0]
        assert sent.headers["X-Session-Header"] == "yes"
        assert "User-Agent" in sent.headers
        assert sent.headers["X-Custom"] == "1"
        assert sent.headers["Content-Type"] == "application/json"
        assert sent.headers["X-Miva-API-Authorization"] == "MIVA tok"

    def test_signature_matches_sent_body(self):
        session, adapter = _recording_session()
        request = Request(_request_builder(code="A"), session=session)

        response = request.send(URL, Auth("tok", PRIVATE_KEY))

        sent = adapter.sent[0]
        assert sent.body == request.body.encode("utf-8")
        assert sent.headers["X-Miva-API-Authorization"] == Auth("tok", PRIVATE_KEY).compute_header_value(sent.body)
        assert request.previous_request is sent
        assert response.text == '{"success": 1}'

    def test_session_header_cannot_replace_auth(self):
        session, adapter = _recording_session()
        session.headers["X-Miva-API-Authorization"] = "forged"

        Request(_request_builder(), session=session).send(URL, Auth("tok", ""))

        assert adapter.sent[0].headers["X-Miva-API-Authorization"] == "MIVA tok"
