"""
Request serialization, signing, and HTTP execution.

Design notes:
- The auth header is computed over the exact bytes that are sent, so the
  body is encoded once and reused for both signing and the POST.
- Exactly one POST per :meth:`Request.send`; retries are left to the caller.
- The prepared request is kept on ``previous_request`` before it is sent so
  that it can be inspected even if the transport raises.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import requests

from .auth import Auth
from .config import DEFAULT_HEADERS, JSON_INDENT, JSON_MAX_DEPTH, REQUEST_TIMEOUT_SECONDS
from .exceptions import JsonSerializeError
from .request_builder import RequestBuilder

logger = logging.getLogger(__name__)


def _json_depth(value: Any) -> int:
    """Nesting depth of a decoded JSON structure (scalars are depth 0)."""
    if isinstance(value, Mapping):
        children = value.values()
    elif isinstance(value, (list, tuple)):
        children = value
    else:
        return 0
    return 1 + max((_json_depth(child) for child in children), default=0)


def encode_json(value: Any, indent: int | None = JSON_INDENT, max_depth: int = JSON_MAX_DEPTH) -> str:
    """
    Encode ``value`` as JSON, raising :class:`JsonSerializeError` on failure.

    NaN/Infinity are rejected, as are circular references, unsupported types,
    and structures nested deeper than ``max_depth``.
    """
    try:
        body = json.dumps(value, indent=indent, allow_nan=False)
    except RecursionError as exc:
        raise JsonSerializeError("The maximum stack depth has been exceeded.") from exc
    except (TypeError, ValueError) as exc:
        raise JsonSerializeError(str(exc)) from exc

    if _json_depth(value) > max_depth:
        raise JsonSerializeError(
            f"The maximum stack depth has been exceeded ({max_depth})."
        )

    return body


class Request:
    """Serializes a :class:`RequestBuilder`, signs it, and POSTs it."""

    def __init__(
        self,
        request_builder: RequestBuilder,
        transport_options: Mapping[str, Any] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.request_builder = request_builder
        self.transport_options: dict[str, Any] = {"timeout": REQUEST_TIMEOUT_SECONDS}
        self.transport_options.update(transport_options or {})
        self.session = session if session is not None else requests.Session()
        self.headers: dict[str, str] = dict(DEFAULT_HEADERS)
        self.body = ""
        self.previous_request: requests.PreparedRequest | None = None
        self.previous_response: requests.Response | None = None

    def set_request_builder(self, request_builder: RequestBuilder) -> Request:
        self.request_builder = request_builder
        return self

    def get_body(self, indent: int | None = JSON_INDENT, max_depth: int = JSON_MAX_DEPTH) -> str:
        """
        Serialize the request builder to a JSON string.

        Raises:
            MissingRequiredValueError: The request holds no function calls.
            JsonSerializeError: The payload cannot be encoded.
        """
        self.body = encode_json(self.request_builder.to_wire_request(), indent, max_depth)
        return self.body

    def send(
        self,
        url: str,
        auth: Auth,
        http_headers: Mapping[str, str] | None = None,
    ) -> requests.Response:
        """
        Sign and POST the request body to ``url``.

        Header precedence: defaults, then ``http_headers``, then the auth
        header.

        Returns:
            The raw ``requests.Response``.  Status codes are not checked; the
            API reports errors in the JSON body.

        Raises:
            JsonSerializeError: The payload cannot be encoded.
            requests.RequestException: Transport failure, unmodified.
        """
        body = self.get_body().encode("utf-8")

        headers = {**self.headers, **(http_headers or {}), **auth.get_auth_header(body)}

        # Session headers, auth and cookies are merged in; the signed body is untouched
        prepared = self.session.prepare_request(
            requests.Request("POST", url, headers=headers, data=body)
        )
        self.previous_request = prepared

        logger.debug(
            "POST %s (%d bytes, functions=%s, signed=%s)",
            url,
            len(body),
            self.request_builder.function_names,
            auth.is_signed,
        )

        response = self.session.send(prepared, **self.transport_options)
        self.previous_response = response

        logger.debug("Response %s from %s", response.status_code, url)

        return response
