"""
Top-level API client.

Typical use::

    client = Client({
        "url": "https://www.example.com/mm5/json.mvc",
        "access_token": "0f90f77b...",
        "private_key": "12345...",
        "store_code": "PS",
    })

    products = client.func("ProductList_Load_Query").set_count(10).sort_asc("code")
    client.add(products)

    response = client.send()
    first = response.get_result("ProductList_Load_Query")

After each :meth:`Client.send` the client starts over with an empty request.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from .auth import Auth
from .config import (
    DEFAULT_HMAC_ALGORITHM,
    JSON_INDENT,
    JSON_MAX_DEPTH,
    load_options_from_env,
    validate_options,
)
from .exceptions import InvalidMethodCallError
from .function_builder import FunctionBuilder
from .request import Request
from .request_builder import RequestBuilder
from .response import Response

logger = logging.getLogger(__name__)


class Client:
    """Builds, signs, sends, and parses Miva JSON API requests."""

    def __init__(self, options: Mapping[str, Any], session: requests.Session | None = None) -> None:
        """
        Args:
            options: Client options; see :func:`miva_api.config.validate_options`.
            session: Optional ``requests.Session`` to send through.

        Raises:
            MissingRequiredValueError: A required option is missing.
            InvalidValueError: Invalid HMAC type, private key, or transport option.
        """
        self.options = validate_options(options)

        hmac_algorithm = self.options.get("hmac")
        self.auth = Auth(
            str(self.options["access_token"]),
            str(self.options["private_key"]),
            DEFAULT_HMAC_ALGORITHM if hmac_algorithm is None else str(hmac_algorithm),
        )

        self.url = str(self.options["url"])
        self.headers: dict[str, str] = {}
        self.add_headers(self.options.get("http_headers") or {})

        self.request_builder = self._create_request_builder()
        self.request = Request(
            self.request_builder,
            self.options.get("http_client") or {},
            session=session,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> Client:
        """Create a client from ``MIVA_API_*`` environment variables."""
        options = load_options_from_env(environ)
        options.update(overrides)
        return cls(options)

    def _create_request_builder(self) -> RequestBuilder:
        return RequestBuilder(
            str(self.options["store_code"]),
            bool(self.options.get("timestamp", True)),
        )

    # -----------------------------------------------------------------------
    # Request assembly
    # -----------------------------------------------------------------------

    def func(self, name: str) -> FunctionBuilder:
        """Start a call to ``name`` and return its builder."""
        return self.request_builder.start_function(name)

    @property
    def current_function(self) -> FunctionBuilder:
        """
        The most recently started function.

        Raises:
            InvalidMethodCallError: No function has been started.
        """
        if self.request_builder.function is None:
            raise InvalidMethodCallError(
                "No function has been started. Call func() before configuring a function."
            )
        return self.request_builder.function

    def add(self, function: FunctionBuilder | None = None) -> Client:
        """
        Add ``function`` (or the current function) to the request.

        Raises:
            InvalidMethodCallError: No function given and none started.
        """
        if function is None:
            function = self.current_function
        self.request_builder.add_function(function)
        return self

    def get_function_list(self) -> dict[str, list[FunctionBuilder]]:
        return self.request_builder.get_function_list()

    def add_header(self, name: str, value: str) -> Client:
        self.headers[name] = value
        return self

    def add_headers(self, headers: Mapping[str, str]) -> Client:
        for name, value in headers.items():
            self.add_header(name, value)
        return self

    def set_url(self, url: str) -> Client:
        self.url = url
        return self

    # -----------------------------------------------------------------------
    # Execution
    # -----------------------------------------------------------------------

    def get_request_body(self, indent: int | None = JSON_INDENT, max_depth: int = JSON_MAX_DEPTH) -> str:
        """Return the JSON body the pending request would send."""
        return self.request.get_body(indent, max_depth)

    @property
    def previous_request(self) -> requests.PreparedRequest | None:
        return self.request.previous_request

    @property
    def previous_response(self) -> requests.Response | None:
        return self.request.previous_response

    def _refresh_request_builder(self) -> None:
        self.request_builder = self._create_request_builder()
        self.request.set_request_builder(self.request_builder)

    def send(self, raw_response: bool = False) -> Response | str:
        """
        Send the pending request and start a fresh one.

        Args:
            raw_response: Return the response body string instead of a
                parsed :class:`Response`.

        Raises:
            MissingRequiredValueError: No function was added.
            JsonSerializeError: The request or response JSON is invalid.
            requests.RequestException: Transport failure.
        """
        http_response = self.request.send(self.url, self.auth, self.headers)

        # Function names must be captured before the builder is replaced
        function_names = self.request_builder.function_names
        self._refresh_request_builder()

        body = http_response.text
        logger.debug("Received %d characters for %s", len(body), function_names)
        if raw_response:
            return body

        return Response(function_names, body)
