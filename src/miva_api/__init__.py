"""
miva_api — client for the Miva JSON API.

Module layout
-------------
config.py            — wire constants, operator/show tables, option validation
exceptions.py        — error hierarchy
filters.py           — search, show, on-demand-column, and generic filters
function_builder.py  — one function call: common params, custom params, filters
request_builder.py   — function registry and Function/Iterations/Operations shapes
auth.py              — X-Miva-API-Authorization header (plain token or HMAC)
request.py           — JSON serialization, signing, HTTP POST
response.py          — response parsing and per-function reconciliation
client.py            — top-level Client

Public interface
----------------
Build and send a request:
    client = Client(options)
    client.add(client.func("ProductList_Load_Query").set_count(5))
    response = client.send()

Read results:
    response.is_success()
    response.get_result(function_name, index=0)
    response.get_function_results(function_name)
"""

from .auth import Auth
from .client import Client
from .exceptions import (
    InvalidArgumentError,
    InvalidMethodCallError,
    InvalidValueError,
    JsonSerializeError,
    MissingRequiredValueError,
    MivaApiError,
)
from .filters import build_filter, resolve_operator_and_value
from .function_builder import FunctionBuilder
from .request import Request
from .request_builder import RequestBuilder
from .response import Response, ResponseErrors

__all__ = [
    # Client
    "Client",
    # Builders
    "FunctionBuilder",
    "RequestBuilder",
    "build_filter",
    "resolve_operator_and_value",
    # Transport
    "Auth",
    "Request",
    "Response",
    "ResponseErrors",
    # Errors
    "MivaApiError",
    "InvalidValueError",
    "MissingRequiredValueError",
    "InvalidArgumentError",
    "JsonSerializeError",
    "InvalidMethodCallError",
]
