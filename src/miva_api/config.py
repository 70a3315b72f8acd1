"""
API constants, client option validation, and environment loading.

All constants used across the builder, auth, request, and response modules
are centralized here so that configuration is separated from logic.

ENVIRONMENT VARIABLES (read by :func:`load_options_from_env`):
    MIVA_API_URL           — JSON API endpoint, e.g. https://example.com/mm5/json.mvc
    MIVA_API_ACCESS_TOKEN  — API access token
    MIVA_API_PRIVATE_KEY   — base64 private key; set to an empty string for
                             unsigned requests
    MIVA_API_STORE_CODE    — store code
    MIVA_API_HMAC          — optional, 'sha1' or 'sha256' (default)
    MIVA_API_TIMEOUT       — optional, HTTP timeout in seconds
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from .exceptions import InvalidValueError, MissingRequiredValueError

# ---------------------------------------------------------------------------
# Wire protocol
# ---------------------------------------------------------------------------

AUTH_HEADER_NAME = "X-Miva-API-Authorization"
CONTENT_TYPE = "application/json"
DEFAULT_HEADERS: dict[str, str] = {"Content-Type": CONTENT_TYPE}

# Supported HMAC digests; "" (unsigned) is accepted separately
HMAC_ALGORITHMS: tuple[str, ...] = ("sha1", "sha256")
DEFAULT_HMAC_ALGORITHM = "sha256"

# Same default nesting limit as the original PHP json_encode call
JSON_MAX_DEPTH = 512
JSON_INDENT = 4

REQUEST_TIMEOUT_SECONDS: int = 60

# ---------------------------------------------------------------------------
# Function parameters
# ---------------------------------------------------------------------------

# Emitted before any custom parameter, in this order, when set
COMMON_PARAMETERS: tuple[str, ...] = ("count", "offset", "passphrase", "sort")

# ---------------------------------------------------------------------------
# Search filter operators
# ---------------------------------------------------------------------------

# Operators that take no value
NULL_OPERATORS: tuple[str, ...] = ("TRUE", "FALSE", "NULL")

SEARCH_OPERATORS: tuple[str, ...] = (
    "EQ",        # field equals value (generally case insensitive)
    "GT",        # field is greater than value
    "GE",        # field is greater than or equal to value
    "LT",        # field is less than value
    "LE",        # field is less than or equal to value
    "CO",        # field contains value
    "NC",        # field does not contain value
    "LIKE",      # field matches value using SQL LIKE semantics
    "NOTLIKE",   # field does not match value using SQL LIKE semantics
    "NE",        # field is not equal to value
    "TRUE",      # field is true
    "FALSE",     # field is false
    "NULL",      # field is null
    "IN",        # field equals one of the comma-separated values
    "SUBWHERE",  # parenthetical comparison; value is a list of clauses
)

DEFAULT_SEARCH_OPERATOR = "EQ"

# ---------------------------------------------------------------------------
# Show filter
# ---------------------------------------------------------------------------

# Lower-cased function name → wire filter name
SHOW_FILTER_NAMES: dict[str, str] = {
    "categorylist_load_query": "Category_Show",
    "categoryproductlist_load_query": "Product_Show",
    "productlist_load_query": "Product_Show",
}

# Lower-cased function name → permitted (capitalized) show values
SHOW_FILTER_VALUES: dict[str, tuple[str, ...]] = {
    "categorylist_load_query": ("Active", "All"),
    "categoryproductlist_load_query": ("Active", "All", "Uncategorized"),
    "productlist_load_query": ("Active", "All", "Uncategorized"),
}

# ---------------------------------------------------------------------------
# Client options
# ---------------------------------------------------------------------------

REQUIRED_OPTIONS: tuple[str, ...] = ("access_token", "store_code", "url")

# Keyword arguments forwarded to requests.Session.send
TRANSPORT_OPTIONS: frozenset[str] = frozenset({"timeout", "verify", "cert", "proxies"})

ENV_OPTION_MAP: dict[str, str] = {
    "url": "MIVA_API_URL",
    "access_token": "MIVA_API_ACCESS_TOKEN",
    "private_key": "MIVA_API_PRIVATE_KEY",
    "store_code": "MIVA_API_STORE_CODE",
    "hmac": "MIVA_API_HMAC",
}
ENV_TIMEOUT = "MIVA_API_TIMEOUT"


def validate_options(options: Mapping) -> dict:
    """
    Check a client options mapping and return a copy of it.

    ``private_key`` must be present, but an empty string is allowed and
    means requests are sent without an HMAC signature.

    Args:
        options: Client options (see the table in the package docs).

    Returns:
        A plain dict copy of ``options``.

    Raises:
        MissingRequiredValueError: A required option is missing or empty.
        InvalidValueError: ``http_client`` holds an unsupported option.
    """
    if options.get("private_key") is None:
        raise MissingRequiredValueError(
            'Missing required option "private_key". Hint: set the option to '
            "an empty string if the store accepts requests without a signature."
        )

    for option in REQUIRED_OPTIONS:
        value = options.get(option)
        if value is None or not str(value).strip():
            raise MissingRequiredValueError(f'Missing required option "{option}".')

    transport = options.get("http_client") or {}
    unknown = sorted(set(transport) - TRANSPORT_OPTIONS)
    if unknown:
        raise InvalidValueError(
            f"Unsupported http_client option(s): {', '.join(unknown)}. "
            f"Supported: {', '.join(sorted(TRANSPORT_OPTIONS))}."
        )

    return dict(options)


def load_options_from_env(environ: Mapping[str, str] | None = None) -> dict:
    """
    Build a client options dict from ``MIVA_API_*`` environment variables.

    Unset variables are left out so that :func:`validate_options` reports
    exactly which one is missing.

    Args:
        environ: Mapping to read from; defaults to ``os.environ``.

    Returns:
        Options dict suitable for :class:`miva_api.client.Client`.

    Raises:
        InvalidValueError: ``MIVA_API_TIMEOUT`` is not a number.
    """
    env = os.environ if environ is None else environ

    options: dict = {
        option: env[env_var]
        for option, env_var in ENV_OPTION_MAP.items()
        if env_var in env
    }

    timeout = env.get(ENV_TIMEOUT)
    if timeout:
        try:
            options["http_client"] = {"timeout": float(timeout)}
        except ValueError:
            raise InvalidValueError(
                f"{ENV_TIMEOUT} must be a number of seconds, got '{timeout}'."
            ) from None

    return options
