"""
Exception hierarchy for the Miva API client.

Every error raised by the library derives from :class:`MivaApiError`.
Validation errors also subclass ``ValueError`` so callers that already guard
against bad input with ``except ValueError`` keep working.

Transport failures are not wrapped: ``requests`` exceptions reach the caller
unchanged.
"""

from __future__ import annotations


class MivaApiError(Exception):
    """Base class for all Miva API client errors."""


class InvalidValueError(MivaApiError, ValueError):
    """A value failed a local validation rule (blank name, bad operator, ...)."""


class MissingRequiredValueError(MivaApiError, ValueError):
    """A required structural element or configuration option is absent."""


class InvalidArgumentError(MivaApiError, ValueError):
    """A combination of positional arguments contradicts itself."""


class JsonSerializeError(MivaApiError, ValueError):
    """Encoding the request or decoding the response JSON failed."""


class InvalidMethodCallError(MivaApiError, RuntimeError):
    """A function-builder helper was used with no function to act on."""
