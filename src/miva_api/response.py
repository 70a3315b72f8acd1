"""
API response parsing and reconciliation with the request's function names.

The API answers in one of two shapes, decided by the JSON root type:

- object — a single-function response, or a request-level error::

      {"success": 1, "data": {...}}
      {"success": 0, "error_code": "...", "error_message": "..."}

- array  — one element per iteration (single function) or per operation
  (multiple functions); an element is a record object or a list of them.

Records are kept as decoded JSON (plain dicts).  No I/O occurs here.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .exceptions import InvalidValueError, JsonSerializeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseErrors:
    success: bool = True
    code: str | None = None
    message: str | None = None


def _error_from_record(record: dict) -> ResponseErrors:
    code = record.get("error_code")
    message = record.get("error_message")
    return ResponseErrors(
        success=False,
        code=None if code is None else str(code),
        message=None if message is None else str(message),
    )


class Response:
    """Per-function result records parsed from one API response body."""

    def __init__(self, function_names: Sequence[str], body: str) -> None:
        if not function_names:
            raise InvalidValueError("Empty request function list provided.")

        self.body = body
        self.functions: list[str] = list(function_names)
        self.errors = ResponseErrors()
        self._data: dict[str, list] = {}
        self._success: bool | None = None

        self._parse(body)

    # -----------------------------------------------------------------------
    # Parsing
    # -----------------------------------------------------------------------

    def _parse(self, body: str) -> None:
        try:
            payload = json.loads(body)
        except (TypeError, ValueError) as exc:
            raise JsonSerializeError(f"Invalid JSON response: {exc}") from exc

        if isinstance(payload, dict):
            self._parse_object(payload)
        elif isinstance(payload, list):
            self._parse_array(payload)
        else:
            raise JsonSerializeError(
                f"Unexpected JSON response root type: {type(payload).__name__}."
            )

        if self._success is None:
            self._success = True

        if not self._success:
            logger.warning(
                "API reported failure for %s: [%s] %s",
                self.functions,
                self.errors.code,
                self.errors.message,
            )

        logger.debug(
            "Parsed response: %s",
            {name: len(records) for name, records in self._data.items()},
        )

    def _parse_object(self, payload: dict) -> None:
        self._success = bool(payload.get("success"))

        if not self._success:
            self.errors = _error_from_record(payload)
            return

        data = payload.get("data")
        records = list(data) if isinstance(data, list) and data else [payload]
        self._data = {self.functions[0]: records}

    def _parse_array(self, payload: list) -> None:
        single_function = len(self.functions) == 1

        for index, results in enumerate(payload):
            if single_function:
                function_name = self.functions[0]
            elif index < len(self.functions):
                function_name = self.functions[index]
            else:
                raise InvalidValueError(
                    f"Response contains {len(payload)} results but only "
                    f"{len(self.functions)} functions were requested."
                )

            records = results if isinstance(results, list) else [results]
            bucket = self._data.setdefault(function_name, [])

            # Non-object records are kept so indexes line up with the response
            for record in records:
                bucket.append(record)
                if not isinstance(record, dict):
                    continue
                if "success" in record and not record["success"] and self._success is None:
                    self._success = False
                    self.errors = _error_from_record(record)

    # -----------------------------------------------------------------------
    # Accessors
    # -----------------------------------------------------------------------

    def is_success(self) -> bool:
        return bool(self._success)

    def _check_function(self, function_name: str) -> None:
        if function_name not in self._data:
            raise InvalidValueError(
                f'Function name "{function_name}" invalid or missing from results list.'
            )

    def get_function_results(self, function_name: str) -> list:
        """
        Return every record for ``function_name``, in response order.

        For a single-object response, a non-empty ``data`` list yields its
        items as the records; otherwise the whole object is one record.

        Raises:
            InvalidValueError: The function has no results in this response.
        """
        self._check_function(function_name)
        return list(self._data[function_name])

    def get_result(self, function_name: str, index: int = 0) -> Any:
        """
        Return one record for ``function_name``.

        When the record wraps its payload in a ``data`` member (the usual
        ``{"success": 1, "data": {...}}`` form), the payload is returned.

        Raises:
            InvalidValueError: Unknown function name or out-of-range index.
        """
        self._check_function(function_name)

        records = self._data[function_name]
        if not 0 <= index < len(records):
            raise InvalidValueError(
                f'Index "{index}" does not exist for function "{function_name}".'
            )

        record = records[index]
        if isinstance(record, dict) and "data" in record:
            return record["data"]
        return record

    def get_response(self, function_name: str | None = None) -> Any:
        """All results keyed by function name, or one function's records."""
        if function_name is not None:
            return self.get_function_results(function_name)
        return {name: list(records) for name, records in self._data.items()}
