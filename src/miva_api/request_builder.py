"""
Builder for a complete API request.

Collects :class:`FunctionBuilder` calls grouped by function name, in the
order the names were first registered, and flattens them into one of three
wire shapes:

- one function, one call:   ``{"Store_Code", "Function", **params}``
- one function, many calls: ``{"Store_Code", "Function", "Iterations": [...]}``
- many functions:           ``{"Store_Code", "Operations": [{"Function", ...}, ...]}``
"""

from __future__ import annotations

import time

from .exceptions import MissingRequiredValueError
from .function_builder import FunctionBuilder


class RequestBuilder:
    """Store code, timestamp flag, and the ordered function call registry."""

    def __init__(self, store_code: str, add_timestamp: bool = True) -> None:
        self.store_code = str(store_code).strip()
        if not self.store_code:
            raise MissingRequiredValueError("A valid store code value must be provided.")

        self.add_timestamp = add_timestamp
        self.function: FunctionBuilder | None = None
        self._functions: dict[str, list[FunctionBuilder]] = {}

    def start_function(self, name: str) -> FunctionBuilder:
        """
        Start a new call to ``name`` and make it the current function.

        The name is registered immediately so that the function keeps its
        position in the request even before the call is added.
        """
        function = FunctionBuilder(name)
        self._functions.setdefault(function.name, [])
        self.function = function
        return function

    def add_function(self, function: FunctionBuilder | None = None) -> RequestBuilder:
        """
        Append a call under its function name.

        Adding several calls with the same name produces ``Iterations``.

        Raises:
            MissingRequiredValueError: No function given and none started.
        """
        if function is not None:
            self.function = function

        if self.function is None:
            raise MissingRequiredValueError(
                "No function to add. Start a function before adding it."
            )

        self._functions.setdefault(self.function.name, []).append(self.function)
        return self

    @property
    def function_names(self) -> list[str]:
        """Registered function names, in registration order."""
        return list(self._functions)

    def get_function_list(self) -> dict[str, list[FunctionBuilder]]:
        return {name: list(calls) for name, calls in self._functions.items()}

    @staticmethod
    def _function_parameters(name: str, calls: list[FunctionBuilder]) -> dict:
        params: dict = {"Function": name}
        if len(calls) == 1:
            params.update(calls[0].to_wire_parameters())
        elif len(calls) > 1:
            params["Iterations"] = [call.to_wire_parameters() for call in calls]
        return params

    def to_wire_request(self) -> dict:
        """
        Flatten the request into its JSON-serializable wire form.

        Raises:
            MissingRequiredValueError: No function call was ever added.
        """
        if not any(self._functions.values()):
            raise MissingRequiredValueError("Function list cannot be empty.")

        request: dict = {"Store_Code": self.store_code}

        if self.add_timestamp:
            request["Miva_Request_Timestamp"] = int(time.time())

        if len(self._functions) == 1:
            [(name, calls)] = self._functions.items()
            request.update(self._function_parameters(name, calls))
        else:
            request["Operations"] = [
                self._function_parameters(name, calls)
                for name, calls in self._functions.items()
            ]

        return request
