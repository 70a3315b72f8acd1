"""
Builder for a single API function call.

A :class:`FunctionBuilder` collects the common parameters (``Count``,
``Offset``, ``Passphrase``, ``Sort``), arbitrary function parameters, and an
ordered filter list, then flattens them into the wire parameter map with
:meth:`FunctionBuilder.to_wire_parameters`.

Example::

    products = (
        FunctionBuilder("ProductList_Load_Query")
        .set_count(10)
        .sort_desc("price")
        .add_search("active", "TRUE")
        .add_on_demand_columns(["descrip", "images"])
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .config import COMMON_PARAMETERS
from .exceptions import InvalidValueError, MissingRequiredValueError
from .filters import FilterNode, build_filter, resolve_operator_and_value


def format_parameter_name(name: str) -> str:
    """Title-case a parameter name per word (``product_code`` → ``Product_Code``)."""
    return name.title()


class FunctionBuilder:
    """One named function call within an API request."""

    def __init__(self, name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise MissingRequiredValueError(f'Invalid function name "{name}" provided.')

        self._name = name
        self.count: int | None = None
        self.offset: int | None = None
        self.passphrase: str | None = None
        self.sort: str | None = None
        self.parameters: dict[str, Any] = {}
        self.filters: list[FilterNode] = []

    def __repr__(self) -> str:
        return f"FunctionBuilder({self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    # -----------------------------------------------------------------------
    # Common parameters
    # -----------------------------------------------------------------------

    def set_count(self, count: int) -> FunctionBuilder:
        """Set the number of records to return."""
        self.count = count
        return self

    def set_offset(self, offset: int) -> FunctionBuilder:
        """Set the offset of the first record to return."""
        self.offset = offset
        return self

    def set_passphrase(self, passphrase: str) -> FunctionBuilder:
        self.passphrase = passphrase
        return self

    def sort_asc(self, column: str) -> FunctionBuilder:
        self.sort = column.lower()
        return self

    def sort_desc(self, column: str) -> FunctionBuilder:
        """Sort descending; an existing leading ``-`` is not doubled."""
        self.sort = "-" + column.lstrip("-").lower()
        return self

    def set_params(self, parameters: Mapping[str, Any]) -> FunctionBuilder:
        """Replace the function's custom input parameters."""
        self.parameters = dict(parameters)
        return self

    # -----------------------------------------------------------------------
    # Filters
    # -----------------------------------------------------------------------

    def add_filter(self, name: str, value: Any) -> FunctionBuilder:
        self.filters.append(build_filter(name, value, self._name))
        return self

    def add_filters(self, filters: Mapping[str, Any]) -> FunctionBuilder:
        """Add each ``name → value`` pair as a filter, in mapping order."""
        for name, value in filters.items():
            self.add_filter(name, value)
        return self

    def add_search(self, *args: Any) -> FunctionBuilder:
        """
        Add a search filter.

        Accepts either a single pre-built clause (a mapping, or a list of
        mappings) or ``field[, operator[, value]]``::

            fn.add_search({"field": "code", "operator": "EQ", "value": "abc"})
            fn.add_search("code", "abc")           # EQ "abc"
            fn.add_search("price", "GT", 10)
            fn.add_search("active", "TRUE")        # no value

        Raises:
            InvalidValueError: Wrong number of arguments, or an empty or
                non-mapping single argument.
            InvalidArgumentError: Contradictory operator/value combination.
        """
        if not 1 <= len(args) <= 3:
            raise InvalidValueError(
                f"add_search() takes 1 to 3 arguments ({len(args)} given)."
            )

        if len(args) == 1:
            clause = args[0]
            if not isinstance(clause, (Mapping, list, tuple)) or not clause:
                raise InvalidValueError(
                    "add_search() expects a non-empty search clause mapping "
                    "when called with a single argument."
                )
            return self.add_filter("search", clause)

        field, *rest = args
        operator, value = resolve_operator_and_value(*rest)

        return self.add_filter(
            "search",
            {
                "field": field,
                "operator": operator.upper() if isinstance(operator, str) else operator,
                "value": value,
            },
        )

    def add_show(self, show_value: str) -> FunctionBuilder:
        """Add a ``Category_Show``/``Product_Show`` filter (active, all, uncategorized)."""
        return self.add_filter("show", show_value)

    def add_on_demand_columns(self, columns: list) -> FunctionBuilder:
        """Request additional columns be returned with each record."""
        return self.add_filter("ondemandcolumns", columns)

    odc = add_on_demand_columns

    # -----------------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------------

    def to_wire_parameters(self) -> dict:
        """
        Flatten the call into its wire parameter map.

        Order: common parameters that are set, custom parameters in insertion
        order, then ``Filter`` when at least one filter exists.
        """
        params: dict = {}

        for parameter in COMMON_PARAMETERS:
            value = getattr(self, parameter)
            if value is not None:
                params[format_parameter_name(parameter)] = value

        for name, value in self.parameters.items():
            params[format_parameter_name(name)] = value

        if self.filters:
            params["Filter"] = [node.to_wire() for node in self.filters]

        return params
