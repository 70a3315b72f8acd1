"""
Filter construction for API function calls.

A filter is a ``{"name": ..., "value": ...}`` node in a function's ``Filter``
list.  The value is one of four variants, each knowing its own wire form:

- :class:`SearchFilterList` — one or more ``field``/``operator``/``value`` clauses
- :class:`OnDemandColumns`  — list of extra columns to return
- :class:`ShowFilter`       — visibility scope for the list-load functions
- :class:`GenericFilter`    — any other filter, value passed through as-is

:func:`build_filter` picks the variant from the filter name.  No I/O occurs
here.
"""

from __future__ import annotations

import numbers
from collections.abc import Mapping, Sized
from dataclasses import dataclass
from typing import Any, Union

from .config import (
    DEFAULT_SEARCH_OPERATOR,
    NULL_OPERATORS,
    SEARCH_OPERATORS,
    SHOW_FILTER_NAMES,
    SHOW_FILTER_VALUES,
)
from .exceptions import (
    InvalidArgumentError,
    InvalidValueError,
    MissingRequiredValueError,
)


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------

def is_blank_value(value: Any) -> bool:
    """
    Return True if ``value`` is considered empty for a filter.

    ``None``, whitespace-only strings, and empty containers are blank.
    Booleans and numbers are never blank, so ``False`` and ``0`` are valid
    filter values.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, numbers.Number):
        return False
    if isinstance(value, Sized):
        return len(value) == 0
    return not value


def is_null_operator(operator: Any) -> bool:
    return isinstance(operator, str) and operator.upper() in NULL_OPERATORS


def is_invalid_operator(operator: Any) -> bool:
    return not isinstance(operator, str) or operator.upper() not in SEARCH_OPERATORS


def is_invalid_operator_and_value(operator: Any, value: Any) -> bool:
    """True for a known, value-taking operator that was given no value."""
    return (
        value is None
        and not is_invalid_operator(operator)
        and not is_null_operator(operator)
    )


def resolve_operator_and_value(operator: Any, value: Any = None) -> tuple[Any, Any]:
    """
    Resolve the operator/value pair of a positional search call.

    Rules, applied in order:

    1. No value and not a null operator: ``operator`` is really the value,
       compared with ``EQ``  (``search("code", "abc")``).
    2. Null operator (``TRUE``/``FALSE``/``NULL``): value is dropped.
    3. Known value-taking operator with no value: contradictory, rejected.
    4. Unrecognized operator: the literal string is the value, with ``EQ``.

    Returns:
        Tuple of (operator, value).

    Raises:
        InvalidArgumentError: Rule 3.
    """
    null_operator = is_null_operator(operator)

    if value is None and not null_operator:
        return DEFAULT_SEARCH_OPERATOR, operator

    if null_operator:
        return operator, None

    if is_invalid_operator_and_value(operator, value):
        raise InvalidArgumentError(
            "Invalid operator and value search filter combination."
        )

    if is_invalid_operator(operator):
        return DEFAULT_SEARCH_OPERATOR, operator

    return operator, value


# ---------------------------------------------------------------------------
# Filter value variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchFilter:
    """A single search clause: ``field`` compared to ``value`` by ``operator``."""

    field: str
    operator: str
    value: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.field, str) or not self.field.strip():
            raise InvalidValueError('Invalid value provided for search filter "field".')
        object.__setattr__(self, "field", self.field.strip())

        if is_invalid_operator(self.operator):
            raise InvalidValueError(f'Invalid search operator "{self.operator}" provided.')
        object.__setattr__(self, "operator", self.operator.upper())

        if self.value is None and self.operator not in NULL_OPERATORS:
            raise InvalidValueError(
                f'Search operator "{self.operator}" requires a value '
                f'for field "{self.field}".'
            )

    def to_wire(self) -> dict:
        params: dict = {"field": self.field, "operator": self.operator}
        if self.value is not None:
            params["value"] = self.value
        return params


@dataclass(frozen=True)
class SearchFilterList:
    filters: tuple[SearchFilter, ...]

    def to_wire(self) -> list:
        return [search.to_wire() for search in self.filters]


@dataclass(frozen=True)
class OnDemandColumns:
    columns: list

    def to_wire(self) -> list:
        return list(self.columns)


@dataclass(frozen=True)
class GenericFilter:
    value: Any

    def to_wire(self) -> Any:
        return self.value


@dataclass(frozen=True)
class ShowFilter:
    """
    Visibility scope for the category/product list-load functions.

    ``show_value`` is stored capitalized (``"active"`` → ``"Active"``), which
    is also the form sent on the wire.
    """

    function_name: str
    show_value: str

    def __post_init__(self) -> None:
        function_key = str(self.function_name).lower()
        if function_key not in SHOW_FILTER_NAMES:
            raise InvalidValueError(
                f'Show filter is not supported for function "{self.function_name}".'
            )

        if not isinstance(self.show_value, str):
            raise InvalidValueError(
                f'Invalid value "{self.show_value}" provided to show filter.'
            )

        show_value = self.show_value.strip().capitalize()
        allowed = SHOW_FILTER_VALUES[function_key]
        if show_value not in allowed:
            raise InvalidValueError(
                f'Invalid value "{self.show_value}" provided to show filter. '
                f"Valid values for {self.function_name}: {', '.join(allowed)}."
            )

        object.__setattr__(self, "function_name", function_key)
        object.__setattr__(self, "show_value", show_value)

    @property
    def filter_name(self) -> str:
        """Wire filter name: ``Category_Show`` or ``Product_Show``."""
        return SHOW_FILTER_NAMES[self.function_name]

    def to_wire(self) -> str:
        return self.show_value


FilterValue = Union[SearchFilterList, OnDemandColumns, ShowFilter, GenericFilter]


@dataclass(frozen=True)
class FilterNode:
    name: str
    value: FilterValue

    def to_wire(self) -> dict:
        return {"name": self.name, "value": self.value.to_wire()}


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def validate_search_clause(clause: Any) -> None:
    """
    Check that a raw search clause mapping has its required keys.

    Raises:
        InvalidValueError: ``clause`` is not a mapping.
        MissingRequiredValueError: ``field`` or ``operator`` is missing, or
            ``value`` is missing for an operator that needs one.
    """
    if not isinstance(clause, Mapping):
        raise InvalidValueError(
            f"Search filter clauses must be mappings, got {type(clause).__name__}."
        )

    if clause.get("field") is None:
        raise MissingRequiredValueError('Missing required filter property "field".')

    if clause.get("operator") is None:
        raise MissingRequiredValueError('Missing required filter property "operator".')

    if clause.get("value") is None and not is_null_operator(clause["operator"]):
        raise MissingRequiredValueError('Missing required filter property "value".')


def build_search_filters(value: Any) -> SearchFilterList:
    """Convert a clause mapping, or a list of them, into a SearchFilterList."""
    if isinstance(value, Mapping):
        clauses = [value]
    elif isinstance(value, (list, tuple)):
        clauses = list(value)
    else:
        raise InvalidValueError(
            "Search filter value must be a mapping or a list of mappings."
        )

    filters = []
    for clause in clauses:
        validate_search_clause(clause)
        filters.append(
            SearchFilter(clause["field"], clause["operator"], clause.get("value"))
        )

    return SearchFilterList(tuple(filters))


def build_filter(name: str, value: Any, function_name: str | None = None) -> FilterNode:
    """
    Build a filter node, choosing the value variant from ``name``.

    Dispatch is case-insensitive on ``name``:

    - ``search``          → :class:`SearchFilterList`
    - ``ondemandcolumns`` → :class:`OnDemandColumns`
    - ``show``            → :class:`ShowFilter`; the node is renamed to
      ``Category_Show``/``Product_Show`` for ``function_name``
    - anything else       → :class:`GenericFilter`

    Args:
        name: Filter name.
        value: Raw filter value.
        function_name: Name of the owning function; required for ``show``.

    Returns:
        A :class:`FilterNode`.

    Raises:
        InvalidValueError: Blank name or value, or an invalid clause/show value.
        MissingRequiredValueError: Incomplete search clause, or a show filter
            with no function name.
    """
    name = name.strip() if isinstance(name, str) else ""
    if not name:
        raise InvalidValueError('Invalid value provided for filter "name".')

    if is_blank_value(value):
        raise InvalidValueError(f'Invalid value provided for filter "{name}".')

    key = name.lower()

    if key == "search":
        return FilterNode(name, build_search_filters(value))

    if key == "ondemandcolumns":
        if not isinstance(value, (list, tuple)):
            raise InvalidValueError("On-demand columns must be given as a list.")
        return FilterNode(name, OnDemandColumns(list(value)))

    if key == "show":
        if not function_name:
            raise MissingRequiredValueError(
                "A function name is required to build a show filter."
            )
        show = ShowFilter(function_name, value)
        return FilterNode(show.filter_name, show)

    return FilterNode(name, GenericFilter(value))
