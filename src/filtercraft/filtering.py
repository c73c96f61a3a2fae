"""
Filter builders applied to query sources.

Each function takes a query source plus predicate fragments or field
accessors and returns a new, narrowed source. Nothing is executed; the
returned source can be filtered further before it is materialized.

Example:
    ```python
    orders = where_or_conditions(
        source,
        lambda o: o.customer.first_name == "John",
        lambda o: o.product_name == "Onion"
    ).to_list()
    ```
"""
from datetime import date
from typing import TYPE_CHECKING, Any

from .builder import LambdaLike
from .combinators import LogicalOperator, any_property_contains_text, between, combine

if TYPE_CHECKING:
    from .query_source.base import QuerySource


def _where_conditions(source: "QuerySource", operator: LogicalOperator, predicates) -> "QuerySource":
    if not predicates:
        return source
    return source.where(combine(operator, predicates))


def where_or_conditions(source: "QuerySource", *predicates: LambdaLike) -> "QuerySource":
    """Keep entities for which at least one predicate holds."""
    return _where_conditions(source, LogicalOperator.OR, predicates)


def where_and_conditions(source: "QuerySource", *predicates: LambdaLike) -> "QuerySource":
    """Keep entities for which every predicate holds."""
    return _where_conditions(source, LogicalOperator.AND, predicates)


def where_between(source: "QuerySource", selector: LambdaLike, lower: Any, upper: Any) -> "QuerySource":
    """Keep entities whose selected value lies in ``[lower, upper]``."""
    return source.where(between(selector, lower, upper))


def where_date_time_between(
    source: "QuerySource",
    selector: LambdaLike,
    start: date,
    end: date
) -> "QuerySource":
    """
    Keep entities whose selected date/datetime lies in ``[start, end]``.

    Args:
        source: Query source to narrow
        selector: Accessor returning the date, e.g. ``lambda o: o.date_time``
        start: Inclusive lower bound
        end: Inclusive upper bound
    """
    for bound in (start, end):
        if not isinstance(bound, date):
            raise TypeError(f"Expected date or datetime bound, got {type(bound).__name__}")
    return where_between(source, selector, start, end)


def where_any_property_contains_text(
    source: "QuerySource",
    search_text: str,
    *properties: LambdaLike
) -> "QuerySource":
    """
    Keep entities where ``search_text`` occurs in at least one of ``properties``.

    With no properties nothing matches.
    """
    return source.where(any_property_contains_text(search_text, properties))
