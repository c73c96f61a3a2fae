"""
Predicate builders: combine fragments with AND/OR, range checks and
substring search across several fields.

All builders are pure: they allocate new trees and never modify the
fragments passed in, so fragments can be reused freely.
"""
import logging
from enum import Enum
from typing import Any, Optional, Sequence

from .builder import LambdaLike, as_lambda
from .capabilities import CONTAINS, resolve_method
from .errors import InvalidOperatorError
from .expressions import (
    DEFAULT_PLACEHOLDER,
    BinaryExpression,
    Constant,
    Expression,
    Lambda,
    MethodCall,
    Parameter,
    and_also,
    greater_than_or_equal,
    less_than_or_equal,
    or_else,
)

logger = logging.getLogger(__name__)


class LogicalOperator(str, Enum):
    """Logical conditions for combining predicates."""
    AND = "AND"
    OR = "OR"


def _placeholder(name: Optional[str]) -> Parameter:
    return Parameter(name=name or DEFAULT_PLACEHOLDER)


def _fold_step(operator: LogicalOperator, left: Expression, right: Expression) -> BinaryExpression:
    if operator == LogicalOperator.AND:
        return and_also(left, right)
    elif operator == LogicalOperator.OR:
        return or_else(left, right)
    else:
        raise InvalidOperatorError(operator)


def combine(
    operator: LogicalOperator,
    fragments: Sequence[LambdaLike],
    placeholder: Optional[str] = None
) -> Lambda:
    """
    Merge several predicate fragments into one predicate.

    Every fragment is rebound to one shared placeholder, then the bodies are
    folded left to right: ``f1 OP f2 OP f3 ...``.

    Args:
        operator: ``LogicalOperator.AND`` or ``LogicalOperator.OR``
        fragments: Predicates, as ``Lambda`` objects or one-argument callables
        placeholder: Name of the shared placeholder (defaults to ``"x"``)

    Returns:
        The combined predicate. With no fragments this is a predicate that
        accepts everything; a single fragment is returned as is.
    """
    try:
        operator = LogicalOperator(operator)
    except ValueError:
        raise InvalidOperatorError(operator) from None

    lambdas = [as_lambda(f) for f in fragments]
    if not lambdas:
        return Lambda(parameter=_placeholder(placeholder), body=Constant(value=True))
    if len(lambdas) == 1:
        return lambdas[0]

    parameter = _placeholder(placeholder)
    bodies = [f.invoke(parameter) for f in lambdas]

    body = bodies[0]
    for other in bodies[1:]:
        body = _fold_step(operator, body, other)

    predicate = Lambda(parameter=parameter, body=body)
    logger.debug(f"Combined {len(lambdas)} fragments with {operator.value}: {predicate}")
    return predicate


def between(
    accessor: LambdaLike,
    lower: Any,
    upper: Any,
    placeholder: Optional[str] = None
) -> Lambda:
    """
    Build ``lower <= accessor(x) <= upper`` (inclusive on both ends).

    The accessor body is spliced into the predicate, so any navigation it
    performs (``o.customer.birth_date``) becomes part of the filter. Bounds
    are not checked: ``lower > upper`` yields a predicate matching nothing.
    """
    accessor = as_lambda(accessor)
    parameter = _placeholder(placeholder)
    value = accessor.invoke(parameter)

    body = and_also(
        greater_than_or_equal(value, Constant(value=lower)),
        less_than_or_equal(value, Constant(value=upper))
    )
    predicate = Lambda(parameter=parameter, body=body)
    logger.debug(f"Range predicate: {predicate}")
    return predicate


def any_property_contains_text(
    search_text: str,
    accessors: Sequence[LambdaLike],
    placeholder: Optional[str] = None
) -> Lambda:
    """
    Build a predicate that is true when ``search_text`` occurs in any of the accessed fields.

    Matching is case-sensitive substring containment. The fold starts from a
    constant ``False``, so an empty ``accessors`` list matches nothing.

    Raises:
        CapabilityMissingError: If no ``contains`` method is registered for ``str``
    """
    resolve_method(str, CONTAINS)

    parameter = _placeholder(placeholder)
    search = Constant(value=search_text)

    body: Expression = Constant(value=False)
    for accessor in accessors:
        value = as_lambda(accessor).invoke(parameter)
        body = or_else(body, MethodCall(target=value, method=CONTAINS, arguments=(search,)))

    predicate = Lambda(parameter=parameter, body=body)
    logger.debug(f"Text search predicate: {predicate}")
    return predicate
