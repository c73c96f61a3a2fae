"""
Capture Python lambdas as expression trees.

Example:
    ```python
    is_john = as_lambda(lambda o: o.customer.first_name == "John")
    str(is_john)  # "o => (o.customer.first_name == 'John')"

    # logical connectives use the bitwise operators
    as_lambda(lambda o: (o.age >= 18) & ~(o.name.contains("test")))
    ```

The callable is invoked exactly once with an :class:`ExpressionProxy`
standing for its parameter; every attribute access, comparison and
operator applied to the proxy records a node instead of computing a value.
"""
import inspect
from typing import Any, Callable, Optional, Union

from .capabilities import CONTAINS, ENDSWITH, STARTSWITH
from .errors import ExpressionBuildError
from .expressions import (
    DEFAULT_PLACEHOLDER,
    BinaryExpression,
    BinaryOperator,
    Constant,
    Expression,
    Lambda,
    MemberAccess,
    MethodCall,
    NotExpression,
    Parameter,
)

LambdaLike = Union[Lambda, Callable[[Any], Any]]


def to_expression(value: Any) -> Expression:
    """Unwrap a proxy, pass through an expression, or wrap anything else as a constant."""
    if isinstance(value, ExpressionProxy):
        return object.__getattribute__(value, "_node")
    if isinstance(value, Expression):
        return value
    return Constant(value=value)


class ExpressionProxy:
    """Records operations applied to it as expression nodes."""

    __slots__ = ("_node",)

    def __init__(self, node: Expression):
        object.__setattr__(self, "_node", node)

    def __getattr__(self, name: str) -> "ExpressionProxy":
        if name.startswith("_"):
            raise AttributeError(name)
        return ExpressionProxy(MemberAccess(target=self._node, member=name))

    def __getitem__(self, name: str) -> "ExpressionProxy":
        # for members shadowed by the proxy's own methods, e.g. o["contains"]
        return ExpressionProxy(MemberAccess(target=self._node, member=name))

    def __setattr__(self, name, value):
        raise ExpressionBuildError("Assignment is not supported inside a filter expression")

    def _binary(self, operator: BinaryOperator, other: Any, reflected: bool = False) -> "ExpressionProxy":
        left, right = self._node, to_expression(other)
        if reflected:
            left, right = right, left
        return ExpressionProxy(BinaryExpression(operator=operator, left=left, right=right))

    def __eq__(self, other):
        return self._binary(BinaryOperator.EQ, other)

    def __ne__(self, other):
        return self._binary(BinaryOperator.NE, other)

    def __gt__(self, other):
        return self._binary(BinaryOperator.GT, other)

    def __ge__(self, other):
        return self._binary(BinaryOperator.GE, other)

    def __lt__(self, other):
        return self._binary(BinaryOperator.LT, other)

    def __le__(self, other):
        return self._binary(BinaryOperator.LE, other)

    def __and__(self, other):
        return self._binary(BinaryOperator.AND_ALSO, other)

    def __rand__(self, other):
        return self._binary(BinaryOperator.AND_ALSO, other, reflected=True)

    def __or__(self, other):
        return self._binary(BinaryOperator.OR_ELSE, other)

    def __ror__(self, other):
        return self._binary(BinaryOperator.OR_ELSE, other, reflected=True)

    def __invert__(self):
        return ExpressionProxy(NotExpression(operand=self._node))

    __hash__ = None

    def _call(self, method: str, *arguments: Any) -> "ExpressionProxy":
        return ExpressionProxy(MethodCall(
            target=self._node,
            method=method,
            arguments=tuple(to_expression(a) for a in arguments)
        ))

    def contains(self, text: Any) -> "ExpressionProxy":
        return self._call(CONTAINS, text)

    def startswith(self, text: Any) -> "ExpressionProxy":
        return self._call(STARTSWITH, text)

    def endswith(self, text: Any) -> "ExpressionProxy":
        return self._call(ENDSWITH, text)

    def __contains__(self, item):
        raise ExpressionBuildError("Use value.contains(text) instead of 'text in value'")

    def __bool__(self):
        raise ExpressionBuildError(
            "Filter expressions cannot be truth-tested; "
            "use '&' instead of 'and', '|' instead of 'or', '~' instead of 'not', "
            "and split chained comparisons like 'a <= x <= b'"
        )

    def __iter__(self):
        raise ExpressionBuildError("Filter expressions are not iterable")

    def __repr__(self) -> str:
        return f"<ExpressionProxy {self._node}>"


def _parameter_name(fn: Callable) -> Optional[str]:
    try:
        parameters = list(inspect.signature(fn).parameters)
    except (TypeError, ValueError):
        return None
    if len(parameters) != 1:
        raise ExpressionBuildError(
            f"Filter callables take exactly one argument, {fn!r} takes {len(parameters)}"
        )
    return parameters[0]


def as_lambda(fn: LambdaLike, name: Optional[str] = None) -> Lambda:
    """
    Capture a one-argument callable as a :class:`Lambda`.

    Args:
        fn: A ``Lambda`` (returned unchanged) or a callable such as ``lambda o: o.age > 3``
        name: Placeholder name; defaults to the callable's argument name

    Returns:
        The captured lambda
    """
    if isinstance(fn, Lambda):
        return fn
    if not callable(fn):
        raise ExpressionBuildError(f"Expected a callable or Lambda, got {type(fn).__name__}")

    parameter = Parameter(name=name or _parameter_name(fn) or DEFAULT_PLACEHOLDER)
    body = to_expression(fn(ExpressionProxy(parameter)))
    return Lambda(parameter=parameter, body=body)
