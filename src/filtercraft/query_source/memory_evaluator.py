"""
Compiles expression trees into Python callables for in-memory filtering.

Null handling follows SQL filtering. Navigating through ``None`` yields
``None``, and any comparison or method call with a ``None`` operand is
unknown (``None``). ``NOT``, ``AND`` and ``OR`` use three-valued logic, and
a row is kept only when its predicate is true. Comparing against a literal
``None`` constant is a null test, like ``IS NULL`` in SQL.
"""
import operator as op
from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any, Callable, Optional

from ..capabilities import find_method, resolve_method
from ..errors import InvalidOperatorError, UnsupportedExpressionError
from ..expressions import (
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
from ..visitor import ExpressionVisitor

Evaluator = Callable[[Any], Any]

_COMPARISONS = {
    BinaryOperator.EQ: op.eq,
    BinaryOperator.NE: op.ne,
    BinaryOperator.GT: op.gt,
    BinaryOperator.GE: op.ge,
    BinaryOperator.LT: op.lt,
    BinaryOperator.LE: op.le,
}


def _truth(value: Any) -> Optional[bool]:
    return None if value is None else bool(value)


def _and(a: Optional[bool], b: Optional[bool]) -> Optional[bool]:
    if a is False or b is False:
        return False
    if a is None or b is None:
        return None
    return True


def _or(a: Optional[bool], b: Optional[bool]) -> Optional[bool]:
    if a is True or b is True:
        return True
    if a is None or b is None:
        return None
    return False


def _as_datetime(value: Any, other: Any) -> Any:
    # a plain date compared with a datetime stands for midnight of that day
    if isinstance(other, datetime) and isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


def _is_null_constant(node: Expression) -> bool:
    return isinstance(node, Constant) and node.value is None


class ExpressionCompiler(ExpressionVisitor):
    """Turns each node into a function of the entity being filtered."""

    def __init__(self, parameter: Parameter):
        self.parameter = parameter

    def visit_parameter(self, node: Parameter) -> Evaluator:
        if node != self.parameter:
            raise UnsupportedExpressionError(f"Unbound placeholder '{node.name}'")
        return lambda entity: entity

    def visit_constant(self, node: Constant) -> Evaluator:
        value = node.value
        return lambda entity: value

    def visit_member_access(self, node: MemberAccess) -> Evaluator:
        target = self.visit(node.target)
        name = node.member

        def get(entity):
            obj = target(entity)
            if obj is None:
                return None
            if isinstance(obj, Mapping):
                return obj.get(name)
            return getattr(obj, name)

        return get

    def visit_binary(self, node: BinaryExpression) -> Evaluator:
        left = self.visit(node.left)
        right = self.visit(node.right)
        operator = node.operator

        if operator == BinaryOperator.AND_ALSO:
            return lambda entity: _and(_truth(left(entity)), _truth(right(entity)))
        if operator == BinaryOperator.OR_ELSE:
            return lambda entity: _or(_truth(left(entity)), _truth(right(entity)))

        compare = _COMPARISONS.get(operator)
        if compare is None:
            raise InvalidOperatorError(operator)

        if operator in (BinaryOperator.EQ, BinaryOperator.NE) and (
            _is_null_constant(node.left) or _is_null_constant(node.right)
        ):
            other = right if _is_null_constant(node.left) else left
            if operator == BinaryOperator.EQ:
                return lambda entity: other(entity) is None
            return lambda entity: other(entity) is not None

        def compared(entity):
            a, b = left(entity), right(entity)
            if a is None or b is None:
                return None
            return compare(_as_datetime(a, b), _as_datetime(b, a))

        return compared

    def visit_not(self, node: NotExpression) -> Evaluator:
        operand = self.visit(node.operand)

        def negated(entity):
            value = _truth(operand(entity))
            return None if value is None else not value

        return negated

    def visit_method_call(self, node: MethodCall) -> Evaluator:
        target = self.visit(node.target)
        arguments = [self.visit(a) for a in node.arguments]
        method = node.method
        # text methods are resolved here; other registered types are looked up per value
        text_impl = find_method(str, method)

        def call(entity):
            value = target(entity)
            if value is None:
                return None
            if type(value) is str and text_impl is not None:
                func = text_impl
            else:
                func = resolve_method(type(value), method)
            return func(value, *(a(entity) for a in arguments))

        return call

    def visit_lambda(self, node: Lambda) -> Evaluator:
        raise UnsupportedExpressionError("Nested lambdas are not supported")


def compile_lambda(predicate: Lambda) -> Evaluator:
    """
    Compile ``predicate`` into ``f(entity) -> value``.

    Boolean predicates return True, False or None (unknown).
    """
    return ExpressionCompiler(predicate.parameter).visit(predicate.body)
