"""
SQLAlchemy translator - lowers filtercraft expressions to SQLAlchemy clauses.
"""
import logging
import operator as op
from typing import Any, Dict, List, Tuple

from sqlalchemy import and_, false, func, literal, not_, null, or_, true
from sqlalchemy.orm import QueryableAttribute, RelationshipProperty, aliased
from sqlalchemy.sql.elements import ColumnElement

from ..capabilities import CONTAINS, ENDSWITH, STARTSWITH
from ..errors import InvalidOperatorError, UnsupportedExpressionError
from ..expressions import (
    BinaryExpression,
    BinaryOperator,
    Constant,
    Lambda,
    MemberAccess,
    MethodCall,
    NotExpression,
    Parameter,
)
from ..visitor import ExpressionVisitor

logger = logging.getLogger(__name__)

Path = Tuple[str, ...]

_COMPARISONS = {
    BinaryOperator.EQ: op.eq,
    BinaryOperator.NE: op.ne,
    BinaryOperator.GT: op.gt,
    BinaryOperator.GE: op.ge,
    BinaryOperator.LT: op.lt,
    BinaryOperator.LE: op.le,
}

# operator to use when the operands are swapped, e.g. 3 < x  ->  x > 3
_REFLECTED = {
    BinaryOperator.EQ: op.eq,
    BinaryOperator.NE: op.ne,
    BinaryOperator.GT: op.lt,
    BinaryOperator.GE: op.le,
    BinaryOperator.LT: op.gt,
    BinaryOperator.LE: op.ge,
}


class _Navigation:
    """An entity reached from the placeholder: the root entity or a joined alias."""

    def __init__(self, entity: Any, path: Path):
        self.entity = entity
        self.path = path


class _Value:
    """A Python literal not yet bound to SQL, so comparisons can use the column's type."""

    def __init__(self, value: Any):
        self.value = value


class SQLAlchemyExpressionTranslator(ExpressionVisitor):
    """
    Translates a predicate over a mapped entity into a SQLAlchemy WHERE clause.

    Navigation through many-to-one relationships (``o.customer.first_name``)
    is translated into an aliased LEFT OUTER JOIN. Joins already attached to
    the statement are passed in through ``joins`` and reused; joins created
    during translation are listed in ``new_joins`` in the order they must be
    added to the statement.

    Args:
        entity: Mapped class the predicate's placeholder stands for
        joins: Existing joins, keyed by navigation path
        dialect_name: Name of the target dialect (``"sqlite"``, ``"postgresql"`` ...)
    """

    def __init__(self, entity: type, joins: Dict[Path, Any] = None, dialect_name: str = "default"):
        self.entity = entity
        self.joins: Dict[Path, Any] = dict(joins or {})
        self.new_joins: List[Any] = []
        self.dialect_name = dialect_name
        self._parameter = None

    def translate(self, predicate: Lambda) -> ColumnElement:
        self._parameter = predicate.parameter
        clause = self._as_clause(self.visit(predicate.body))
        logger.debug(f"Translated {predicate} -> {clause}")
        return clause

    def _as_clause(self, result: Any) -> ColumnElement:
        if isinstance(result, _Navigation):
            raise UnsupportedExpressionError(
                f"Entity path '{'.'.join(result.path) or self._parameter.name}' is not a condition"
            )
        if isinstance(result, _Value):
            if result.value is True:
                return true()
            if result.value is False:
                return false()
            if result.value is None:
                return null()
            return literal(result.value)
        return result

    def visit_parameter(self, node: Parameter) -> _Navigation:
        if node != self._parameter:
            raise UnsupportedExpressionError(f"Unbound placeholder '{node.name}'")
        return _Navigation(self.entity, ())

    def visit_constant(self, node: Constant) -> _Value:
        return _Value(node.value)

    def visit_member_access(self, node: MemberAccess) -> Any:
        target = self.visit(node.target)
        if not isinstance(target, _Navigation):
            raise UnsupportedExpressionError(f"Cannot access '{node.member}' on a scalar value")

        attr = getattr(target.entity, node.member, None)
        if not isinstance(attr, QueryableAttribute):
            raise UnsupportedExpressionError(
                f"'{node.member}' is not a mapped attribute of {_entity_name(target.entity)}"
            )

        prop = attr.property
        if not isinstance(prop, RelationshipProperty):
            return attr
        if prop.uselist:
            raise UnsupportedExpressionError(f"Collection navigation '{node.member}' is not supported")

        path = target.path + (node.member,)
        alias = self.joins.get(path)
        if alias is None:
            alias = aliased(prop.mapper.class_)
            self.joins[path] = alias
            self.new_joins.append(attr.of_type(alias))
        return _Navigation(alias, path)

    def visit_binary(self, node: BinaryExpression) -> ColumnElement:
        left = self.visit(node.left)
        right = self.visit(node.right)

        if node.operator == BinaryOperator.AND_ALSO:
            return and_(self._as_clause(left), self._as_clause(right))
        if node.operator == BinaryOperator.OR_ELSE:
            return or_(self._as_clause(left), self._as_clause(right))

        compare = _COMPARISONS.get(node.operator)
        if compare is None:
            raise InvalidOperatorError(node.operator)

        if isinstance(left, _Value) and isinstance(right, _Value):
            return compare(literal(left.value), right.value)
        if isinstance(left, _Value):
            # keep the column on the left so the literal is bound with the column type
            return _REFLECTED[node.operator](self._operand(right), left.value)
        return compare(self._operand(left), self._operand(right))

    def _operand(self, value: Any) -> Any:
        if isinstance(value, _Navigation):
            return self._as_clause(value)
        if isinstance(value, _Value):
            return value.value
        return value

    def visit_not(self, node: NotExpression) -> ColumnElement:
        return not_(self._as_clause(self.visit(node.operand)))

    def visit_method_call(self, node: MethodCall) -> ColumnElement:
        target = self._operand(self.visit(node.target))
        arguments = [self._operand(self.visit(a)) for a in node.arguments]
        if len(arguments) != 1:
            raise UnsupportedExpressionError(f"'{node.method}' takes exactly one argument")
        text = arguments[0]

        # LIKE is case-insensitive on some backends, so use position functions
        if node.method == CONTAINS:
            if self.dialect_name == "postgresql":
                return func.strpos(target, text) > 0
            if self.dialect_name in ("sqlite", "mysql", "mariadb"):
                return func.instr(target, text) > 0
            return target.contains(text, autoescape=True)
        if node.method == STARTSWITH:
            return func.substr(target, 1, func.length(text)) == text
        if node.method == ENDSWITH:
            return func.substr(target, func.length(target) - func.length(text) + 1) == text
        raise UnsupportedExpressionError(f"Method '{node.method}' cannot be translated to SQL")

    def visit_lambda(self, node: Lambda) -> Any:
        raise UnsupportedExpressionError("Nested lambdas are not supported")


def _entity_name(entity: Any) -> str:
    return getattr(entity, "__name__", None) or type(entity).__name__
