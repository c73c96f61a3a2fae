"""
Expression tree for filter predicates.

Predicates and field accessors are represented as small immutable trees
over a single placeholder parameter. The trees are backend neutral: a
query source translates them into its native filter format (SQL clauses,
Python callables, ...).
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PLACEHOLDER = "x"


class BinaryOperator(str, Enum):
    """Supported binary operators."""
    AND_ALSO = "AND"
    OR_ELSE = "OR"
    EQ = "=="  # Equal
    NE = "!="  # Not equal
    GT = ">"   # Greater than
    GE = ">="  # Greater than or equal
    LT = "<"   # Less than
    LE = "<="  # Less than or equal

    @property
    def is_logical(self) -> bool:
        return self in (BinaryOperator.AND_ALSO, BinaryOperator.OR_ELSE)


class Expression(BaseModel, ABC):
    """Base class for expression tree nodes."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @abstractmethod
    def to_dict(self) -> dict:
        """Convert expression to dictionary representation."""
        pass

    def __str__(self) -> str:
        from .visitor import ExpressionFormatter
        return ExpressionFormatter().visit(self)


class Parameter(Expression):
    """The placeholder standing for the entity being filtered."""
    node_type: Literal["parameter"] = "parameter"
    name: str = Field(description="Placeholder name")

    def to_dict(self) -> dict:
        return {"type": self.node_type, "name": self.name}

    def __repr__(self) -> str:
        return f"Parameter({self.name})"


class MemberAccess(Expression):
    """
    Attribute navigation, e.g. ``o.customer.first_name``.

    Chains are nested: ``o.customer.first_name`` is
    ``MemberAccess(MemberAccess(Parameter(o), "customer"), "first_name")``.
    """
    node_type: Literal["member_access"] = "member_access"
    target: Expression
    member: str = Field(description="Attribute name")

    def to_dict(self) -> dict:
        return {
            "type": self.node_type,
            "target": self.target.to_dict(),
            "member": self.member
        }

    def __repr__(self) -> str:
        return f"MemberAccess({self.target!r}.{self.member})"


class Constant(Expression):
    """A literal value."""
    node_type: Literal["constant"] = "constant"
    value: Any = Field(default=None, description="Literal value")

    def to_dict(self) -> dict:
        return {"type": self.node_type, "value": self.value}

    def __repr__(self) -> str:
        return f"Constant({self.value!r})"


class BinaryExpression(Expression):
    """Comparison or logical connective between two expressions."""
    node_type: Literal["binary"] = "binary"
    operator: BinaryOperator
    left: Expression
    right: Expression

    def to_dict(self) -> dict:
        return {
            "type": self.node_type,
            "operator": self.operator.value,
            "left": self.left.to_dict(),
            "right": self.right.to_dict()
        }

    def __repr__(self) -> str:
        return f"BinaryExpression({self.left!r} {self.operator.value} {self.right!r})"


class NotExpression(Expression):
    """Logical negation."""
    node_type: Literal["not"] = "not"
    operand: Expression

    def to_dict(self) -> dict:
        return {"type": self.node_type, "operand": self.operand.to_dict()}


class MethodCall(Expression):
    """
    Call of a scalar method on the target value, e.g. ``name.contains("e")``.

    Method names are resolved against the capability registry, see
    :mod:`filtercraft.capabilities`.
    """
    node_type: Literal["method_call"] = "method_call"
    target: Expression
    method: str
    arguments: Tuple[Expression, ...] = ()

    def to_dict(self) -> dict:
        return {
            "type": self.node_type,
            "target": self.target.to_dict(),
            "method": self.method,
            "arguments": [a.to_dict() for a in self.arguments]
        }


class Lambda(Expression):
    """
    A single-parameter expression: a predicate fragment or a field accessor.

    Example:
        ```python
        o = Parameter(name="o")
        is_john = Lambda(
            parameter=o,
            body=BinaryExpression(
                operator=BinaryOperator.EQ,
                left=MemberAccess(target=MemberAccess(target=o, member="customer"), member="first_name"),
                right=Constant(value="John")
            )
        )
        ```

    Most callers build lambdas from Python callables with
    :func:`filtercraft.builder.as_lambda` instead.
    """
    node_type: Literal["lambda"] = "lambda"
    parameter: Parameter
    body: Expression

    def invoke(self, argument: Expression) -> Expression:
        """
        Splice the body into a larger tree with the parameter bound to ``argument``.

        Nothing is evaluated; the result is the body with every reference to
        this lambda's parameter replaced by ``argument``.
        """
        from .visitor import unify
        return unify(self.body, self.parameter, argument)

    def compile(self) -> Callable[[Any], Any]:
        """Compile to a Python callable evaluating the body for one entity."""
        from .query_source.memory_evaluator import compile_lambda
        return compile_lambda(self)

    def to_dict(self) -> dict:
        return {
            "type": self.node_type,
            "parameter": self.parameter.to_dict(),
            "body": self.body.to_dict()
        }

    def __repr__(self) -> str:
        return f"Lambda({self.parameter.name} => {self.body!r})"


def and_also(left: Expression, right: Expression) -> BinaryExpression:
    """Create an AND expression."""
    return BinaryExpression(operator=BinaryOperator.AND_ALSO, left=left, right=right)


def or_else(left: Expression, right: Expression) -> BinaryExpression:
    """Create an OR expression."""
    return BinaryExpression(operator=BinaryOperator.OR_ELSE, left=left, right=right)


def greater_than_or_equal(left: Expression, right: Expression) -> BinaryExpression:
    """Create a greater-than-or-equal comparison."""
    return BinaryExpression(operator=BinaryOperator.GE, left=left, right=right)


def less_than_or_equal(left: Expression, right: Expression) -> BinaryExpression:
    """Create a less-than-or-equal comparison."""
    return BinaryExpression(operator=BinaryOperator.LE, left=left, right=right)
