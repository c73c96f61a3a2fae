"""
Tree walkers over filtercraft expressions.

``ExpressionTransformer`` is the structural copy every rewrite builds on;
``ParameterReplacer`` (exposed as :func:`unify`) rewrites the placeholder of
a fragment so that several fragments can share one parameter.
"""
from typing import Any

from .expressions import (
    BinaryExpression,
    Constant,
    Expression,
    Lambda,
    MemberAccess,
    MethodCall,
    NotExpression,
    Parameter,
)


class ExpressionVisitor:
    """Dispatches on ``node_type`` to ``visit_<node_type>`` methods."""

    def visit(self, node: Expression) -> Any:
        method = getattr(self, f"visit_{node.node_type}", None)
        if method is None:
            return self.generic_visit(node)
        return method(node)

    def generic_visit(self, node: Expression) -> Any:
        raise NotImplementedError(f"{type(self).__name__} cannot visit {type(node).__name__}")


class ExpressionTransformer(ExpressionVisitor):
    """
    Rebuilds the tree bottom-up.

    Subclasses override the ``visit_*`` methods for the nodes they rewrite.
    A node whose children come back unchanged is returned as the same object,
    so untouched subtrees are shared instead of copied. Inputs are never
    mutated.
    """

    def visit_parameter(self, node: Parameter) -> Expression:
        return node

    def visit_constant(self, node: Constant) -> Expression:
        return node

    def visit_member_access(self, node: MemberAccess) -> Expression:
        target = self.visit(node.target)
        if target is node.target:
            return node
        return node.model_copy(update={"target": target})

    def visit_binary(self, node: BinaryExpression) -> Expression:
        left = self.visit(node.left)
        right = self.visit(node.right)
        if left is node.left and right is node.right:
            return node
        return node.model_copy(update={"left": left, "right": right})

    def visit_not(self, node: NotExpression) -> Expression:
        operand = self.visit(node.operand)
        if operand is node.operand:
            return node
        return node.model_copy(update={"operand": operand})

    def visit_method_call(self, node: MethodCall) -> Expression:
        target = self.visit(node.target)
        arguments = tuple(self.visit(a) for a in node.arguments)
        if target is node.target and all(a is b for a, b in zip(arguments, node.arguments)):
            return node
        return node.model_copy(update={"target": target, "arguments": arguments})

    def visit_lambda(self, node: Lambda) -> Expression:
        parameter = self.visit(node.parameter)
        if not isinstance(parameter, Parameter):
            # a lambda can only be re-bound to another parameter
            parameter = node.parameter
        body = self.visit(node.body)
        if parameter is node.parameter and body is node.body:
            return node
        return node.model_copy(update={"parameter": parameter, "body": body})


class ParameterReplacer(ExpressionTransformer):
    """Replaces every reference to ``old`` with ``new``."""

    def __init__(self, old: Parameter, new: Expression):
        self.old = old
        self.new = new

    def visit_parameter(self, node: Parameter) -> Expression:
        return self.new if node == self.old else node


def unify(expression: Expression, old: Parameter, new: Expression) -> Expression:
    """
    Rewrite ``expression`` so every reference to ``old`` points to ``new``.

    Args:
        expression: Tree to rewrite (not modified)
        old: Placeholder to replace
        new: Replacement, usually the shared placeholder of a composed predicate

    Returns:
        The rewritten tree; ``expression`` itself when ``old`` does not occur
    """
    return ParameterReplacer(old, new).visit(expression)


class ExpressionFormatter(ExpressionVisitor):
    """Renders expressions as readable text for logs and reprs."""

    def visit_parameter(self, node: Parameter) -> str:
        return node.name

    def visit_constant(self, node: Constant) -> str:
        return repr(node.value)

    def visit_member_access(self, node: MemberAccess) -> str:
        return f"{self.visit(node.target)}.{node.member}"

    def visit_binary(self, node: BinaryExpression) -> str:
        return f"({self.visit(node.left)} {node.operator.value} {self.visit(node.right)})"

    def visit_not(self, node: NotExpression) -> str:
        return f"NOT {self.visit(node.operand)}"

    def visit_method_call(self, node: MethodCall) -> str:
        arguments = ", ".join(self.visit(a) for a in node.arguments)
        return f"{self.visit(node.target)}.{node.method}({arguments})"

    def visit_lambda(self, node: Lambda) -> str:
        return f"{node.parameter.name} => {self.visit(node.body)}"
