"""Shared helpers for filtercraft tests."""

from filtercraft import ExpressionTransformer


class ParameterCollector(ExpressionTransformer):
    """Records the names of all placeholders in a tree."""

    def __init__(self):
        self.names = set()

    def visit_parameter(self, node):
        self.names.add(node.name)
        return node


def placeholders(expression):
    collector = ParameterCollector()
    collector.visit(expression)
    return collector.names


def product_names(items):
    return {item.product_name for item in items}
