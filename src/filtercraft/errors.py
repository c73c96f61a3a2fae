"""
Exceptions raised while building, composing or translating predicates.
"""


class FilterCraftError(Exception):
    """Base class for all filtercraft errors."""


class CapabilityMissingError(FilterCraftError):
    """A scalar method required by a filter (e.g. ``contains``) is not available."""

    def __init__(self, scalar_type: type, method: str):
        self.scalar_type = scalar_type
        self.method = method
        super().__init__(f"Method '{method}' not found for type {scalar_type.__name__}")


class InvalidOperatorError(FilterCraftError, ValueError):
    """An unknown logical or binary operator was passed to a fold step."""

    def __init__(self, operator):
        self.operator = operator
        super().__init__(f"Unsupported operator: {operator!r}")


class ExpressionBuildError(FilterCraftError, TypeError):
    """A Python callable could not be captured as an expression tree."""


class UnsupportedExpressionError(FilterCraftError):
    """An expression cannot be lowered to the backing store's query form."""
