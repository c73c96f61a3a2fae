"""
filtercraft - composable filter builders over lazily evaluated query sources.
"""

from .builder import ExpressionProxy, as_lambda
from .capabilities import register_method, resolve_method
from .combinators import LogicalOperator, any_property_contains_text, between, combine
from .errors import (
    CapabilityMissingError,
    ExpressionBuildError,
    FilterCraftError,
    InvalidOperatorError,
    UnsupportedExpressionError,
)
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
from .filtering import (
    where_and_conditions,
    where_any_property_contains_text,
    where_between,
    where_date_time_between,
    where_or_conditions,
)
from .query_source import InMemoryQuerySource, QuerySource, SQLAlchemyQuerySource
from .settings import FilterCraftSettings, get_settings
from .visitor import ExpressionTransformer, ExpressionVisitor, ParameterReplacer, unify

__version__ = "0.1.0"

__all__ = [
    # Expressions
    'DEFAULT_PLACEHOLDER',
    'Expression',
    'Parameter',
    'MemberAccess',
    'Constant',
    'BinaryExpression',
    'BinaryOperator',
    'NotExpression',
    'MethodCall',
    'Lambda',
    'ExpressionProxy',
    'as_lambda',

    # Tree walking
    'ExpressionVisitor',
    'ExpressionTransformer',
    'ParameterReplacer',
    'unify',

    # Predicate builders
    'LogicalOperator',
    'combine',
    'between',
    'any_property_contains_text',
    'register_method',
    'resolve_method',

    # Query sources
    'QuerySource',
    'InMemoryQuerySource',
    'SQLAlchemyQuerySource',
    'where_or_conditions',
    'where_and_conditions',
    'where_between',
    'where_date_time_between',
    'where_any_property_contains_text',

    # Errors
    'FilterCraftError',
    'CapabilityMissingError',
    'InvalidOperatorError',
    'ExpressionBuildError',
    'UnsupportedExpressionError',

    # Configuration
    'FilterCraftSettings',
    'get_settings',
]
