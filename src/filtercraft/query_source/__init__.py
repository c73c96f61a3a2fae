"""
Query source implementations the filter builders can be applied to.
"""

from .base import QuerySource, member_path
from .memory_source import InMemoryQuerySource
from .sqlalchemy_source import SQLAlchemyQuerySource
from .sqlalchemy_translator import SQLAlchemyExpressionTranslator

__all__ = [
    'QuerySource',
    'member_path',
    'InMemoryQuerySource',
    'SQLAlchemyQuerySource',
    'SQLAlchemyExpressionTranslator',
]
