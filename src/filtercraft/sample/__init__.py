"""
Sample order/customer schema with seed data, used by the examples and tests.
"""

from .models import Base, Customer, Order
from .seed import create_schema, create_session, seed

__all__ = [
    'Base',
    'Customer',
    'Order',
    'create_schema',
    'create_session',
    'seed',
]
