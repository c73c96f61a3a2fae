"""
Pytest configuration and shared fixtures for filtercraft tests.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from filtercraft import InMemoryQuerySource, SQLAlchemyQuerySource, get_settings
from filtercraft.sample import Base, Order, seed

NOW = datetime(2025, 4, 28, 12, 0)


@dataclass
class Customer:
    first_name: str
    last_name: str
    age: int


@dataclass
class Purchase:
    product_name: str
    date_time: datetime
    customer: Optional[Customer]
    order_number: str = "1"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; make sure environment changes in one test don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def customers():
    return {
        "john": Customer("John", "Doe", 15),
        "petr": Customer("Petr", "Petrov", 30),
        "pettr": Customer("Pettr", "Pettrov", 31),
    }


@pytest.fixture
def purchases(customers, now):
    """In-memory version of the seed data, oldest first."""
    return [
        Purchase("Tomato", now - timedelta(days=3), customers["john"]),
        Purchase("Onion", now - timedelta(days=2), customers["john"]),
        Purchase("Banana", now - timedelta(days=1), customers["petr"]),
        Purchase("Chery", now, customers["pettr"]),
    ]


@pytest.fixture
def memory_source(purchases):
    return InMemoryQuerySource(items=purchases)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine, now):
    with Session(engine) as session:
        seed(session, now)
    with Session(engine) as session:
        yield session


@pytest.fixture
def orders(session):
    return SQLAlchemyQuerySource(session, Order)

