import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import Engine, create_engine, inspect
from sqlalchemy.orm import Session

from ..settings import FilterCraftSettings, get_settings
from .models import Base, Customer, Order

logger = logging.getLogger(__name__)


def create_schema(engine: Engine) -> bool:
    """
    Create the sample tables if they do not exist yet.

    Returns:
        True if the tables were created by this call
    """
    if inspect(engine).has_table(Order.__tablename__):
        return False
    Base.metadata.create_all(engine)
    logger.info(f"Created sample schema on {engine.url}")
    return True


def create_session(settings: Optional[FilterCraftSettings] = None) -> Session:
    """Open a session on ``settings.database_url``, creating and seeding the schema on first use."""
    settings = settings or get_settings()
    engine = create_engine(settings.database_url, echo=settings.echo_sql)
    session = Session(engine)
    if create_schema(engine):
        seed(session)
    return session


def seed(session: Session, now: Optional[datetime] = None) -> List[Order]:
    """
    Insert three customers and four orders dated from three days ago up to ``now``.

    Returns:
        The orders, oldest first: Tomato, Onion, Banana, Chery
    """
    now = now or datetime.now()

    john = Customer(first_name="John", last_name="Doe", age=15)
    petr = Customer(first_name="Petr", last_name="Petrov", age=30)
    pettr = Customer(first_name="Pettr", last_name="Pettrov", age=31)
    session.add_all([john, petr, pettr])
    session.commit()

    orders = [
        Order(order_number="1", product_name="Tomato", date_time=now - timedelta(days=3), customer=john),
        Order(order_number="1", product_name="Onion", date_time=now - timedelta(days=2), customer=john),
        Order(order_number="1", product_name="Banana", date_time=now - timedelta(days=1), customer=petr),
        Order(order_number="1", product_name="Chery", date_time=now, customer=pettr),
    ]
    session.add_all(orders)
    session.commit()

    logger.info(f"Seeded {len(orders)} orders")
    return orders
