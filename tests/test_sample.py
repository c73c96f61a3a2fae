"""
Tests for the sample schema, seeding and settings.
"""

from sqlalchemy import create_engine

from filtercraft import FilterCraftSettings, SQLAlchemyQuerySource, get_settings
from filtercraft.sample import Customer, Order, create_schema, create_session


def test_settings_defaults():
    settings = get_settings()

    assert settings.database_url == "sqlite:///:memory:"
    assert settings.echo_sql is False


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("FILTERCRAFT_DATABASE_URL", "sqlite:///orders.db")
    monkeypatch.setenv("FILTERCRAFT_ECHO_SQL", "true")

    settings = get_settings()

    assert settings.database_url == "sqlite:///orders.db"
    assert settings.echo_sql is True


def test_create_session_seeds_once():
    session = create_session(FilterCraftSettings(database_url="sqlite://"))
    try:
        orders = SQLAlchemyQuerySource(session, Order)
        customers = SQLAlchemyQuerySource(session, Customer)

        assert orders.count() == 4
        assert customers.count() == 3
        assert create_schema(session.get_bind()) is False
    finally:
        session.close()


def test_create_schema_on_empty_database():
    engine = create_engine("sqlite://")

    assert create_schema(engine) is True
    assert create_schema(engine) is False

    engine.dispose()


def test_seed_dates_are_one_day_apart(session, now):
    orders = SQLAlchemyQuerySource(session, Order).to_list()
    by_name = {o.product_name: o for o in orders}

    assert by_name["Chery"].date_time == now
    assert (by_name["Chery"].date_time - by_name["Tomato"].date_time).days == 3
    assert by_name["Tomato"].customer.first_name == "John"
    assert by_name["Chery"].customer.first_name == "Pettr"
