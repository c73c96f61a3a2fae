"""
Example: Composing filters over a SQLAlchemy query source

This example seeds the sample order database and runs each filter builder
against it, printing the matching orders and the generated SQL.
"""

import logging
from datetime import datetime, timedelta

from filtercraft import SQLAlchemyQuerySource, get_settings
from filtercraft.sample import Order, create_session

settings = get_settings()
logging.basicConfig(level=settings.log_level)


def show(title: str, source: SQLAlchemyQuerySource):
    print("=" * 80)
    print(title)
    print("=" * 80)
    print(source.statement)
    print("-" * 80)
    for order in source.to_list():
        print(f"  {order.product_name:<10} {order.customer.first_name:<8} {order.date_time:%Y-%m-%d %H:%M}")
    print()


def main():
    session = create_session(settings)
    orders = SQLAlchemyQuerySource(session, Order).include("customer")

    # Orders where at least one condition holds
    show(
        "Orders of John OR of onions",
        orders.where_or_conditions(
            lambda o: o.customer.first_name == "John",
            lambda o: o.product_name == "Onion"
        )
    )

    # Orders where all conditions hold
    show(
        "Orders of John AND of onions",
        orders.where_and_conditions(
            lambda o: o.customer.first_name == "John",
            lambda o: o.product_name == "Onion"
        )
    )

    # Orders within a date range
    cutoff = datetime.now() - timedelta(days=2, hours=12)
    show(
        f"Orders since {cutoff:%Y-%m-%d %H:%M}",
        orders.where_date_time_between(lambda o: o.date_time, cutoff, datetime.now())
    )

    # Orders where any of the text fields contains a substring
    show(
        "Orders whose customer first name or product name contains 'e'",
        orders.where_any_property_contains_text(
            "e",
            lambda o: o.customer.first_name,
            lambda o: o.product_name
        )
    )

    session.close()


if __name__ == "__main__":
    main()
