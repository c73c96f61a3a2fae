"""Customer and order models."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(250), nullable=False)
    last_name = Column(String(250), nullable=False)
    age = Column(Integer, nullable=False)

    orders = relationship("Order", back_populates="customer")

    def __repr__(self) -> str:
        return f"<Customer {self.first_name} {self.last_name}>"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(250), nullable=False)
    product_name = Column(String(250), nullable=False)
    date_time = Column(DateTime, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

    customer = relationship("Customer", back_populates="orders")

    def __repr__(self) -> str:
        return f"<Order {self.product_name} {self.date_time:%Y-%m-%d %H:%M}>"
