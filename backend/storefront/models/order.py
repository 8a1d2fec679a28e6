"""
Order-related ORM models
"""
from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.core.database import Base


class Customer(Base):
    """Storefront customer account"""
    __tablename__ = "customers"

    id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    first_name = Column(String(255))
    last_name = Column(String(255))
    phone = Column(String(50))

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    orders = relationship("Order", back_populates="customer")


class Region(Base):
    """Selling region: fixes currency and default tax rate"""
    __tablename__ = "regions"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    currency_code = Column(String(3), nullable=False)
    tax_rate = Column(Float, nullable=False, default=0)


class Address(Base):
    __tablename__ = "addresses"

    id = Column(String(64), primary_key=True)
    first_name = Column(String(255))
    last_name = Column(String(255))
    company = Column(String(255))
    address_1 = Column(String(255))
    address_2 = Column(String(255))
    city = Column(String(255))
    province = Column(String(255))
    postal_code = Column(String(50))
    country_code = Column(String(2))
    phone = Column(String(50))


class Order(Base):
    """
    Customer order

    Monetary totals are stored in the currency's minor unit.
    """
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)
    display_id = Column(Integer, unique=True, index=True)
    cart_id = Column(String(64), index=True)

    # Status
    status = Column(String(50), nullable=False, default="pending", index=True)
    fulfillment_status = Column(String(50), nullable=False, default="not_fulfilled")
    payment_status = Column(String(50), nullable=False, default="not_paid")

    # References
    customer_id = Column(String(64), ForeignKey("customers.id"), index=True, nullable=False)
    region_id = Column(String(64), ForeignKey("regions.id"), index=True)
    shipping_address_id = Column(String(64), ForeignKey("addresses.id"))

    email = Column(String(255), nullable=False)
    currency_code = Column(String(3), nullable=False)
    tax_rate = Column(Float)

    # Totals
    subtotal = Column(Integer, default=0)
    shipping_total = Column(Integer, default=0)
    discount_total = Column(Integer, default=0)
    tax_total = Column(Integer, default=0)
    refunded_total = Column(Integer, default=0)
    gift_card_total = Column(Integer, default=0)
    total = Column(Integer, default=0)

    # Never exposed through the store API
    internal_notes = Column(Text)

    canceled_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="orders")
    region = relationship("Region")
    shipping_address = relationship("Address")
    items = relationship("LineItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="LineItem.created_at")
    payments = relationship("Payment", back_populates="order", cascade="all, delete-orphan")
    fulfillments = relationship("Fulfillment", back_populates="order", cascade="all, delete-orphan")


class LineItem(Base):
    __tablename__ = "line_items"

    id = Column(String(64), primary_key=True)
    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(String(255))
    thumbnail = Column(String(500))
    variant_id = Column(String(64))

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    fulfilled_quantity = Column(Integer)
    returned_quantity = Column(Integer)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="items")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(64), primary_key=True)
    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), index=True)

    amount = Column(Integer, nullable=False)
    amount_refunded = Column(Integer, nullable=False, default=0)
    currency_code = Column(String(3), nullable=False)
    provider_id = Column(String(64), nullable=False)

    captured_at = Column(DateTime(timezone=True))
    canceled_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="payments")


class Fulfillment(Base):
    __tablename__ = "fulfillments"

    id = Column(String(64), primary_key=True)
    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    provider_id = Column(String(64), nullable=False)

    shipped_at = Column(DateTime(timezone=True))
    canceled_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="fulfillments")
    tracking_links = relationship("TrackingLink", back_populates="fulfillment",
                                  cascade="all, delete-orphan")


class TrackingLink(Base):
    __tablename__ = "tracking_links"

    id = Column(String(64), primary_key=True)
    fulfillment_id = Column(String(64), ForeignKey("fulfillments.id", ondelete="CASCADE"), index=True)
    url = Column(String(500))
    tracking_number = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    fulfillment = relationship("Fulfillment", back_populates="tracking_links")
