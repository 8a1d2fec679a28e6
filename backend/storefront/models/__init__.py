"""
ORM models
"""
from .order import Order, LineItem, Payment, Fulfillment, TrackingLink, Customer, Region, Address

__all__ = [
    "Order",
    "LineItem",
    "Payment",
    "Fulfillment",
    "TrackingLink",
    "Customer",
    "Region",
    "Address",
]
