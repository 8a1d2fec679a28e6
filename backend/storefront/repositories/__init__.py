"""
Repository Layer - Data Access

Repositories build SQL and return ORM instances; services decide what
callers get to see.
"""
from storefront.repositories.order_repository import OrderRepository

__all__ = ['OrderRepository']
