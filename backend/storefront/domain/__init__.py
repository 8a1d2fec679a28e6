"""
Domain Layer - request-scoped query value objects
"""
from storefront.domain.order import (
    OrderStatus,
    FulfillmentStatus,
    PaymentStatus,
    DateComparisonOperator,
    PaginationParams,
    OrderFilterParams,
    OrderQueryParams,
    ListConfig,
)

__all__ = [
    'OrderStatus',
    'FulfillmentStatus',
    'PaymentStatus',
    'DateComparisonOperator',
    'PaginationParams',
    'OrderFilterParams',
    'OrderQueryParams',
    'ListConfig',
]
