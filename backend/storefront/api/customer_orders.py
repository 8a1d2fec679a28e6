"""
Customer Orders API Endpoints
Lets a signed-in customer list their own orders
"""
import logging
from typing import Any, Dict, List, Tuple

from fastapi import APIRouter, Depends, Request

from storefront.api.order_fields import (
    ALLOWED_STORE_ORDERS_FIELDS,
    ALLOWED_STORE_ORDERS_RELATIONS,
    pick_allowed,
)
from storefront.core.auth import TokenCustomer, get_current_customer
from storefront.core.query_string import parse_query_items
from storefront.domain.order import DEFAULT_ORDER, ListConfig, OrderQueryParams
from storefront.services.order_service import OrderService, get_order_service

logger = logging.getLogger(__name__)

router = APIRouter()


def build_list_config(params: OrderQueryParams) -> ListConfig:
    """Projection, relations, paging and the fixed newest-first ordering"""
    pagination = params.pagination
    return ListConfig(
        select=pick_allowed(pagination.fields, ALLOWED_STORE_ORDERS_FIELDS),
        relations=pick_allowed(pagination.expand, ALLOWED_STORE_ORDERS_RELATIONS),
        skip=pagination.offset,
        take=pagination.limit,
        order=dict(DEFAULT_ORDER),
    )


def build_selector(params: OrderQueryParams, customer_id: str) -> Dict[str, Any]:
    """
    Filter map scoped to the authenticated customer

    Any client-sent customer_id is replaced, never merged.
    """
    selector = params.filters.to_selector()
    selector["customer_id"] = customer_id
    return selector


def parse_order_query(items: List[Tuple[str, str]]) -> OrderQueryParams:
    """Decode and validate raw query pairs"""
    return OrderQueryParams.from_query(parse_query_items(items))


@router.get("/me/orders")
def list_customer_orders(
    request: Request,
    customer: TokenCustomer = Depends(get_current_customer),
    order_service: OrderService = Depends(get_order_service),
):
    """
    Retrieve Customer Orders

    Query parameters:
    - q: free-text search (email, shipping name, display id)
    - id, display_id, cart_id, email, region_id, currency_code, tax_rate: exact match
    - status, fulfillment_status, payment_status: one or more enum values
    - created_at, updated_at, canceled_at: date ranges, e.g. created_at[gt]=2023-01-01
    - limit (default 10), offset (default 0)
    - fields, expand: comma separated, restricted to the store allow-lists

    Returns:
    - orders: the requested page
    - count: total matching orders ignoring paging
    - offset, limit: the paging actually applied
    """
    params = parse_order_query(request.query_params.multi_items())

    list_config = build_list_config(params)
    selector = build_selector(params, customer.customer_id)

    orders, count = order_service.list_and_count(selector, list_config)
    logger.debug(f"Customer {customer.customer_id}: returning {len(orders)} of {count} orders")

    return {
        "orders": orders,
        "count": count,
        "offset": params.pagination.offset,
        "limit": params.pagination.limit,
    }
