"""
Store order projection allow-lists

Only these columns and relations can be requested through `fields` and
`expand` on store order endpoints; anything else is dropped.
"""
from typing import List, Optional, Sequence

ALLOWED_STORE_ORDERS_FIELDS = [
    "id",
    "status",
    "fulfillment_status",
    "payment_status",
    "display_id",
    "cart_id",
    "customer_id",
    "email",
    "region_id",
    "currency_code",
    "tax_rate",
    "created_at",
    "shipping_total",
    "discount_total",
    "tax_total",
    "refunded_total",
    "gift_card_total",
    "subtotal",
    "total",
]

ALLOWED_STORE_ORDERS_RELATIONS = [
    "shipping_address",
    "fulfillments",
    "fulfillments.tracking_links",
    "items",
    "payments",
    "customer",
    "region",
]


def pick_allowed(requested: Optional[str], allowed: Sequence[str]) -> List[str]:
    """
    Intersect a comma separated request with an allow-list

    Keeps request order, trims whitespace and drops duplicates. When nothing
    usable remains the whole allow-list is returned.
    """
    picked: List[str] = []
    if requested:
        for name in requested.split(","):
            name = name.strip()
            if name in allowed and name not in picked:
                picked.append(name)
    return picked or list(allowed)
