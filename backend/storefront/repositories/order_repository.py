"""
Order Repository - Data Access Layer for Orders

Translates a filter map and a ListConfig into SQLAlchemy queries and returns
Order ORM instances plus the unpaginated total.
"""
import logging
import operator
import re
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import false, func, or_, select
from sqlalchemy.orm import Session, load_only, selectinload

from storefront.domain.order import DateComparisonOperator, ListConfig
from storefront.models.order import Address, Order

logger = logging.getLogger(__name__)

# Exact-match string columns
SCALAR_FILTERS = ("id", "customer_id", "cart_id", "email", "region_id", "currency_code")

# Multi-valued enum columns, matched by inclusion
LIST_FILTERS = ("status", "fulfillment_status", "payment_status")

DATE_FILTERS = ("created_at", "updated_at", "canceled_at")

DATE_OPERATORS = {
    "lt": operator.lt,
    "gt": operator.gt,
    "lte": operator.le,
    "gte": operator.ge,
    "eq": operator.eq,
}

# Foreign keys a many-to-one relation needs loaded even when not selected
RELATION_KEYS = {
    "customer": "customer_id",
    "region": "region_id",
    "shipping_address": "shipping_address_id",
}

# display_id is a 32-bit integer column
MAX_DISPLAY_ID = 2**31 - 1

_ASCII_DIGITS = re.compile(r"[0-9]+")

LIKE_ESCAPE = "\\"


def parse_display_id(value: str) -> Optional[int]:
    """ASCII digits within the column range, otherwise None"""
    if not _ASCII_DIGITS.fullmatch(value):
        return None
    display_id = int(value)
    return display_id if display_id <= MAX_DISPLAY_ID else None


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally"""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class OrderRepository:
    """
    Repository for Order data access

    All order query construction is centralized here.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_and_count(self, selector: Dict[str, Any], config: ListConfig) -> Tuple[List[Order], int]:
        """
        Find orders matching a filter map

        Args:
            selector: Filter map (column name -> value, list or DateComparisonOperator)
            config: Column selection, relations, paging and ordering

        Returns:
            Tuple of (list of orders, total count ignoring paging)
        """
        conditions = self.build_conditions(selector)

        total = self.db.scalar(
            select(func.count()).select_from(Order).where(*conditions)
        )

        stmt = (
            select(Order)
            .where(*conditions)
            .options(*self._load_options(config))
            .order_by(*self._ordering(config.order))
            .offset(config.skip)
            .limit(config.take)
        )
        orders = list(self.db.scalars(stmt).all())

        logger.debug(f"Order query matched {total} rows, returning {len(orders)}")
        return orders, total

    def build_conditions(self, selector: Dict[str, Any]) -> list:
        """Turn a filter map into SQLAlchemy WHERE clauses"""
        conditions = []

        for key, value in selector.items():
            if key == "q":
                conditions.append(self._search_condition(value))

            elif key in SCALAR_FILTERS:
                conditions.append(getattr(Order, key) == value)

            elif key in LIST_FILTERS:
                conditions.append(getattr(Order, key).in_(list(value)))

            elif key in DATE_FILTERS:
                column = getattr(Order, key)
                bounds = value.bounds() if isinstance(value, DateComparisonOperator) else dict(value)
                for op, bound in bounds.items():
                    conditions.append(DATE_OPERATORS[op](column, bound))

            elif key == "display_id":
                display_id = parse_display_id(str(value))
                conditions.append(Order.display_id == display_id if display_id is not None else false())

            elif key == "tax_rate":
                try:
                    conditions.append(Order.tax_rate == float(value))
                except ValueError:
                    conditions.append(false())

            else:
                raise ValueError(f"Unsupported order filter: {key}")

        return conditions

    def _search_condition(self, term: str):
        # Search across email, shipping name, and display id
        pattern = f"%{escape_like(term)}%"
        clauses = [
            Order.email.ilike(pattern, escape=LIKE_ESCAPE),
            Order.shipping_address.has(
                or_(
                    Address.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Address.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                )
            ),
        ]
        display_id = parse_display_id(term)
        if display_id is not None:
            clauses.append(Order.display_id == display_id)
        return or_(*clauses)

    def _load_options(self, config: ListConfig) -> list:
        columns = list(config.select)
        for relation in config.relations:
            key = RELATION_KEYS.get(relation.split(".")[0])
            if key and key not in columns:
                columns.append(key)

        options = [load_only(*[getattr(Order, name) for name in columns])]
        options.extend(self._relation_loader(path) for path in config.relations)
        return options

    @staticmethod
    def _relation_loader(path: str):
        """selectinload chain for a dotted relation path like fulfillments.tracking_links"""
        entity = Order
        loader = None
        for name in path.split("."):
            attr = getattr(entity, name)
            loader = selectinload(attr) if loader is None else loader.selectinload(attr)
            entity = attr.property.mapper.class_
        return loader

    @staticmethod
    def _ordering(order: Dict[str, str]) -> list:
        clauses = []
        for name, direction in order.items():
            column = getattr(Order, name)
            clauses.append(column.desc() if direction.upper() == "DESC" else column.asc())
        # Stable pages when timestamps collide
        clauses.append(Order.id.desc())
        return clauses
