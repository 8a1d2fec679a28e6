"""
Order Service

Retrieval entry point used by store routes: runs the repository query and
turns ORM rows into plain dicts that contain only what was selected and
expanded.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.domain.order import ListConfig
from storefront.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class OrderService:
    """Read-side order operations"""

    def __init__(self, db: Optional[Session] = None, repository: Optional[OrderRepository] = None):
        self.repository = repository or OrderRepository(db)

    def list_and_count(self, selector: Dict[str, Any], config: ListConfig) -> Tuple[List[dict], int]:
        """
        List orders matching a filter map

        Args:
            selector: Filter map; absent keys impose no constraint
            config: Column selection, relations, paging and ordering

        Returns:
            Tuple of (serialized orders, total count ignoring paging)
        """
        logger.info(
            f"Listing orders: filters={sorted(selector)} skip={config.skip} take={config.take}"
        )
        orders, count = self.repository.find_and_count(selector, config)
        return [serialize_order(order, config) for order in orders], count


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """FastAPI dependency providing a request-scoped OrderService"""
    return OrderService(db)


# ============================================================================
# Serialization
# ============================================================================

def serialize_order(order, config: ListConfig) -> dict:
    """Selected columns plus one key per top-level expanded relation"""
    data = {name: _json_value(getattr(order, name)) for name in config.select}
    for relation, children in _relation_tree(config.relations).items():
        data[relation] = _serialize_related(getattr(order, relation), children)
    return data


def _relation_tree(paths: List[str]) -> Dict[str, dict]:
    """["fulfillments", "fulfillments.tracking_links"] -> {"fulfillments": {"tracking_links": {}}}"""
    tree: Dict[str, dict] = {}
    for path in paths:
        node = tree
        for name in path.split("."):
            node = node.setdefault(name, {})
    return tree


def _serialize_related(value, children: Dict[str, dict]):
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_serialize_row(row, children) for row in value]
    return _serialize_row(value, children)


def _serialize_row(row, children: Dict[str, dict]) -> dict:
    mapper = sa_inspect(row).mapper
    data = {attr.key: _json_value(getattr(row, attr.key)) for attr in mapper.column_attrs}
    for relation, grandchildren in children.items():
        data[relation] = _serialize_related(getattr(row, relation), grandchildren)
    return data


def _json_value(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value
