"""
Order Query Domain Models

Request-scoped value objects describing what a customer asked for when
listing orders: validated filters, pagination and the derived list config.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from storefront.core.errors import QueryValidationError, field_errors


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    ARCHIVED = "archived"
    CANCELED = "canceled"
    REQUIRES_ACTION = "requires_action"


class FulfillmentStatus(str, Enum):
    NOT_FULFILLED = "not_fulfilled"
    PARTIALLY_FULFILLED = "partially_fulfilled"
    FULFILLED = "fulfilled"
    PARTIALLY_SHIPPED = "partially_shipped"
    SHIPPED = "shipped"
    PARTIALLY_RETURNED = "partially_returned"
    RETURNED = "returned"
    CANCELED = "canceled"
    REQUIRES_ACTION = "requires_action"


class PaymentStatus(str, Enum):
    NOT_PAID = "not_paid"
    AWAITING = "awaiting"
    CAPTURED = "captured"
    PARTIALLY_REFUNDED = "partially_refunded"
    REFUNDED = "refunded"
    CANCELED = "canceled"
    REQUIRES_ACTION = "requires_action"


# Query keys that control paging and projection rather than filtering
CONTROL_KEYS = ("limit", "offset", "expand", "fields")

DEFAULT_ORDER = {"created_at": "DESC"}

MAX_LIMIT = 10000
MAX_OFFSET = 2**31 - 1


class DateComparisonOperator(BaseModel):
    """
    Range descriptor applied to a timestamp column

    Accepts ISO 8601 dates/datetimes or unix timestamps for each bound.
    """

    lt: Optional[datetime] = Field(None, description="Strictly before")
    gt: Optional[datetime] = Field(None, description="Strictly after")
    lte: Optional[datetime] = Field(None, description="On or before")
    gte: Optional[datetime] = Field(None, description="On or after")
    eq: Optional[datetime] = Field(None, description="Exactly at")

    model_config = ConfigDict(frozen=True, extra="forbid")

    def bounds(self) -> Dict[str, datetime]:
        """Operators that were actually supplied"""
        return {op: value for op, value in self.model_dump().items() if value is not None}

    def is_empty(self) -> bool:
        return not self.bounds()


class PaginationParams(BaseModel):
    """Paging and projection controls"""

    limit: int = Field(10, ge=0, le=MAX_LIMIT, description="Page size")
    offset: int = Field(0, ge=0, le=MAX_OFFSET, description="Page start")
    fields: Optional[str] = Field(None, description="Comma separated columns to select")
    expand: Optional[str] = Field(None, description="Comma separated relations to load")

    model_config = ConfigDict(frozen=True, extra="forbid")


class OrderFilterParams(BaseModel):
    """
    Filters a customer may apply to their own orders

    Every field is optional; a field that is not supplied (or is empty)
    does not constrain the query. A client-sent `customer_id` is accepted
    but always replaced by the authenticated customer before querying.
    """

    q: Optional[str] = Field(None, description="Free-text search")
    id: Optional[str] = Field(None, description="Order id")
    customer_id: Optional[str] = Field(None, description="Overwritten with the session customer")
    status: Optional[List[OrderStatus]] = None
    fulfillment_status: Optional[List[FulfillmentStatus]] = None
    payment_status: Optional[List[PaymentStatus]] = None
    display_id: Optional[str] = None
    cart_id: Optional[str] = None
    email: Optional[str] = None
    region_id: Optional[str] = None
    currency_code: Optional[str] = None
    tax_rate: Optional[str] = None
    created_at: Optional[DateComparisonOperator] = None
    updated_at: Optional[DateComparisonOperator] = None
    canceled_at: Optional[DateComparisonOperator] = Field(
        None, validation_alias=AliasChoices("canceled_at", "cancelled_at")
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("status", "fulfillment_status", "payment_status", mode="before")
    @classmethod
    def _wrap_single_value(cls, value: Any) -> Any:
        # `?status=pending` arrives as a plain string
        if isinstance(value, str):
            return [value]
        return value

    def to_selector(self) -> Dict[str, Any]:
        """
        Filter map for the order service

        Drops absent and empty filters; enum lists become plain strings.
        """
        selector: Dict[str, Any] = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if _is_blank(value):
                continue
            if isinstance(value, list):
                value = [item.value if isinstance(item, Enum) else item for item in value]
            selector[name] = value
        return selector


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, DateComparisonOperator):
        return value.is_empty()
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    return False


class OrderQueryParams(BaseModel):
    """
    Full validated query: filters and pagination held side by side
    """

    filters: OrderFilterParams = Field(default_factory=OrderFilterParams)
    pagination: PaginationParams = Field(default_factory=PaginationParams)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_query(cls, raw: Mapping[str, Any]) -> "OrderQueryParams":
        """
        Validate a decoded query dict

        Errors from both halves are collected before raising, so the client
        sees every offending field at once.

        Raises:
            QueryValidationError: on any type, enum or shape violation
        """
        control = {key: value for key, value in raw.items() if key in CONTROL_KEYS}
        filter_input = {key: value for key, value in raw.items() if key not in CONTROL_KEYS}

        errors = []
        pagination = filters = None

        try:
            pagination = PaginationParams.model_validate(control)
        except ValidationError as e:
            errors.extend(field_errors(e))

        try:
            filters = OrderFilterParams.model_validate(filter_input)
        except ValidationError as e:
            errors.extend(field_errors(e))

        if errors:
            raise QueryValidationError("Invalid request parameters", errors)

        return cls(filters=filters, pagination=pagination)


class ListConfig(BaseModel):
    """Column selection, relation loading, paging and ordering for one retrieval"""

    select: List[str]
    relations: List[str]
    skip: int = 0
    take: int = 10
    order: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ORDER))

    model_config = ConfigDict(frozen=True)
