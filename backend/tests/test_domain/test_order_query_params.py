"""
Unit tests for order query validation

These tests validate domain logic without a database or HTTP layer.
"""
from datetime import datetime

import pytest

from storefront.core.errors import QueryValidationError
from storefront.domain.order import (
    CONTROL_KEYS,
    DateComparisonOperator,
    ListConfig,
    OrderFilterParams,
    OrderQueryParams,
    OrderStatus,
)


class TestOrderQueryParams:

    def test_defaults(self):
        params = OrderQueryParams.from_query({})

        assert params.pagination.limit == 10
        assert params.pagination.offset == 0
        assert params.pagination.fields is None
        assert params.pagination.expand is None
        assert params.filters.to_selector() == {}

    def test_numeric_strings_are_coerced(self):
        params = OrderQueryParams.from_query({"limit": "25", "offset": "50"})

        assert params.pagination.limit == 25
        assert params.pagination.offset == 50

    def test_single_status_becomes_list(self):
        params = OrderQueryParams.from_query({"status": "pending"})

        assert params.filters.status == [OrderStatus.PENDING]

    def test_status_list(self):
        params = OrderQueryParams.from_query({"status": ["pending", "completed"]})

        assert params.filters.to_selector()["status"] == ["pending", "completed"]

    @pytest.mark.parametrize("key, value", [
        ("status", "shipped"),
        ("fulfillment_status", ["fulfilled", "lost"]),
        ("payment_status", "paid"),
    ])
    def test_unknown_enum_values_rejected(self, key, value):
        with pytest.raises(QueryValidationError) as exc_info:
            OrderQueryParams.from_query({key: value})

        assert any(field.startswith(key) for field in exc_info.value.fields)

    def test_scalar_filter_rejects_list(self):
        with pytest.raises(QueryValidationError) as exc_info:
            OrderQueryParams.from_query({"email": ["a@example.com", "b@example.com"]})

        assert exc_info.value.fields == ["email"]

    def test_date_operator_must_be_object(self):
        with pytest.raises(QueryValidationError) as exc_info:
            OrderQueryParams.from_query({"created_at": "2023-01-01"})

        assert exc_info.value.fields == ["created_at"]

    def test_errors_from_pagination_and_filters_are_combined(self):
        with pytest.raises(QueryValidationError) as exc_info:
            OrderQueryParams.from_query({"limit": "many", "status": "nope"})

        assert set(exc_info.value.fields) == {"limit", "status.0"}

    def test_cancelled_spelling_alias(self):
        params = OrderQueryParams.from_query({"cancelled_at": {"lt": "2023-01-01"}})

        assert params.filters.canceled_at.lt == datetime(2023, 1, 1)


class TestOrderFilterParams:

    def test_selector_drops_blank_values(self):
        filters = OrderFilterParams(email="", q=None, cart_id="cart_1", status=[],
                                    created_at=DateComparisonOperator())

        assert filters.to_selector() == {"cart_id": "cart_1"}

    def test_selector_never_contains_control_keys(self):
        params = OrderQueryParams.from_query({
            "limit": "5", "offset": "5", "fields": "id", "expand": "items", "email": "a@example.com",
        })

        selector = params.filters.to_selector()

        assert not set(CONTROL_KEYS) & set(selector)
        assert selector == {"email": "a@example.com"}

    def test_selector_keeps_date_operator(self):
        params = OrderQueryParams.from_query({"updated_at": {"gte": "2023-01-01", "lt": "2023-02-01"}})

        operator = params.filters.to_selector()["updated_at"]

        assert isinstance(operator, DateComparisonOperator)
        assert operator.bounds() == {"gte": datetime(2023, 1, 1), "lt": datetime(2023, 2, 1)}

    def test_filters_are_immutable(self):
        filters = OrderFilterParams(email="a@example.com")

        with pytest.raises(Exception):
            filters.email = "b@example.com"


class TestDateComparisonOperator:

    def test_empty(self):
        assert DateComparisonOperator().is_empty()

    def test_epoch_seconds(self):
        operator = DateComparisonOperator(gt=0)

        assert operator.gt.year == 1970

    def test_unknown_operator_rejected(self):
        with pytest.raises(Exception):
            DateComparisonOperator(between="2023-01-01")


class TestListConfig:

    def test_default_order_is_newest_first(self):
        config = ListConfig(select=["id"], relations=[])

        assert config.order == {"created_at": "DESC"}
        assert config.skip == 0
        assert config.take == 10
