"""Unit tests for how enum values are stored."""

import pytest
from services.market_service.models import AfterSaleType, Order, OrderStatus
from services.market_service.models.enums import persisted_values, to_persisted


@pytest.mark.unit
def test_hyphenated_wire_values_are_stored_with_underscores():
    assert to_persisted("after-sale") == "after_sale"
    assert persisted_values(AfterSaleType) == ["refund", "return_refund", "exchange"]


@pytest.mark.unit
def test_order_status_column_uses_stored_values():
    column_type = Order.__table__.c.status.type

    assert "after_sale" in column_type.enums
    assert "after-sale" not in column_type.enums
    assert len(column_type.enums) == len(OrderStatus)
