"""Unit tests for subscription delivery scheduling."""

from datetime import date

import pytest
from services.market_service.models import SubscriptionCycle
from services.market_service.services.subscription_ops import next_delivery_date

# 2026-03-02 is a Monday.
MONDAY = date(2026, 3, 2)


@pytest.mark.unit
def test_future_start_without_weekday_is_first_delivery():
    result = next_delivery_date(
        MONDAY, SubscriptionCycle.WEEKLY, today=date(2026, 3, 1)
    )
    assert result == MONDAY


@pytest.mark.unit
def test_weekday_counts_from_sunday():
    # deliver_weekday 3 = Wednesday
    result = next_delivery_date(MONDAY, SubscriptionCycle.WEEKLY, 3, today=MONDAY)
    assert result == date(2026, 3, 4)


@pytest.mark.unit
def test_sunday_is_zero():
    result = next_delivery_date(MONDAY, SubscriptionCycle.WEEKLY, 0, today=MONDAY)
    assert result == date(2026, 3, 8)


@pytest.mark.unit
def test_start_on_delivery_weekday_is_kept():
    result = next_delivery_date(MONDAY, SubscriptionCycle.BIWEEKLY, 1, today=MONDAY)
    assert result == MONDAY


@pytest.mark.unit
@pytest.mark.parametrize(
    "cycle,expected",
    [
        (SubscriptionCycle.WEEKLY, date(2026, 3, 16)),
        (SubscriptionCycle.BIWEEKLY, date(2026, 3, 16)),
        (SubscriptionCycle.MONTHLY, date(2026, 3, 30)),
        (SubscriptionCycle.SEASONAL, date(2026, 6, 1)),
    ],
)
def test_past_start_advances_by_whole_cycles(cycle, expected):
    result = next_delivery_date(MONDAY, cycle, 1, today=date(2026, 3, 11))
    assert result == expected
    assert result.weekday() == 0


@pytest.mark.unit
def test_delivery_due_today_is_not_skipped():
    result = next_delivery_date(
        MONDAY, SubscriptionCycle.WEEKLY, today=date(2026, 3, 16)
    )
    assert result == date(2026, 3, 16)
