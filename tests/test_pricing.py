"""Tier pricing and platform fee rules"""
import math

import pytest

from app.models import PurchaseKind, SubscriptionTier
from app.services import pricing

AMOUNTS = [100, 101, 333, 999, 1234, 4999, 10001, 99999, 1_000_000]


@pytest.mark.parametrize("amount", AMOUNTS)
def test_quarterly_is_floor_of_2_7x(amount):
    expected = math.floor(amount * 2.7)
    assert pricing.final_amount(PurchaseKind.SUBSCRIPTION, amount, SubscriptionTier.QUARTERLY) == expected


@pytest.mark.parametrize("amount", AMOUNTS)
def test_yearly_is_ten_months(amount):
    assert pricing.final_amount(PurchaseKind.SUBSCRIPTION, amount, SubscriptionTier.YEARLY) == amount * 10


@pytest.mark.parametrize("kind", [PurchaseKind.TIP, PurchaseKind.PPV, PurchaseKind.LIVE_STREAM])
def test_tier_ignored_for_other_kinds(kind):
    assert pricing.final_amount(kind, 999, SubscriptionTier.YEARLY) == 999


@pytest.mark.parametrize("amount", AMOUNTS + [1, 19, 20, 21])
def test_platform_fee_bounds(amount):
    fee = pricing.platform_fee(amount)
    assert fee == math.floor(amount * 0.05)
    assert 0 <= fee <= amount


def test_example_999_monthly_and_yearly():
    monthly = pricing.final_amount(PurchaseKind.SUBSCRIPTION, 999, SubscriptionTier.MONTHLY)
    assert (monthly, pricing.platform_fee(monthly)) == (999, 49)

    yearly = pricing.final_amount(PurchaseKind.SUBSCRIPTION, 999, SubscriptionTier.YEARLY)
    assert (yearly, pricing.platform_fee(yearly)) == (9990, 499)


@pytest.mark.parametrize("amount,valid", [(99, False), (100, True), (1_000_000, True), (1_000_001, False), (0, False)])
def test_amount_bounds(amount, valid):
    assert pricing.validate_amount(amount) is valid
