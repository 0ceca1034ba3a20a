"""
Charge amount rules. All values are integer cents.
"""
from typing import Optional

from app.core.config import settings
from app.models.enums import PurchaseKind, SubscriptionTier


def final_amount(kind: PurchaseKind, amount: int, tier: SubscriptionTier = SubscriptionTier.MONTHLY) -> int:
    """
    Apply subscription tier discounts.

    quarterly is 3 months at 10% off (x2.7, floored); yearly is 12 months for
    the price of 10. Other purchase kinds ignore the tier.
    """
    if kind != PurchaseKind.SUBSCRIPTION:
        return amount
    if tier == SubscriptionTier.QUARTERLY:
        # floor(amount * 2.7) in integer math
        return amount * 27 // 10
    if tier == SubscriptionTier.YEARLY:
        return amount * 10
    return amount


def platform_fee(amount: int, percent: Optional[int] = None) -> int:
    """Fee withheld by the platform at settlement: floor(amount * percent / 100)."""
    if percent is None:
        percent = settings.PLATFORM_FEE_PERCENT
    return amount * percent // 100


def validate_amount(amount: int) -> bool:
    return settings.MIN_PAYMENT_CENTS <= amount <= settings.MAX_PAYMENT_CENTS
