from app.models.enums import (
    PurchaseKind, SubscriptionTier, PaymentStatus, SubscriptionStatus, PayoutStatus, AccountStatus
)
from app.models.profile import Profile, CreatorProfile
from app.models.content import Post, Message
from app.models.payment_intent import PaymentIntent
from app.models.subscription import UserSubscription
from app.models.tip import Tip
from app.models.ppv_purchase import PPVPurchase
from app.models.payout import CreatorPayout
from app.models.stripe_event import StripeEvent

__all__ = [
    "PurchaseKind", "SubscriptionTier", "PaymentStatus", "SubscriptionStatus", "PayoutStatus", "AccountStatus",
    "Profile", "CreatorProfile", "Post", "Message",
    "PaymentIntent", "UserSubscription", "Tip", "PPVPurchase", "CreatorPayout",
    "StripeEvent",
]
