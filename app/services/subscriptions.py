"""
Subscriber-side subscription management: listing, cancel, reactivate.

Neither cancel nor reactivate moves money, so the creator's ledger summary
is left alone.
"""
import logging
from datetime import datetime
from typing import List
import uuid

from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.enums import SubscriptionStatus
from app.models.subscription import UserSubscription
from app.services import ledger

logger = logging.getLogger(__name__)


def list_subscriptions(db: Session, subscriber_id: uuid.UUID) -> List[UserSubscription]:
    if ledger.expire_lapsed_subscriptions(db, subscriber_id=subscriber_id):
        db.commit()
    return db.query(UserSubscription).filter(
        UserSubscription.subscriber_id == subscriber_id
    ).order_by(UserSubscription.created_at.desc()).all()


def _get_subscription(db: Session, subscription_id: uuid.UUID) -> UserSubscription:
    subscription = db.query(UserSubscription).filter(UserSubscription.id == subscription_id).first()
    if not subscription:
        raise NotFoundError("Subscription not found")
    return subscription


def cancel_subscription(db: Session, subscription_id: uuid.UUID) -> UserSubscription:
    """Cancel an active subscription. Reactivation stays possible until it expires."""
    subscription = _get_subscription(db, subscription_id)
    ledger.expire_lapsed_subscriptions(db, subscriber_id=subscription.subscriber_id, creator_id=subscription.creator_id)

    if subscription.status == SubscriptionStatus.CANCELLED:
        return subscription
    if subscription.status != SubscriptionStatus.ACTIVE:
        db.commit()
        raise ValidationError(f"Only active subscriptions can be cancelled (status: {subscription.status.value})")

    subscription.status = SubscriptionStatus.CANCELLED
    subscription.auto_renew = False
    db.commit()
    logger.info(f"[SUBSCRIPTION] Cancelled subscription {subscription.id}")
    return subscription


def reactivate_subscription(db: Session, subscription_id: uuid.UUID) -> UserSubscription:
    """Undo a cancellation while the paid period is still running."""
    subscription = _get_subscription(db, subscription_id)
    if subscription.status == SubscriptionStatus.ACTIVE:
        return subscription
    if subscription.status != SubscriptionStatus.CANCELLED:
        raise ValidationError(f"Only cancelled subscriptions can be reactivated (status: {subscription.status.value})")
    if subscription.is_lapsed(datetime.utcnow()):
        raise ValidationError("Subscription period has ended; a new payment is required")

    ledger.expire_lapsed_subscriptions(db, subscriber_id=subscription.subscriber_id, creator_id=subscription.creator_id)
    if ledger.find_active_subscription(db, subscription.subscriber_id, subscription.creator_id):
        raise ConflictError("Active subscription already exists")

    subscription.status = SubscriptionStatus.ACTIVE
    subscription.auto_renew = True
    db.commit()
    logger.info(f"[SUBSCRIPTION] Reactivated subscription {subscription.id}")
    return subscription
