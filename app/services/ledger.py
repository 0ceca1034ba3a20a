"""
Ledger store access.

Keyed reads and conditional writes over the payment tables. Nothing here
commits; callers own the transaction. Counter updates and status changes
are single UPDATE statements evaluated by the database, so concurrent
requests never overwrite each other's increments.
"""
from sqlalchemy.orm import Session
from sqlalchemy import and_, func
from datetime import datetime
from typing import Optional, Union
import uuid

from dateutil.relativedelta import relativedelta

from app.core.errors import NotFoundError
from app.models.content import Message, Post
from app.models.enums import PaymentStatus, PayoutStatus, SubscriptionStatus
from app.models.payment_intent import PaymentIntent
from app.models.payout import CreatorPayout
from app.models.ppv_purchase import PPVPurchase
from app.models.profile import CreatorProfile
from app.models.subscription import UserSubscription
from app.models.tip import Tip

# Status each terminal write may replace. `succeeded` is absorbing; `failed`
# yields only to `succeeded`; `pending` is never written over anything.
_INTENT_STATUS_SOURCES = {
    PaymentStatus.SUCCEEDED: (PaymentStatus.PENDING, PaymentStatus.FAILED),
    PaymentStatus.FAILED: (PaymentStatus.PENDING,),
}


def get_creator_profile(db: Session, creator_id: uuid.UUID, for_update: bool = False) -> Optional[CreatorProfile]:
    query = db.query(CreatorProfile).filter(CreatorProfile.user_id == creator_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def credit_creator(db: Session, creator_id: uuid.UUID, amount: int, new_subscriber: bool = False):
    """Atomically add `amount` cents (and optionally one subscriber) to the creator summary."""
    values = {
        CreatorProfile.total_earnings: CreatorProfile.total_earnings + amount,
        CreatorProfile.updated_at: datetime.utcnow(),
    }
    if new_subscriber:
        values[CreatorProfile.total_subscribers] = CreatorProfile.total_subscribers + 1

    updated = db.query(CreatorProfile).filter(
        CreatorProfile.user_id == creator_id
    ).update(values, synchronize_session=False)
    if not updated:
        raise NotFoundError("Creator not found")


def get_intent(db: Session, intent_id: str, for_update: bool = False) -> Optional[PaymentIntent]:
    query = db.query(PaymentIntent).filter(PaymentIntent.id == intent_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def set_intent_status(db: Session, intent_id: str, status: PaymentStatus) -> bool:
    """
    Move a payment intent to `status` if the state machine allows it.

    Returns True when the row changed. Disallowed or repeated writes are
    no-ops, so confirm and webhook may race in any order.
    """
    sources = _INTENT_STATUS_SOURCES.get(status)
    if not sources:
        return False
    updated = db.query(PaymentIntent).filter(
        PaymentIntent.id == intent_id,
        PaymentIntent.status.in_(sources),
    ).update(
        {PaymentIntent.status: status, PaymentIntent.updated_at: datetime.utcnow()},
        synchronize_session=False,
    )
    return updated > 0


def claim_fulfillment(db: Session, intent_id: str) -> bool:
    """
    Mark the intent as fulfilled. Only one caller ever gets True for a given
    intent; everyone else must skip the ledger mutation.
    """
    now = datetime.utcnow()
    updated = db.query(PaymentIntent).filter(
        PaymentIntent.id == intent_id,
        PaymentIntent.fulfilled_at.is_(None),
    ).update(
        {PaymentIntent.fulfilled_at: now, PaymentIntent.updated_at: now},
        synchronize_session=False,
    )
    return updated == 1


def expire_lapsed_subscriptions(
    db: Session,
    subscriber_id: Optional[uuid.UUID] = None,
    creator_id: Optional[uuid.UUID] = None,
    now: Optional[datetime] = None,
) -> int:
    """Lazy expiry: active subscriptions past their expiry become `expired`."""
    now = now or datetime.utcnow()
    filters = [
        UserSubscription.status == SubscriptionStatus.ACTIVE,
        UserSubscription.expires_at <= now,
    ]
    if subscriber_id is not None:
        filters.append(UserSubscription.subscriber_id == subscriber_id)
    if creator_id is not None:
        filters.append(UserSubscription.creator_id == creator_id)

    return db.query(UserSubscription).filter(and_(*filters)).update(
        {UserSubscription.status: SubscriptionStatus.EXPIRED, UserSubscription.updated_at: now},
        synchronize_session="fetch",
    )


def find_active_subscription(db: Session, subscriber_id: uuid.UUID, creator_id: uuid.UUID) -> Optional[UserSubscription]:
    return db.query(UserSubscription).filter(
        UserSubscription.subscriber_id == subscriber_id,
        UserSubscription.creator_id == creator_id,
        UserSubscription.status == SubscriptionStatus.ACTIVE,
    ).first()


def find_content(db: Session, content_id: Optional[uuid.UUID]) -> Optional[Union[Post, Message]]:
    """PPV content is either a post or a direct message."""
    if content_id is None:
        return None
    post = db.query(Post).filter(Post.id == content_id).first()
    if post:
        return post
    return db.query(Message).filter(Message.id == content_id).first()


def content_owner(content: Union[Post, Message]) -> uuid.UUID:
    if isinstance(content, Post):
        return content.creator_id
    return content.sender_id


def find_ppv_purchase(db: Session, buyer_id: uuid.UUID, content: Union[Post, Message]) -> Optional[PPVPurchase]:
    query = db.query(PPVPurchase).filter(PPVPurchase.buyer_id == buyer_id)
    if isinstance(content, Post):
        query = query.filter(PPVPurchase.post_id == content.id)
    else:
        query = query.filter(PPVPurchase.message_id == content.id)
    return query.first()


def paid_out_total(db: Session, creator_id: uuid.UUID) -> int:
    """Cents already sent (or on the way) to the creator. Failed payouts don't count."""
    total = db.query(func.coalesce(func.sum(CreatorPayout.amount), 0)).filter(
        CreatorPayout.creator_id == creator_id,
        CreatorPayout.status != PayoutStatus.FAILED,
    ).scalar()
    return int(total or 0)


def last_payout(db: Session, creator_id: uuid.UUID) -> Optional[CreatorPayout]:
    return db.query(CreatorPayout).filter(
        CreatorPayout.creator_id == creator_id
    ).order_by(CreatorPayout.created_at.desc()).first()


def month_window(now: datetime):
    """[first instant of this month, first instant of next month)"""
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return start, start + relativedelta(months=1)


def monthly_earnings(db: Session, creator_id: uuid.UUID, now: Optional[datetime] = None) -> int:
    """Subscription and tip revenue created in the current calendar month."""
    start, end = month_window(now or datetime.utcnow())

    subscriptions = db.query(func.coalesce(func.sum(UserSubscription.amount_paid), 0)).filter(
        UserSubscription.creator_id == creator_id,
        UserSubscription.created_at >= start,
        UserSubscription.created_at < end,
    ).scalar()
    tips = db.query(func.coalesce(func.sum(Tip.amount), 0)).filter(
        Tip.creator_id == creator_id,
        Tip.created_at >= start,
        Tip.created_at < end,
    ).scalar()
    return int(subscriptions or 0) + int(tips or 0)
