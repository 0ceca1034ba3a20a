"""
Settlement workflow: payment intent creation and confirmation.

create_payment_intent prices the purchase, opens a Stripe payment intent
and records it locally as `pending`. fulfill_intent applies the ledger
mutation for a paid intent exactly once, whether it is reached through
POST /payments/confirm or through the payment_intent.succeeded webhook.
"""
import logging
from datetime import datetime
from typing import List, Optional, Union

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.content import Message, Post
from app.models.enums import PaymentStatus, PurchaseKind, SubscriptionStatus, SubscriptionTier
from app.models.payment_intent import PaymentIntent
from app.models.ppv_purchase import PPVPurchase
from app.models.subscription import UserSubscription
from app.models.tip import Tip
from app.schemas.payments import (
    ConfirmPaymentRequest,
    CreatePaymentIntentRequest,
    CreatePaymentIntentResponse,
)
from app.services import ledger, notifications, pricing
from app.services.gateway import StripeGateway
from app.services.notifications import SideEffect

logger = logging.getLogger(__name__)

SUBSCRIPTION_PERIOD = relativedelta(months=1)


def create_payment_intent(
    db: Session,
    gateway: StripeGateway,
    request: CreatePaymentIntentRequest,
) -> CreatePaymentIntentResponse:
    if request.idempotency_key:
        existing = db.query(PaymentIntent).filter(
            PaymentIntent.idempotency_key == request.idempotency_key
        ).first()
        if existing:
            return _replay_intent(gateway, existing, request)

    if not pricing.validate_amount(request.amount):
        raise ValidationError("Invalid payment amount")

    creator = ledger.get_creator_profile(db, request.creator_id)
    if not creator:
        raise NotFoundError("Creator not found")
    if not creator.stripe_account_id:
        raise ValidationError("Creator is not accepting payments")

    tier = None
    if request.type == PurchaseKind.SUBSCRIPTION:
        tier = request.subscription_tier
        ledger.expire_lapsed_subscriptions(db, subscriber_id=request.user_id, creator_id=request.creator_id)
        if ledger.find_active_subscription(db, request.user_id, request.creator_id):
            raise ConflictError("Active subscription already exists")
    elif request.type == PurchaseKind.PPV:
        content = _require_ppv_content(db, request.creator_id, request.content_id)
        if content.ppv_price is not None and content.ppv_price != request.amount:
            raise ValidationError("Amount does not match content price")
        if ledger.find_ppv_purchase(db, request.user_id, content):
            raise ConflictError("Content already purchased")

    amount = pricing.final_amount(request.type, request.amount, request.subscription_tier)
    fee = pricing.platform_fee(amount)

    metadata = {
        "type": request.type.value,
        "creatorId": str(request.creator_id),
        "userId": str(request.user_id),
        "contentId": str(request.content_id) if request.content_id else "",
        "subscriptionTier": tier.value if tier else "",
        "tipMessage": request.tip_message or "",
        "description": request.description or "",
    }
    # Local row only after Stripe accepted the intent
    gateway_intent = gateway.create_payment_intent(
        amount=amount,
        platform_fee=fee,
        destination=creator.stripe_account_id,
        metadata=metadata,
        idempotency_key=request.idempotency_key,
    )

    db.add(PaymentIntent(
        id=gateway_intent.id,
        user_id=request.user_id,
        creator_id=request.creator_id,
        amount=amount,
        platform_fee=fee,
        type=request.type,
        status=PaymentStatus.PENDING,
        content_id=request.content_id,
        subscription_tier=tier,
        tip_message=request.tip_message,
        description=request.description,
        idempotency_key=request.idempotency_key,
    ))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent retry with the same idempotency key got here first
        db.rollback()
        existing = ledger.get_intent(db, gateway_intent.id)
        if existing is None:
            raise
        return _replay_intent(gateway, existing, request)

    logger.info(
        f"[PAYMENT] Created {request.type.value} intent {gateway_intent.id}: "
        f"amount={amount} fee={fee} creator={request.creator_id} user={request.user_id}"
    )
    return CreatePaymentIntentResponse(
        client_secret=gateway_intent.client_secret,
        amount=amount,
        platform_fee=fee,
    )


def _replay_intent(gateway: StripeGateway, intent: PaymentIntent, request: CreatePaymentIntentRequest) -> CreatePaymentIntentResponse:
    if intent.user_id != request.user_id or intent.creator_id != request.creator_id or intent.type != request.type:
        raise ConflictError("Idempotency key already used for a different payment")
    gateway_intent = gateway.retrieve_payment_intent(intent.id)
    logger.info(f"[PAYMENT] Replayed intent {intent.id} for idempotency key {intent.idempotency_key}")
    return CreatePaymentIntentResponse(
        client_secret=gateway_intent.client_secret,
        amount=intent.amount,
        platform_fee=intent.platform_fee,
    )


def _require_ppv_content(db: Session, creator_id, content_id) -> Union[Post, Message]:
    if content_id is None:
        raise ValidationError("Missing content id")
    content = ledger.find_content(db, content_id)
    if content is None:
        raise NotFoundError("Content not found")
    if not content.is_ppv:
        raise ValidationError("Invalid PPV content")
    if ledger.content_owner(content) != creator_id:
        raise ValidationError("Invalid PPV content")
    return content


def confirm_payment(db: Session, request: ConfirmPaymentRequest) -> List[SideEffect]:
    """
    Mark the intent succeeded and apply its ledger mutation.

    Safe under repeated delivery: only the first call that claims the intent
    credits the creator; later calls return without changes. Everything is
    committed in one transaction. Returns the best-effort side effects to
    run after the commit.
    """
    try:
        intent = ledger.get_intent(db, request.payment_intent_id, for_update=True)
        if intent is None:
            intent = _adopt_intent(db, request)
        elif (intent.user_id, intent.creator_id, intent.type) != (request.user_id, request.creator_id, request.type):
            raise ValidationError("Payment details do not match")

        if intent.status == PaymentStatus.FAILED:
            raise ConflictError("Payment failed")
        if intent.amount != request.amount:
            logger.warning(
                f"[PAYMENT] Confirm amount {request.amount} differs from intent {intent.id} amount {intent.amount}; "
                f"using intent amount"
            )

        ledger.set_intent_status(db, intent.id, PaymentStatus.SUCCEEDED)
        effects = fulfill_intent(db, intent, tip_message=request.tip_message)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[PAYMENT] Ledger constraint rejected intent {request.payment_intent_id}: {e.orig}")
        raise ConflictError("Purchase already recorded") from e
    except Exception:
        db.rollback()
        raise

    if effects is None:
        logger.info(f"[PAYMENT] Intent {request.payment_intent_id} already fulfilled; nothing to do")
        return []
    return effects


def _adopt_intent(db: Session, request: ConfirmPaymentRequest) -> PaymentIntent:
    """
    Record an intent that Stripe knows about but we never stored (the
    process died between the Stripe call and the local insert).
    """
    if not pricing.validate_amount(request.amount):
        raise ValidationError("Invalid payment amount")
    if not ledger.get_creator_profile(db, request.creator_id):
        raise NotFoundError("Creator not found")

    intent = PaymentIntent(
        id=request.payment_intent_id,
        user_id=request.user_id,
        creator_id=request.creator_id,
        amount=request.amount,
        platform_fee=pricing.platform_fee(request.amount),
        type=request.type,
        status=PaymentStatus.PENDING,
        content_id=request.content_id,
        subscription_tier=SubscriptionTier.MONTHLY if request.type == PurchaseKind.SUBSCRIPTION else None,
        tip_message=request.tip_message,
    )
    db.add(intent)
    db.flush()
    logger.warning(f"[PAYMENT] Adopted unknown intent {intent.id} from confirm request")
    return intent


def fulfill_intent(db: Session, intent: PaymentIntent, tip_message: Optional[str] = None) -> Optional[List[SideEffect]]:
    """
    Apply the ledger mutation for a paid intent, at most once.

    Business checks run before anything is written, so a rejection leaves
    the intent unfulfilled. Returns None if the intent was already
    fulfilled, otherwise the side effects to schedule. Does not commit.
    """
    if intent.fulfilled_at is not None:
        return None

    kind = intent.type
    content = None
    if kind == PurchaseKind.SUBSCRIPTION:
        ledger.expire_lapsed_subscriptions(db, subscriber_id=intent.user_id, creator_id=intent.creator_id)
        if ledger.find_active_subscription(db, intent.user_id, intent.creator_id):
            raise ConflictError("Active subscription already exists")
    elif kind == PurchaseKind.PPV:
        content = _require_ppv_content(db, intent.creator_id, intent.content_id)

    if not ledger.claim_fulfillment(db, intent.id):
        return None

    if kind == PurchaseKind.SUBSCRIPTION:
        effects = _process_subscription(db, intent)
    elif kind == PurchaseKind.TIP:
        effects = _process_tip(db, intent, tip_message or intent.tip_message)
    elif kind == PurchaseKind.PPV:
        effects = _process_ppv(db, intent, content)
    else:
        effects = _process_live_stream(db, intent)

    logger.info(
        f"[PAYMENT] Fulfilled {kind.value} intent {intent.id}: "
        f"credited {intent.amount} to creator {intent.creator_id}"
    )
    return effects


def _process_subscription(db: Session, intent: PaymentIntent) -> List[SideEffect]:
    now = datetime.utcnow()
    db.add(UserSubscription(
        subscriber_id=intent.user_id,
        creator_id=intent.creator_id,
        amount_paid=intent.amount,
        status=SubscriptionStatus.ACTIVE,
        billing_cycle=intent.subscription_tier or SubscriptionTier.MONTHLY,
        start_date=now,
        expires_at=now + SUBSCRIPTION_PERIOD,
        auto_renew=True,
        payment_intent_id=intent.id,
    ))
    ledger.credit_creator(db, intent.creator_id, intent.amount, new_subscriber=True)
    return [SideEffect(notifications.send_welcome_message, (intent.creator_id, intent.user_id))]


def _process_tip(db: Session, intent: PaymentIntent, message: Optional[str]) -> List[SideEffect]:
    db.add(Tip(
        tipper_id=intent.user_id,
        creator_id=intent.creator_id,
        amount=intent.amount,
        message=message or "",
        payment_intent_id=intent.id,
    ))
    ledger.credit_creator(db, intent.creator_id, intent.amount)
    return [SideEffect(
        notifications.send_tip_notification,
        (intent.user_id, intent.creator_id, intent.amount, message),
    )]


def _process_ppv(db: Session, intent: PaymentIntent, content: Union[Post, Message]) -> List[SideEffect]:
    if ledger.find_ppv_purchase(db, intent.user_id, content):
        # Access already granted by an earlier payment
        logger.warning(
            f"[PAYMENT] Buyer {intent.user_id} already owns content {content.id}; "
            f"intent {intent.id} not credited again"
        )
        return []

    db.add(PPVPurchase(
        buyer_id=intent.user_id,
        seller_id=intent.creator_id,
        post_id=content.id if isinstance(content, Post) else None,
        message_id=content.id if isinstance(content, Message) else None,
        amount=intent.amount,
        payment_intent_id=intent.id,
    ))
    ledger.credit_creator(db, intent.creator_id, intent.amount)
    return []


def _process_live_stream(db: Session, intent: PaymentIntent) -> List[SideEffect]:
    # Stream access is granted by the media service for the stream's lifetime
    ledger.credit_creator(db, intent.creator_id, intent.amount)
    logger.info(f"[PAYMENT] Live stream access granted to {intent.user_id} for creator {intent.creator_id}")
    return []
