"""
Stripe webhook reconciliation.

Applies gateway-reported state to the ledger independently of the client's
confirm call:
- payment_intent.succeeded       -> intent succeeded, fulfil if nobody has yet
- payment_intent.payment_failed  -> intent failed (never over succeeded)
- account.updated                -> creator payout-account status
- transfer.created               -> payout completed
- transfer.reversed              -> payout failed, balance becomes payable again
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, NamedTuple
import uuid

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.enums import AccountStatus, PaymentStatus, PayoutStatus
from app.models.payout import CreatorPayout
from app.models.profile import CreatorProfile
from app.models.stripe_event import StripeEvent
from app.services import ledger
from app.services.notifications import SideEffect
from app.services.settlement import fulfill_intent

logger = logging.getLogger(__name__)


class ReconcileResult(NamedTuple):
    duplicate: bool
    side_effects: List[SideEffect]


def handle_event(db: Session, event: Dict[str, Any]) -> ReconcileResult:
    """
    Record a verified event and process it once.

    The event row is committed before processing so a failed attempt is
    still visible; it stays processed=False and a redelivery retries it.
    Processing errors are re-raised after rollback.
    """
    event_id = event["id"]
    event_type = event["type"]

    record = db.query(StripeEvent).filter(StripeEvent.stripe_event_id == event_id).first()
    if record and record.processed:
        logger.info(f"[WEBHOOK] Event {event_id} ({event_type}) already processed")
        return ReconcileResult(duplicate=True, side_effects=[])

    if record is None:
        record = StripeEvent(
            stripe_event_id=event_id,
            type=event_type,
            payload=event,
            processed=False,
            received_at=datetime.utcnow(),
        )
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            # Concurrent delivery of the same event is handling it
            db.rollback()
            logger.info(f"[WEBHOOK] Event {event_id} is already being processed")
            return ReconcileResult(duplicate=True, side_effects=[])

    try:
        effects = process_stripe_event(db, event)
        record.processed = True
        record.processed_at = datetime.utcnow()
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"[WEBHOOK] Error processing event {event_id} ({event_type})")
        raise

    logger.info(f"[WEBHOOK] Processed event {event_id} ({event_type})")
    return ReconcileResult(duplicate=False, side_effects=effects)


def process_stripe_event(db: Session, event: Dict[str, Any]) -> List[SideEffect]:
    """Dispatch one event to its handler. Does not commit."""
    event_type = event.get("type")
    data = event.get("data", {}).get("object", {}) or {}

    if event_type == "payment_intent.succeeded":
        return _process_payment_succeeded(db, data)
    if event_type == "payment_intent.payment_failed":
        _process_payment_failed(db, data)
    elif event_type == "account.updated":
        _process_account_updated(db, data)
    elif event_type == "transfer.created":
        _process_transfer(db, data, PayoutStatus.COMPLETED, (PayoutStatus.PENDING, PayoutStatus.PROCESSING))
    elif event_type == "transfer.reversed":
        _process_transfer(
            db, data, PayoutStatus.FAILED,
            (PayoutStatus.PENDING, PayoutStatus.PROCESSING, PayoutStatus.COMPLETED),
        )
    else:
        logger.info(f"[WEBHOOK] Event type {event_type} not handled - skipping")
    return []


def _process_payment_succeeded(db: Session, data: Dict[str, Any]) -> List[SideEffect]:
    intent_id = data.get("id")
    intent = ledger.get_intent(db, intent_id, for_update=True) if intent_id else None
    if intent is None:
        logger.warning(f"[WEBHOOK] payment_intent.succeeded for unknown intent {intent_id}")
        return []

    ledger.set_intent_status(db, intent.id, PaymentStatus.SUCCEEDED)
    try:
        effects = fulfill_intent(db, intent)
    except (ConflictError, ValidationError, NotFoundError) as e:
        # Money moved but the purchase can't be applied; left for manual review
        logger.error(f"[WEBHOOK] Intent {intent.id} succeeded but could not be fulfilled: {e.message}")
        return []
    return effects or []


def _process_payment_failed(db: Session, data: Dict[str, Any]):
    intent_id = data.get("id")
    if not intent_id:
        return
    if not ledger.set_intent_status(db, intent_id, PaymentStatus.FAILED):
        logger.info(f"[WEBHOOK] Intent {intent_id} not moved to failed (unknown or already terminal)")


def _find_creator_for_account(db: Session, account: Dict[str, Any]):
    creator_id = (account.get("metadata") or {}).get("creatorId")
    if creator_id:
        try:
            creator = ledger.get_creator_profile(db, uuid.UUID(creator_id))
        except ValueError:
            creator = None
        if creator:
            return creator
    if account.get("id"):
        return db.query(CreatorProfile).filter(CreatorProfile.stripe_account_id == account["id"]).first()
    return None


def _process_account_updated(db: Session, account: Dict[str, Any]):
    creator = _find_creator_for_account(db, account)
    if creator is None:
        logger.warning(f"[WEBHOOK] account.updated for unknown account {account.get('id')}")
        return

    ready = bool(account.get("charges_enabled")) and bool(account.get("payouts_enabled"))
    creator.stripe_account_status = AccountStatus.VERIFIED if ready else AccountStatus.PENDING
    creator.stripe_onboarding_complete = ready
    if account.get("id") and not creator.stripe_account_id:
        creator.stripe_account_id = account["id"]
    logger.info(f"[WEBHOOK] Creator {creator.user_id} payout account is {creator.stripe_account_status.value}")


def _process_transfer(db: Session, transfer: Dict[str, Any], new_status: PayoutStatus, sources):
    transfer_id = transfer.get("id")
    payout_id = (transfer.get("metadata") or {}).get("payoutId")

    conditions = []
    if transfer_id:
        conditions.append(CreatorPayout.stripe_transfer_id == transfer_id)
    if payout_id:
        try:
            conditions.append(CreatorPayout.id == uuid.UUID(payout_id))
        except ValueError:
            pass
    if not conditions:
        return

    payout = db.query(CreatorPayout).filter(or_(*conditions)).first()
    if payout is None:
        logger.warning(f"[WEBHOOK] No payout found for transfer {transfer_id}")
        return

    if transfer_id and not payout.stripe_transfer_id:
        payout.stripe_transfer_id = transfer_id
    if payout.status in sources:
        payout.status = new_status
        logger.info(f"[WEBHOOK] Payout {payout.id} is now {new_status.value}")
