"""
Creator earnings, payouts and Stripe Connect onboarding.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional
import uuid

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import GatewayError, NotFoundError, ValidationError
from app.models.enums import AccountStatus, PayoutStatus
from app.models.payout import CreatorPayout
from app.schemas.payments import ConnectAccountRequest, ConnectAccountResponse, EarningsSnapshot
from app.services import ledger
from app.services.gateway import StripeGateway

logger = logging.getLogger(__name__)

PAYOUT_WEEKDAY = 4  # Friday


def next_payout_date(now: Optional[datetime] = None) -> datetime:
    """Payouts run weekly on Fridays; on a Friday the next payout is today."""
    now = now or datetime.utcnow()
    days_ahead = (PAYOUT_WEEKDAY - now.weekday()) % 7
    day = now + timedelta(days=days_ahead)
    return day.replace(hour=0, minute=0, second=0, microsecond=0)


def pending_balance(db: Session, creator) -> int:
    """Earnings not yet paid out: total_earnings minus every payout that hasn't failed."""
    return max(0, creator.total_earnings - ledger.paid_out_total(db, creator.user_id))


def get_creator_earnings(db: Session, creator_id: uuid.UUID, now: Optional[datetime] = None) -> EarningsSnapshot:
    now = now or datetime.utcnow()
    creator = ledger.get_creator_profile(db, creator_id)
    if not creator:
        raise NotFoundError("Creator not found")

    last = ledger.last_payout(db, creator_id)
    return EarningsSnapshot(
        total_earnings=creator.total_earnings,
        monthly_earnings=ledger.monthly_earnings(db, creator_id, now),
        pending_payout=pending_balance(db, creator),
        last_payout=last.amount if last else 0,
        last_payout_date=last.created_at if last else None,
        next_payout_date=next_payout_date(now),
        payout_method="bank_account" if creator.stripe_account_id else None,
    )


def request_payout(db: Session, gateway: StripeGateway, creator_id: uuid.UUID) -> int:
    """
    Transfer the creator's whole pending balance to their connected account.

    The payout row is committed before the transfer is created so that a
    concurrent request sees the balance as already claimed; the creator row
    is locked while the balance is computed.
    """
    creator = ledger.get_creator_profile(db, creator_id, for_update=True)
    if not creator:
        raise NotFoundError("Creator not found")
    if not creator.stripe_account_id:
        raise ValidationError("Creator not onboarded")

    amount = pending_balance(db, creator)
    if amount < settings.MIN_PAYOUT_CENTS:
        raise ValidationError(f"Minimum payout amount is ${settings.MIN_PAYOUT_CENTS // 100}")

    destination = creator.stripe_account_id
    payout = CreatorPayout(creator_id=creator_id, amount=amount, status=PayoutStatus.PENDING)
    db.add(payout)
    db.commit()

    try:
        transfer_id = gateway.create_transfer(
            amount=amount,
            destination=destination,
            metadata={"creatorId": str(creator_id), "payoutId": str(payout.id), "type": "payout"},
            idempotency_key=f"payout-{payout.id}",
        )
    except GatewayError as e:
        payout.status = PayoutStatus.FAILED
        db.commit()
        logger.error(f"[PAYOUT] Transfer for payout {payout.id} failed: {e.detail}")
        raise

    payout.stripe_transfer_id = transfer_id
    db.commit()
    logger.info(f"[PAYOUT] Requested payout {payout.id} of {amount} to creator {creator_id} (transfer {transfer_id})")
    return amount


def create_connect_account(db: Session, gateway: StripeGateway, request: ConnectAccountRequest) -> ConnectAccountResponse:
    creator = ledger.get_creator_profile(db, request.creator_id)
    if not creator:
        raise NotFoundError("Creator not found")

    account_id = gateway.create_connected_account(
        creator_id=str(request.creator_id),
        email=request.email,
        country=request.country,
        business_type=request.business_type,
        phone=request.phone,
    )
    creator.stripe_account_id = account_id
    creator.stripe_account_status = AccountStatus.PENDING
    creator.stripe_onboarding_complete = False
    db.commit()
    logger.info(f"[CONNECT] Created Stripe account {account_id} for creator {request.creator_id}")

    onboarding_url = gateway.create_onboarding_link(
        account_id,
        refresh_url=f"{settings.FRONTEND_URL}/creator/stripe-refresh",
        return_url=f"{settings.FRONTEND_URL}/creator/stripe-success",
    )
    return ConnectAccountResponse(account_id=account_id, onboarding_url=onboarding_url)
