"""
Purchase flow: create a Stripe payment intent, then confirm it.
"""
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from app.api.deps import get_gateway, schedule_side_effects
from app.core.errors import SettlementError
from app.db.session import get_db, get_session_factory
from app.schemas.payments import (
    ConfirmPaymentRequest,
    CreatePaymentIntentRequest,
    CreatePaymentIntentResponse,
    SuccessResponse,
)
from app.services import settlement
from app.services.gateway import StripeGateway

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-intent", response_model=CreatePaymentIntentResponse)
def create_payment_intent(
    payload: CreatePaymentIntentRequest,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
):
    """
    Price the purchase (tier discount + platform fee) and open a Stripe
    payment intent. The client completes the card step with client_secret.

    An Idempotency-Key header (or idempotencyKey body field) makes retries
    return the original intent instead of creating a new charge.
    """
    if idempotency_key and not payload.idempotency_key:
        payload.idempotency_key = idempotency_key
    try:
        return settlement.create_payment_intent(db, gateway, payload)
    except SettlementError:
        raise
    except Exception:
        logger.exception("[PAYMENT] Error creating payment intent")
        return JSONResponse(status_code=500, content={"error": "Failed to create payment intent"})


@router.post("/confirm", response_model=SuccessResponse)
def confirm_payment(
    payload: ConfirmPaymentRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Record a successful payment and apply it to the ledger
    (subscription, tip, PPV access or live stream). Repeating the call for
    the same paymentIntentId is a no-op.
    """
    try:
        effects = settlement.confirm_payment(db, payload)
    except SettlementError:
        raise
    except Exception:
        logger.exception(f"[PAYMENT] Error confirming payment {payload.payment_intent_id}")
        return JSONResponse(status_code=500, content={"error": "Failed to confirm payment"})

    schedule_side_effects(background_tasks, session_factory, effects)
    return SuccessResponse(success=True)
