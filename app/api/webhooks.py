"""
Stripe webhook handler.
Verifies webhook signatures against the raw body, then reconciles the
ledger with the event.
"""
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from app.api.deps import get_gateway, schedule_side_effects
from app.db.session import get_db, get_session_factory
from app.services import reconciler
from app.services.gateway import StripeGateway

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
    session_factory: sessionmaker = Depends(get_session_factory),
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
):
    """
    Handle Stripe webhook events.

    - Verifies the signature over the exact request bytes (400, no mutation, on failure)
    - Records the event for deduplication
    - Applies it to payment intents, creator accounts and payouts
    - Answers 500 when processing fails so Stripe redelivers
    """
    # Raw body: re-serialized JSON would not match the signature
    body = await request.body()
    event = gateway.construct_event(body, stripe_signature)

    logger.info(f"[WEBHOOK] Received {event['type']} ({event['id']})")
    try:
        result = reconciler.handle_event(db, event)
    except Exception:
        return JSONResponse(status_code=500, content={"error": "Webhook processing failed"})

    schedule_side_effects(background_tasks, session_factory, result.side_effects)
    return {"received": True, "duplicate": result.duplicate}
