"""
Stripe Connect onboarding for creators.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_gateway
from app.core.errors import SettlementError
from app.db.session import get_db
from app.schemas.payments import ConnectAccountRequest, ConnectAccountResponse
from app.services import payouts
from app.services.gateway import StripeGateway

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/connect", response_model=ConnectAccountResponse)
def create_connect_account(
    payload: ConnectAccountRequest,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
):
    """Create an Express account for the creator and return its onboarding link."""
    try:
        return payouts.create_connect_account(db, gateway, payload)
    except SettlementError:
        raise
    except Exception:
        logger.exception(f"[CONNECT] Error creating Stripe account for {payload.creator_id}")
        return JSONResponse(status_code=500, content={"error": "Failed to create Stripe account"})
