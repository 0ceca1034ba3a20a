import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_gateway
from app.core.errors import SettlementError
from app.db.session import get_db
from app.schemas.payments import PayoutRequest, PayoutResponse
from app.services import payouts
from app.services.gateway import StripeGateway

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/request", response_model=PayoutResponse)
def request_payout(
    payload: PayoutRequest,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_gateway),
):
    """Pay out the creator's pending balance (minimum $50) to their connected account."""
    try:
        amount = payouts.request_payout(db, gateway, payload.creator_id)
    except SettlementError:
        raise
    except Exception:
        logger.exception(f"[PAYOUT] Error requesting payout for {payload.creator_id}")
        return JSONResponse(status_code=500, content={"error": "Failed to request payout"})
    return PayoutResponse(success=True, amount=amount)
