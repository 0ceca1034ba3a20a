import logging
import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.errors import SettlementError
from app.db.session import get_db
from app.schemas.payments import EarningsSnapshot
from app.services import payouts

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{creator_id}/earnings", response_model=EarningsSnapshot)
def get_creator_earnings(creator_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        return payouts.get_creator_earnings(db, creator_id)
    except SettlementError:
        raise
    except Exception:
        logger.exception(f"[EARNINGS] Error getting earnings for {creator_id}")
        return JSONResponse(status_code=500, content={"error": "Failed to get earnings"})
