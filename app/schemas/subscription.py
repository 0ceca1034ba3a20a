from pydantic import BaseModel
from datetime import datetime
import uuid
from app.models.enums import SubscriptionStatus, SubscriptionTier


class SubscriptionResponse(BaseModel):
    id: uuid.UUID
    subscriber_id: uuid.UUID
    creator_id: uuid.UUID
    amount_paid: int  # cents
    status: SubscriptionStatus
    billing_cycle: SubscriptionTier
    start_date: datetime
    expires_at: datetime
    auto_renew: bool

    class Config:
        from_attributes = True
