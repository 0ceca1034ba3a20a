from sqlalchemy import Column, String, DateTime, JSON, Boolean, Uuid
import uuid
from datetime import datetime
from app.db.session import Base


class StripeEvent(Base):
    """Delivery log for Stripe webhook events (dedup by stripe_event_id)."""
    __tablename__ = "stripe_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    stripe_event_id = Column(String, nullable=False, unique=True, index=True)
    type = Column(String, nullable=False, index=True)  # payment_intent.succeeded, transfer.created, etc.
    payload = Column(JSON, nullable=False)  # Full event payload from Stripe
    processed = Column(Boolean, default=False, nullable=False, index=True)
    received_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    processed_at = Column(DateTime, nullable=True)
