from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Text, Uuid
import uuid
from datetime import datetime
from app.db.session import Base


class Tip(Base):
    """Immutable record of a one-time tip."""
    __tablename__ = "tips"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tipper_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    creator_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # cents
    message = Column(Text, nullable=True)
    payment_intent_id = Column(String, ForeignKey("payment_intents.id"), nullable=True, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
