from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Uuid
import uuid
from datetime import datetime
from app.db.session import Base
from app.models.enums import PayoutStatus, enum_column_type


class CreatorPayout(Base):
    __tablename__ = "creator_payouts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # cents
    status = Column(enum_column_type(PayoutStatus), default=PayoutStatus.PENDING, nullable=False, index=True)
    stripe_transfer_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
