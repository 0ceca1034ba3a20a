from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Uuid, UniqueConstraint
import uuid
from datetime import datetime
from app.db.session import Base


class PPVPurchase(Base):
    """Permanent access grant to one pay-per-view post or message."""
    __tablename__ = "ppv_purchases"
    __table_args__ = (
        UniqueConstraint("buyer_id", "post_id", name="uq_ppv_purchases_buyer_post"),
        UniqueConstraint("buyer_id", "message_id", name="uq_ppv_purchases_buyer_message"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    buyer_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    seller_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    post_id = Column(Uuid, ForeignKey("posts.id"), nullable=True)
    message_id = Column(Uuid, ForeignKey("messages.id"), nullable=True)
    amount = Column(Integer, nullable=False)  # cents
    payment_intent_id = Column(String, ForeignKey("payment_intents.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
