from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, Uuid, Index, text
import uuid
from datetime import datetime
from app.db.session import Base
from app.models.enums import SubscriptionStatus, SubscriptionTier, enum_column_type


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"
    __table_args__ = (
        # At most one active subscription per (subscriber, creator)
        Index(
            "uq_user_subscriptions_active_pair",
            "subscriber_id",
            "creator_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    subscriber_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    creator_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    amount_paid = Column(Integer, nullable=False)  # cents
    status = Column(enum_column_type(SubscriptionStatus), default=SubscriptionStatus.PENDING, nullable=False)
    billing_cycle = Column(enum_column_type(SubscriptionTier), default=SubscriptionTier.MONTHLY, nullable=False)
    start_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    auto_renew = Column(Boolean, default=True, nullable=False)
    payment_intent_id = Column(String, ForeignKey("payment_intents.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def is_lapsed(self, now: datetime = None) -> bool:
        return self.expires_at <= (now or datetime.utcnow())
