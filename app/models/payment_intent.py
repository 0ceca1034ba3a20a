from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Text, Uuid
from datetime import datetime
from app.db.session import Base
from app.models.enums import PaymentStatus, PurchaseKind, SubscriptionTier, enum_column_type


class PaymentIntent(Base):
    """
    One attempted charge, keyed by the Stripe payment_intent id (pi_...).

    Written by two independent paths (POST /payments/confirm and the Stripe
    webhook). Never deleted.
    """
    __tablename__ = "payment_intents"

    id = Column(String, primary_key=True)  # Stripe payment_intent id
    user_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)  # payer
    creator_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)  # payee
    amount = Column(Integer, nullable=False)  # final amount in cents
    platform_fee = Column(Integer, nullable=False)  # cents
    type = Column(enum_column_type(PurchaseKind), nullable=False)
    status = Column(enum_column_type(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True)
    content_id = Column(Uuid, nullable=True)  # post or message id for PPV
    subscription_tier = Column(enum_column_type(SubscriptionTier), nullable=True)
    tip_message = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    idempotency_key = Column(String, nullable=True, unique=True)  # client-supplied retry token
    fulfilled_at = Column(DateTime, nullable=True)  # set once, when the ledger mutation is applied
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
