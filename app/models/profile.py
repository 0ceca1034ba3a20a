from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from app.db.session import Base
from app.models.enums import AccountStatus, enum_column_type


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False, unique=True, index=True)
    display_name = Column(String, nullable=False)
    is_creator = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    creator_profile = relationship("CreatorProfile", back_populates="user", uselist=False)


class CreatorProfile(Base):
    """
    Creator settings plus the running ledger summary.

    total_earnings / total_subscribers are only ever changed with atomic
    in-database increments (see app.services.ledger.credit_creator).
    """
    __tablename__ = "creator_profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, unique=True, index=True)
    subscription_price = Column(Integer, default=0, nullable=False)  # cents per month

    # Ledger summary (cents)
    total_earnings = Column(Integer, default=0, nullable=False)
    total_subscribers = Column(Integer, default=0, nullable=False)
    total_posts = Column(Integer, default=0, nullable=False)

    welcome_message = Column(Text, nullable=True)  # Sent to new subscribers when set

    # Stripe Connect
    stripe_account_id = Column(String, nullable=True, index=True)
    stripe_account_status = Column(enum_column_type(AccountStatus), default=AccountStatus.PENDING, nullable=False)
    stripe_onboarding_complete = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("Profile", back_populates="creator_profile")
