from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, Text, Uuid
import uuid
from datetime import datetime
from app.db.session import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    is_premium = Column(Boolean, default=False, nullable=False)
    is_ppv = Column(Boolean, default=False, nullable=False)
    ppv_price = Column(Integer, nullable=True)  # cents
    is_published = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Message(Base):
    """
    Direct message. PPV messages carry a price; welcome messages and tip
    notifications are written here too.
    """
    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sender_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    recipient_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    content = Column(Text, nullable=True)
    is_ppv = Column(Boolean, default=False, nullable=False)
    ppv_price = Column(Integer, nullable=True)  # cents
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
