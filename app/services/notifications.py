"""
Best-effort side channels that follow a committed payment.

These run as background tasks after the financial transaction commits and
use their own session. A failure here is logged and never touches the
payment that triggered it.
"""
import logging
from typing import Callable, NamedTuple, Optional
import uuid

from sqlalchemy.orm import Session, sessionmaker

from app.models.content import Message
from app.models.profile import CreatorProfile

logger = logging.getLogger(__name__)


class SideEffect(NamedTuple):
    """A deferred call: func(session_factory, *args)."""
    func: Callable
    args: tuple


def format_tip_notification(amount: int, message: Optional[str] = None) -> str:
    text = f"You received a ${amount / 100:.2f} tip!"
    if message:
        text += f' Message: "{message}"'
    return text


def send_welcome_message(session_factory: sessionmaker, creator_id: uuid.UUID, subscriber_id: uuid.UUID):
    """Send the creator's configured welcome message to a new subscriber, if any."""
    db: Session = session_factory()
    try:
        creator = db.query(CreatorProfile).filter(CreatorProfile.user_id == creator_id).first()
        if not creator or not creator.welcome_message:
            return
        db.add(Message(
            sender_id=creator_id,
            recipient_id=subscriber_id,
            content=creator.welcome_message,
            is_ppv=False,
            is_read=False,
        ))
        db.commit()
        logger.info(f"[NOTIFY] Welcome message sent from creator {creator_id} to {subscriber_id}")
    except Exception:
        db.rollback()
        logger.warning(f"[NOTIFY] Failed to send welcome message to {subscriber_id}", exc_info=True)
    finally:
        db.close()


def send_tip_notification(
    session_factory: sessionmaker,
    tipper_id: uuid.UUID,
    creator_id: uuid.UUID,
    amount: int,
    message: Optional[str] = None,
):
    db: Session = session_factory()
    try:
        db.add(Message(
            sender_id=tipper_id,
            recipient_id=creator_id,
            content=format_tip_notification(amount, message),
            is_ppv=False,
            is_read=False,
        ))
        db.commit()
        logger.info(f"[NOTIFY] Tip notification sent to creator {creator_id}")
    except Exception:
        db.rollback()
        logger.warning(f"[NOTIFY] Failed to send tip notification to {creator_id}", exc_info=True)
    finally:
        db.close()
