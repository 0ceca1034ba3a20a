import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.subscription import SubscriptionResponse
from app.services import subscriptions

router = APIRouter()


@router.get("/users/{user_id}", response_model=List[SubscriptionResponse])
def list_user_subscriptions(user_id: uuid.UUID, db: Session = Depends(get_db)):
    return subscriptions.list_subscriptions(db, user_id)


@router.post("/{subscription_id}/cancel", response_model=SubscriptionResponse)
def cancel_subscription(subscription_id: uuid.UUID, db: Session = Depends(get_db)):
    return subscriptions.cancel_subscription(db, subscription_id)


@router.post("/{subscription_id}/reactivate", response_model=SubscriptionResponse)
def reactivate_subscription(subscription_id: uuid.UUID, db: Session = Depends(get_db)):
    return subscriptions.reactivate_subscription(db, subscription_id)
