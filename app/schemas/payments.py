from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Literal, Optional
import uuid
from app.models.enums import PurchaseKind, SubscriptionTier


class CreatePaymentIntentRequest(BaseModel):
    type: PurchaseKind
    amount: int  # Base amount in cents
    creator_id: uuid.UUID = Field(alias="creatorId")
    user_id: uuid.UUID = Field(alias="userId")
    content_id: Optional[uuid.UUID] = Field(default=None, alias="contentId")
    subscription_tier: Optional[SubscriptionTier] = Field(default=SubscriptionTier.MONTHLY, alias="subscriptionTier")
    tip_message: Optional[str] = Field(default=None, alias="tipMessage")
    description: Optional[str] = None
    idempotency_key: Optional[str] = Field(default=None, alias="idempotencyKey")

    @field_validator("tip_message", "description", "idempotency_key", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """The web client sends empty strings for untouched inputs"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("subscription_tier", mode="before")
    @classmethod
    def default_tier(cls, v):
        """null or an empty tier prices as monthly"""
        if v is None or (isinstance(v, str) and not v.strip()):
            return SubscriptionTier.MONTHLY
        return v

    class Config:
        populate_by_name = True


class CreatePaymentIntentResponse(BaseModel):
    client_secret: str
    amount: int  # Final amount in cents
    platform_fee: int  # cents


class ConfirmPaymentRequest(BaseModel):
    payment_intent_id: str = Field(alias="paymentIntentId", min_length=1)
    type: PurchaseKind
    amount: int  # Final amount in cents, as returned by create-intent
    creator_id: uuid.UUID = Field(alias="creatorId")
    user_id: uuid.UUID = Field(alias="userId")
    content_id: Optional[uuid.UUID] = Field(default=None, alias="contentId")
    tip_message: Optional[str] = Field(default=None, alias="tipMessage")

    class Config:
        populate_by_name = True


class SuccessResponse(BaseModel):
    success: bool = True


class PayoutRequest(BaseModel):
    creator_id: uuid.UUID = Field(alias="creatorId")

    class Config:
        populate_by_name = True


class PayoutResponse(BaseModel):
    success: bool = True
    amount: int  # cents


class EarningsSnapshot(BaseModel):
    total_earnings: int
    monthly_earnings: int
    pending_payout: int
    last_payout: int
    last_payout_date: Optional[datetime] = None
    next_payout_date: datetime
    payout_method: Optional[str] = None


class ConnectAccountRequest(BaseModel):
    creator_id: uuid.UUID = Field(alias="creatorId")
    business_type: Literal["individual", "company"] = Field(default="individual", alias="businessType")
    country: str = "US"
    email: str
    phone: Optional[str] = None

    class Config:
        populate_by_name = True


class ConnectAccountResponse(BaseModel):
    account_id: str = Field(alias="accountId")
    onboarding_url: str = Field(alias="onboardingUrl")

    class Config:
        populate_by_name = True
