from app.schemas.payments import (
    CreatePaymentIntentRequest, CreatePaymentIntentResponse, ConfirmPaymentRequest, SuccessResponse,
    PayoutRequest, PayoutResponse, EarningsSnapshot, ConnectAccountRequest, ConnectAccountResponse,
)
from app.schemas.subscription import SubscriptionResponse

__all__ = [
    "CreatePaymentIntentRequest", "CreatePaymentIntentResponse", "ConfirmPaymentRequest", "SuccessResponse",
    "PayoutRequest", "PayoutResponse", "EarningsSnapshot", "ConnectAccountRequest", "ConnectAccountResponse",
    "SubscriptionResponse",
]
