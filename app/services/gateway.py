"""
Stripe adapter.

The only module that talks to the card processor. Every Stripe failure is
turned into a GatewayError carrying a generic, client-safe message; the
Stripe explanation is kept on `detail` for logging.
"""
import logging
from typing import Any, Dict, NamedTuple, Optional

import stripe

from app.core.config import settings
from app.core.errors import GatewayError, SignatureError

logger = logging.getLogger(__name__)

if settings.STRIPE_SECRET_KEY:
    stripe.api_key = settings.STRIPE_SECRET_KEY
stripe.max_network_retries = settings.STRIPE_MAX_NETWORK_RETRIES


class GatewayIntent(NamedTuple):
    id: str
    client_secret: str


class StripeGateway:
    """Create intents, connected accounts and transfers; verify webhooks."""

    def __init__(self, webhook_secret: Optional[str] = None, currency: Optional[str] = None):
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET
        self.currency = currency or settings.CURRENCY

    def create_payment_intent(
        self,
        amount: int,
        platform_fee: int,
        destination: str,
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> GatewayIntent:
        params: Dict[str, Any] = {
            "amount": amount,
            "currency": self.currency,
            "application_fee_amount": platform_fee,
            "transfer_data": {"destination": destination},
            "metadata": metadata,
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key
        try:
            intent = stripe.PaymentIntent.create(**params)
        except stripe.StripeError as e:
            raise GatewayError("Failed to create payment intent", detail=str(e)) from e
        return GatewayIntent(intent.id, intent.client_secret)

    def retrieve_payment_intent(self, intent_id: str) -> GatewayIntent:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id)
        except stripe.StripeError as e:
            raise GatewayError("Failed to create payment intent", detail=str(e)) from e
        return GatewayIntent(intent.id, intent.client_secret)

    def create_connected_account(
        self,
        creator_id: str,
        email: str,
        country: str,
        business_type: str,
        phone: Optional[str] = None,
    ) -> str:
        params: Dict[str, Any] = {
            "type": "express",
            "country": country or "US",
            "email": email,
            "capabilities": {
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            "business_type": business_type,
            "metadata": {"creatorId": creator_id},
        }
        if phone and business_type == "individual":
            params["individual"] = {"phone": phone}
        try:
            account = stripe.Account.create(**params)
        except stripe.StripeError as e:
            raise GatewayError("Failed to create Stripe account", detail=str(e)) from e
        return account.id

    def create_onboarding_link(self, account_id: str, refresh_url: str, return_url: str) -> str:
        try:
            link = stripe.AccountLink.create(
                account=account_id,
                refresh_url=refresh_url,
                return_url=return_url,
                type="account_onboarding",
            )
        except stripe.StripeError as e:
            raise GatewayError("Failed to create Stripe account", detail=str(e)) from e
        return link.url

    def create_transfer(
        self,
        amount: int,
        destination: str,
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> str:
        params: Dict[str, Any] = {
            "amount": amount,
            "currency": self.currency,
            "destination": destination,
            "metadata": metadata,
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key
        try:
            transfer = stripe.Transfer.create(**params)
        except stripe.StripeError as e:
            raise GatewayError("Failed to request payout", detail=str(e)) from e
        return transfer.id

    def construct_event(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        """
        Verify the Stripe-Signature header against the raw request bytes and
        return the event as a plain dict. The body must not be re-serialized
        before this call.
        """
        if not self.webhook_secret:
            logger.error("[WEBHOOK] STRIPE_WEBHOOK_SECRET is not configured; rejecting event")
            raise SignatureError("Invalid signature")
        if not sig_header:
            raise SignatureError("Invalid signature")
        try:
            event = stripe.Webhook.construct_event(
                payload,
                sig_header,
                self.webhook_secret,
                tolerance=settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"[WEBHOOK] Signature verification failed: {e}")
            raise SignatureError("Invalid signature") from e
        except ValueError as e:
            # Body is not valid JSON
            logger.warning(f"[WEBHOOK] Invalid payload: {e}")
            raise SignatureError("Invalid payload") from e

        event_dict = event.to_dict()
        if "id" not in event_dict or "type" not in event_dict:
            raise SignatureError("Invalid payload")
        return event_dict
