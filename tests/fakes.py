"""In-process stand-ins for Stripe and small data builders used by the tests."""
import hashlib
import hmac
import json
import time
import uuid
from typing import Dict, Optional

from app.core.errors import GatewayError
from app.models import CreatorProfile, Message, Post, Profile
from app.services.gateway import GatewayIntent, StripeGateway

WEBHOOK_SECRET = "whsec_test_secret"


class FakeGateway(StripeGateway):
    """
    Records calls instead of hitting Stripe. Webhook verification is the
    real implementation, so events must be signed with sign_payload().
    """

    def __init__(self):
        super().__init__(webhook_secret=WEBHOOK_SECRET, currency="usd")
        self.intents: Dict[str, dict] = {}
        self.transfers = []
        self.accounts = []
        self.fail_next_call = False
        self._intents_by_key: Dict[str, GatewayIntent] = {}

    def _maybe_fail(self, message):
        if self.fail_next_call:
            self.fail_next_call = False
            raise GatewayError(message, detail="card_declined: Your card was declined.")

    def create_payment_intent(self, amount, platform_fee, destination, metadata, idempotency_key=None):
        self._maybe_fail("Failed to create payment intent")
        if idempotency_key and idempotency_key in self._intents_by_key:
            return self._intents_by_key[idempotency_key]
        intent_id = f"pi_test_{len(self.intents) + 1}"
        intent = GatewayIntent(intent_id, f"{intent_id}_secret_abc")
        self.intents[intent_id] = {
            "amount": amount,
            "application_fee_amount": platform_fee,
            "destination": destination,
            "metadata": metadata,
            "client_secret": intent.client_secret,
        }
        if idempotency_key:
            self._intents_by_key[idempotency_key] = intent
        return intent

    def retrieve_payment_intent(self, intent_id):
        return GatewayIntent(intent_id, self.intents[intent_id]["client_secret"])

    def create_connected_account(self, creator_id, email, country, business_type, phone=None):
        self._maybe_fail("Failed to create Stripe account")
        account_id = f"acct_test_{len(self.accounts) + 1}"
        self.accounts.append({
            "id": account_id,
            "creator_id": creator_id,
            "email": email,
            "country": country,
            "business_type": business_type,
        })
        return account_id

    def create_onboarding_link(self, account_id, refresh_url, return_url):
        return f"https://connect.stripe.test/setup/{account_id}?return={return_url}"

    def create_transfer(self, amount, destination, metadata, idempotency_key=None):
        self._maybe_fail("Failed to request payout")
        transfer_id = f"tr_test_{len(self.transfers) + 1}"
        self.transfers.append({
            "id": transfer_id,
            "amount": amount,
            "destination": destination,
            "metadata": metadata,
            "idempotency_key": idempotency_key,
        })
        return transfer_id


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header for payload."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def make_event(event_type: str, obj: dict, event_id: Optional[str] = None) -> bytes:
    event = {
        "id": event_id or f"evt_{uuid.uuid4().hex[:16]}",
        "object": "event",
        "type": event_type,
        "data": {"object": obj},
    }
    return json.dumps(event).encode("utf-8")


def make_user(db, name: Optional[str] = None) -> Profile:
    name = name or f"user_{uuid.uuid4().hex[:8]}"
    user = Profile(username=name, email=f"{name}@example.com", display_name=name.title())
    db.add(user)
    db.commit()
    return user


def make_creator(db, stripe_account_id: Optional[str] = "acct_creator", welcome_message: Optional[str] = None,
                 total_earnings: int = 0) -> Profile:
    user = make_user(db, f"creator_{uuid.uuid4().hex[:8]}")
    user.is_creator = True
    db.add(CreatorProfile(
        user_id=user.id,
        subscription_price=999,
        stripe_account_id=stripe_account_id,
        welcome_message=welcome_message,
        total_earnings=total_earnings,
    ))
    db.commit()
    return user


def make_post(db, creator_id, is_ppv: bool = True, ppv_price: Optional[int] = None) -> Post:
    post = Post(creator_id=creator_id, title="Behind the scenes", is_ppv=is_ppv, ppv_price=ppv_price, is_published=True)
    db.add(post)
    db.commit()
    return post


def make_ppv_message(db, sender_id, recipient_id, ppv_price: Optional[int] = None) -> Message:
    message = Message(sender_id=sender_id, recipient_id=recipient_id, content="Exclusive", is_ppv=True, ppv_price=ppv_price)
    db.add(message)
    db.commit()
    return message


def creator_profile(db, creator_id) -> CreatorProfile:
    db.expire_all()
    return db.query(CreatorProfile).filter(CreatorProfile.user_id == creator_id).one()
