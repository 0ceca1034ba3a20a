"""Stripe webhook verification and reconciliation"""
import time

from app.models import (
    AccountStatus, CreatorPayout, Message, PaymentIntent, PaymentStatus, PayoutStatus, StripeEvent, Tip,
)
from app.services import ledger, reconciler

from fakes import creator_profile, make_creator, make_event, make_user, sign_payload


def deliver(client, event_type, obj, event_id=None, signature=None):
    payload = make_event(event_type, obj, event_id)
    headers = {
        "content-type": "application/json",
        "stripe-signature": signature if signature is not None else sign_payload(payload),
    }
    return client.post("/webhooks/stripe", content=payload, headers=headers)


def open_tip_intent(client, creator, fan, amount=500, tip_message=None):
    response = client.post("/payments/create-intent", json={
        "type": "tip",
        "amount": amount,
        "creatorId": str(creator.id),
        "userId": str(fan.id),
        "tipMessage": tip_message,
    })
    assert response.status_code == 200
    return response.json()["client_secret"].split("_secret_")[0]


def confirm_tip(client, intent_id, creator, fan, amount=500):
    return client.post("/payments/confirm", json={
        "paymentIntentId": intent_id,
        "type": "tip",
        "amount": amount,
        "creatorId": str(creator.id),
        "userId": str(fan.id),
    })


# --- signature ----------------------------------------------------------------

def test_missing_signature_is_rejected(client, db):
    payload = make_event("payment_intent.succeeded", {"id": "pi_x"})
    response = client.post("/webhooks/stripe", content=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid signature"}
    assert db.query(StripeEvent).count() == 0


def test_tampered_payload_is_rejected(client, db):
    creator, fan = make_creator(db), make_user(db)
    intent_id = open_tip_intent(client, creator, fan)

    original = make_event("payment_intent.succeeded", {"id": "pi_other"}, event_id="evt_1")
    tampered = make_event("payment_intent.succeeded", {"id": intent_id}, event_id="evt_1")
    response = client.post(
        "/webhooks/stripe",
        content=tampered,
        headers={"stripe-signature": sign_payload(original)},
    )

    assert response.status_code == 400
    assert db.query(StripeEvent).count() == 0
    db.expire_all()
    assert ledger.get_intent(db, intent_id).status == PaymentStatus.PENDING


def test_wrong_secret_is_rejected(client, db):
    payload = make_event("account.updated", {"id": "acct_creator"})
    response = client.post(
        "/webhooks/stripe",
        content=payload,
        headers={"stripe-signature": sign_payload(payload, secret="whsec_someone_else")},
    )
    assert response.status_code == 400


def test_signed_non_json_body_is_rejected(client, db):
    payload = b"not json"
    response = client.post("/webhooks/stripe", content=payload, headers={"stripe-signature": sign_payload(payload)})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid payload"}
    assert db.query(StripeEvent).count() == 0


def test_verified_event_payload_is_stored_as_plain_json(client, db):
    creator = make_creator(db)
    account = {"id": "acct_creator", "charges_enabled": True, "payouts_enabled": True,
               "metadata": {"creatorId": str(creator.id)}}

    response = deliver(client, "account.updated", account, event_id="evt_stored")

    assert response.status_code == 200
    record = db.query(StripeEvent).one()
    assert record.payload["id"] == "evt_stored"
    assert record.payload["data"]["object"]["metadata"] == {"creatorId": str(creator.id)}


def test_stale_timestamp_is_rejected(client, db):
    payload = make_event("account.updated", {"id": "acct_creator"})
    stale = sign_payload(payload, timestamp=int(time.time()) - 3600)
    response = client.post("/webhooks/stripe", content=payload, headers={"stripe-signature": stale})
    assert response.status_code == 400


# --- payment intents -------------------------------------------------------------

def test_succeeded_event_fulfills_unconfirmed_intent(client, db):
    creator, fan = make_creator(db), make_user(db)
    intent_id = open_tip_intent(client, creator, fan, amount=800, tip_message="from the webhook")

    response = deliver(client, "payment_intent.succeeded", {"id": intent_id, "status": "succeeded"})

    assert response.status_code == 200
    assert response.json() == {"received": True, "duplicate": False}
    db.expire_all()
    assert ledger.get_intent(db, intent_id).status == PaymentStatus.SUCCEEDED
    assert db.query(Tip).one().message == "from the webhook"
    assert creator_profile(db, creator.id).total_earnings == 800
    assert db.query(Message).filter(Message.recipient_id == creator.id).count() == 1

    # The client's confirm arriving afterwards changes nothing
    assert confirm_tip(client, intent_id, creator, fan, amount=800).status_code == 200
    db.expire_all()
    assert db.query(Tip).count() == 1
    assert creator_profile(db, creator.id).total_earnings == 800


def test_failed_event_after_confirm_keeps_succeeded(client, db):
    creator, fan = make_creator(db), make_user(db)
    intent_id = open_tip_intent(client, creator, fan)
    assert confirm_tip(client, intent_id, creator, fan).status_code == 200

    response = deliver(client, "payment_intent.payment_failed", {"id": intent_id})

    assert response.status_code == 200
    db.expire_all()
    assert ledger.get_intent(db, intent_id).status == PaymentStatus.SUCCEEDED
    assert creator_profile(db, creator.id).total_earnings == 500


def test_failed_then_succeeded_ends_succeeded(client, db):
    creator, fan = make_creator(db), make_user(db)
    intent_id = open_tip_intent(client, creator, fan)

    deliver(client, "payment_intent.payment_failed", {"id": intent_id})
    db.expire_all()
    assert ledger.get_intent(db, intent_id).status == PaymentStatus.FAILED

    deliver(client, "payment_intent.succeeded", {"id": intent_id})
    db.expire_all()
    intent = ledger.get_intent(db, intent_id)
    assert intent.status == PaymentStatus.SUCCEEDED
    assert intent.fulfilled_at is not None
    assert creator_profile(db, creator.id).total_earnings == 500


def test_duplicate_event_is_applied_once(client, db):
    creator, fan = make_creator(db), make_user(db)
    intent_id = open_tip_intent(client, creator, fan)

    first = deliver(client, "payment_intent.succeeded", {"id": intent_id}, event_id="evt_dup")
    second = deliver(client, "payment_intent.succeeded", {"id": intent_id}, event_id="evt_dup")

    assert first.json()["duplicate"] is False
    assert second.status_code == 200
    assert second.json()["duplicate"] is True
    assert db.query(StripeEvent).count() == 1
    assert creator_profile(db, creator.id).total_earnings == 500


def test_succeeded_event_for_unknown_intent(client, db):
    response = deliver(client, "payment_intent.succeeded", {"id": "pi_never_seen"})

    assert response.status_code == 200
    assert db.query(PaymentIntent).count() == 0
    assert db.query(StripeEvent).one().processed is True


def test_unhandled_event_type_is_recorded(client, db):
    response = deliver(client, "customer.created", {"id": "cus_1"}, event_id="evt_customer")

    assert response.status_code == 200
    event = db.query(StripeEvent).one()
    assert (event.stripe_event_id, event.type, event.processed) == ("evt_customer", "customer.created", True)


def test_processing_error_is_retried_on_redelivery(client, db, monkeypatch):
    creator = make_creator(db)

    def broken(db, account):
        raise RuntimeError("database went away")

    monkeypatch.setattr(reconciler, "_process_account_updated", broken)
    account = {"id": "acct_creator", "charges_enabled": True, "payouts_enabled": True}
    response = deliver(client, "account.updated", account, event_id="evt_retry")

    assert response.status_code == 500
    assert response.json() == {"error": "Webhook processing failed"}
    db.expire_all()
    assert db.query(StripeEvent).one().processed is False

    monkeypatch.undo()
    response = deliver(client, "account.updated", account, event_id="evt_retry")

    assert response.status_code == 200
    assert response.json()["duplicate"] is False
    db.expire_all()
    assert db.query(StripeEvent).one().processed is True
    assert creator_profile(db, creator.id).stripe_account_status == AccountStatus.VERIFIED


# --- connected accounts ------------------------------------------------------------

def test_account_updated_marks_creator_verified(client, db):
    creator = make_creator(db)

    deliver(client, "account.updated", {
        "id": "acct_creator",
        "charges_enabled": True,
        "payouts_enabled": True,
        "metadata": {"creatorId": str(creator.id)},
    })

    profile = creator_profile(db, creator.id)
    assert profile.stripe_account_status == AccountStatus.VERIFIED
    assert profile.stripe_onboarding_complete is True


def test_account_updated_with_payouts_disabled_stays_pending(client, db):
    creator = make_creator(db)

    deliver(client, "account.updated", {"id": "acct_creator", "charges_enabled": True, "payouts_enabled": False})

    profile = creator_profile(db, creator.id)
    assert profile.stripe_account_status == AccountStatus.PENDING
    assert profile.stripe_onboarding_complete is False


# --- transfers -------------------------------------------------------------------------

def _paid_out_creator(client, db, earnings=7000):
    creator = make_creator(db, total_earnings=earnings)
    assert client.post("/payouts/request", json={"creatorId": str(creator.id)}).status_code == 200
    db.expire_all()
    return creator, db.query(CreatorPayout).one()


def test_transfer_created_completes_payout(client, db):
    creator, payout = _paid_out_creator(client, db)

    deliver(client, "transfer.created", {"id": payout.stripe_transfer_id, "amount": payout.amount})

    db.expire_all()
    assert db.query(CreatorPayout).one().status == PayoutStatus.COMPLETED


def test_transfer_matched_by_payout_metadata(client, db):
    creator, payout = _paid_out_creator(client, db)

    deliver(client, "transfer.created", {"id": "tr_unrecorded", "metadata": {"payoutId": str(payout.id)}})

    db.expire_all()
    assert db.query(CreatorPayout).one().status == PayoutStatus.COMPLETED


def test_transfer_reversed_makes_balance_payable_again(client, db):
    creator, payout = _paid_out_creator(client, db)
    deliver(client, "transfer.created", {"id": payout.stripe_transfer_id})

    deliver(client, "transfer.reversed", {"id": payout.stripe_transfer_id})

    db.expire_all()
    assert db.query(CreatorPayout).one().status == PayoutStatus.FAILED
    earnings = client.get(f"/creators/{creator.id}/earnings").json()
    assert earnings["pending_payout"] == 7000
