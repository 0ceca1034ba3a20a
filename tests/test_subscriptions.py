"""Subscription listing, cancel and reactivate"""
from datetime import datetime, timedelta

from app.models import SubscriptionStatus, SubscriptionTier, UserSubscription

from fakes import creator_profile, make_creator, make_user


def make_subscription(db, subscriber, creator, status=SubscriptionStatus.ACTIVE, expires_in=timedelta(days=20)):
    now = datetime.utcnow()
    subscription = UserSubscription(
        subscriber_id=subscriber.id,
        creator_id=creator.id,
        amount_paid=999,
        status=status,
        billing_cycle=SubscriptionTier.MONTHLY,
        start_date=now - timedelta(days=10),
        expires_at=now + expires_in,
        auto_renew=status == SubscriptionStatus.ACTIVE,
    )
    db.add(subscription)
    db.commit()
    return subscription


def test_cancel_active_subscription(client, db):
    fan, creator = make_user(db), make_creator(db, total_earnings=999)
    subscription = make_subscription(db, fan, creator)

    response = client.post(f"/subscriptions/{subscription.id}/cancel")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cancelled"
    assert data["auto_renew"] is False
    assert creator_profile(db, creator.id).total_earnings == 999


def test_cancel_twice_is_noop(client, db):
    fan, creator = make_user(db), make_creator(db)
    subscription = make_subscription(db, fan, creator)

    client.post(f"/subscriptions/{subscription.id}/cancel")
    response = client.post(f"/subscriptions/{subscription.id}/cancel")

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"


def test_cancel_lapsed_subscription_fails(client, db):
    fan, creator = make_user(db), make_creator(db)
    subscription = make_subscription(db, fan, creator, expires_in=timedelta(days=-1))

    response = client.post(f"/subscriptions/{subscription.id}/cancel")

    assert response.status_code == 400
    assert response.json() == {"error": "Only active subscriptions can be cancelled (status: expired)"}
    db.expire_all()
    assert db.query(UserSubscription).one().status == SubscriptionStatus.EXPIRED


def test_cancel_unknown_subscription(client, db):
    response = client.post("/subscriptions/00000000-0000-0000-0000-000000000000/cancel")
    assert response.status_code == 404
    assert response.json() == {"error": "Subscription not found"}


def test_reactivate_cancelled_subscription(client, db):
    fan, creator = make_user(db), make_creator(db)
    subscription = make_subscription(db, fan, creator, status=SubscriptionStatus.CANCELLED)

    response = client.post(f"/subscriptions/{subscription.id}/reactivate")

    assert response.status_code == 200
    assert response.json()["status"] == "active"
    assert response.json()["auto_renew"] is True


def test_reactivate_after_period_ended(client, db):
    fan, creator = make_user(db), make_creator(db)
    subscription = make_subscription(
        db, fan, creator, status=SubscriptionStatus.CANCELLED, expires_in=timedelta(hours=-1),
    )

    response = client.post(f"/subscriptions/{subscription.id}/reactivate")

    assert response.status_code == 400
    db.expire_all()
    assert db.query(UserSubscription).one().status == SubscriptionStatus.CANCELLED


def test_reactivate_when_another_is_active(client, db):
    fan, creator = make_user(db), make_creator(db)
    cancelled = make_subscription(db, fan, creator, status=SubscriptionStatus.CANCELLED)
    make_subscription(db, fan, creator)

    response = client.post(f"/subscriptions/{cancelled.id}/reactivate")

    assert response.status_code == 409
    assert response.json() == {"error": "Active subscription already exists"}


def test_reactivate_expired_subscription_fails(client, db):
    fan, creator = make_user(db), make_creator(db)
    subscription = make_subscription(db, fan, creator, status=SubscriptionStatus.EXPIRED)

    response = client.post(f"/subscriptions/{subscription.id}/reactivate")

    assert response.status_code == 400


def test_list_expires_lapsed_subscriptions(client, db):
    fan = make_user(db)
    current, lapsed = make_creator(db), make_creator(db)
    make_subscription(db, fan, current)
    make_subscription(db, fan, lapsed, expires_in=timedelta(minutes=-5))

    response = client.get(f"/subscriptions/users/{fan.id}")

    assert response.status_code == 200
    statuses = {item["creator_id"]: item["status"] for item in response.json()}
    assert statuses == {str(current.id): "active", str(lapsed.id): "expired"}


def test_list_only_returns_own_subscriptions(client, db):
    fan, other, creator = make_user(db), make_user(db), make_creator(db)
    make_subscription(db, other, creator)

    response = client.get(f"/subscriptions/users/{fan.id}")

    assert response.status_code == 200
    assert response.json() == []
