"""Initial schema: profiles, content and the payment ledger

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Profiles
    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(), nullable=False, unique=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('display_name', sa.String(), nullable=False),
        sa.Column('is_creator', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'])

    # Creator profiles + ledger summary (cents)
    op.create_table(
        'creator_profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column('subscription_price', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_earnings', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_subscribers', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_posts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('welcome_message', sa.Text(), nullable=True),
        sa.Column('stripe_account_id', sa.String(), nullable=True),
        sa.Column('stripe_account_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('stripe_onboarding_complete', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ),
    )
    op.create_index('ix_creator_profiles_user_id', 'creator_profiles', ['user_id'])
    op.create_index('ix_creator_profiles_stripe_account_id', 'creator_profiles', ['stripe_account_id'])

    # Posts
    op.create_table(
        'posts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_premium', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_ppv', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('ppv_price', sa.Integer(), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['creator_id'], ['profiles.id'], ),
    )
    op.create_index('ix_posts_creator_id', 'posts', ['creator_id'])

    # Messages
    op.create_table(
        'messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('sender_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('recipient_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('is_ppv', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('ppv_price', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['sender_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['recipient_id'], ['profiles.id'], ),
    )
    op.create_index('ix_messages_sender_id', 'messages', ['sender_id'])
    op.create_index('ix_messages_recipient_id', 'messages', ['recipient_id'])
    op.create_index('ix_messages_created_at', 'messages', ['created_at'])

    # Payment intents (keyed by Stripe id)
    op.create_table(
        'payment_intents',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('platform_fee', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('content_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('subscription_tier', sa.String(20), nullable=True),
        sa.Column('tip_message', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('idempotency_key', sa.String(), nullable=True, unique=True),
        sa.Column('fulfilled_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['creator_id'], ['profiles.id'], ),
    )
    op.create_index('ix_payment_intents_user_id', 'payment_intents', ['user_id'])
    op.create_index('ix_payment_intents_creator_id', 'payment_intents', ['creator_id'])
    op.create_index('ix_payment_intents_status', 'payment_intents', ['status'])
    op.create_index('ix_payment_intents_created_at', 'payment_intents', ['created_at'])

    # Subscriptions
    op.create_table(
        'user_subscriptions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('subscriber_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('amount_paid', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('billing_cycle', sa.String(20), nullable=False, server_default='monthly'),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('auto_renew', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('payment_intent_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['subscriber_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['creator_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['payment_intent_id'], ['payment_intents.id'], ),
    )
    op.create_index('ix_user_subscriptions_subscriber_id', 'user_subscriptions', ['subscriber_id'])
    op.create_index('ix_user_subscriptions_creator_id', 'user_subscriptions', ['creator_id'])
    op.create_index('ix_user_subscriptions_expires_at', 'user_subscriptions', ['expires_at'])
    op.create_index('ix_user_subscriptions_payment_intent_id', 'user_subscriptions', ['payment_intent_id'])
    op.create_index('ix_user_subscriptions_created_at', 'user_subscriptions', ['created_at'])
    op.create_index(
        'uq_user_subscriptions_active_pair',
        'user_subscriptions',
        ['subscriber_id', 'creator_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    # Tips
    op.create_table(
        'tips',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tipper_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('payment_intent_id', sa.String(), nullable=True, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['tipper_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['creator_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['payment_intent_id'], ['payment_intents.id'], ),
    )
    op.create_index('ix_tips_tipper_id', 'tips', ['tipper_id'])
    op.create_index('ix_tips_creator_id', 'tips', ['creator_id'])
    op.create_index('ix_tips_created_at', 'tips', ['created_at'])

    # PPV purchases
    op.create_table(
        'ppv_purchases',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('buyer_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('seller_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('post_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('message_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('payment_intent_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['buyer_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['seller_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ),
        sa.ForeignKeyConstraint(['message_id'], ['messages.id'], ),
        sa.ForeignKeyConstraint(['payment_intent_id'], ['payment_intents.id'], ),
        sa.UniqueConstraint('buyer_id', 'post_id', name='uq_ppv_purchases_buyer_post'),
        sa.UniqueConstraint('buyer_id', 'message_id', name='uq_ppv_purchases_buyer_message'),
    )
    op.create_index('ix_ppv_purchases_buyer_id', 'ppv_purchases', ['buyer_id'])
    op.create_index('ix_ppv_purchases_seller_id', 'ppv_purchases', ['seller_id'])
    op.create_index('ix_ppv_purchases_payment_intent_id', 'ppv_purchases', ['payment_intent_id'])

    # Payouts
    op.create_table(
        'creator_payouts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('stripe_transfer_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['creator_id'], ['profiles.id'], ),
    )
    op.create_index('ix_creator_payouts_creator_id', 'creator_payouts', ['creator_id'])
    op.create_index('ix_creator_payouts_status', 'creator_payouts', ['status'])
    op.create_index('ix_creator_payouts_stripe_transfer_id', 'creator_payouts', ['stripe_transfer_id'])
    op.create_index('ix_creator_payouts_created_at', 'creator_payouts', ['created_at'])

    # Stripe webhook events
    op.create_table(
        'stripe_events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('stripe_event_id', sa.String(), nullable=False, unique=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('payload', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('processed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('received_at', sa.DateTime(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_stripe_events_stripe_event_id', 'stripe_events', ['stripe_event_id'])
    op.create_index('ix_stripe_events_type', 'stripe_events', ['type'])
    op.create_index('ix_stripe_events_processed', 'stripe_events', ['processed'])
    op.create_index('ix_stripe_events_received_at', 'stripe_events', ['received_at'])


def downgrade() -> None:
    op.drop_table('stripe_events')
    op.drop_table('creator_payouts')
    op.drop_table('ppv_purchases')
    op.drop_table('tips')
    op.drop_table('user_subscriptions')
    op.drop_table('payment_intents')
    op.drop_table('messages')
    op.drop_table('posts')
    op.drop_table('creator_profiles')
    op.drop_table('profiles')
