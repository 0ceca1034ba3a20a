#!/usr/bin/env python3
"""
Debug script to check if environment variables are loaded correctly.
Run this inside the backend container before taking payments.

Note: Docker Compose doesn't copy .env into the container - it reads it and
injects variables as environment variables. So we check the actual env vars.
"""
import os
import sys

# Add parent directory to path to import app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings


def masked(value: str) -> str:
    return f"***{value[-4:]}" if value else "(not set)"


print("=" * 60)
print("Environment Variables Check")
print("=" * 60)
print()

print("Stripe Configuration:")
print(f"  STRIPE_SECRET_KEY: {masked(settings.STRIPE_SECRET_KEY)}")
print(f"  STRIPE_WEBHOOK_SECRET: {masked(settings.STRIPE_WEBHOOK_SECRET)}")
print(f"  STRIPE_WEBHOOK_TOLERANCE_SECONDS: {settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS}")
print(f"  STRIPE_MAX_NETWORK_RETRIES: {settings.STRIPE_MAX_NETWORK_RETRIES}")
print()

print("Pricing:")
print(f"  CURRENCY: {settings.CURRENCY}")
print(f"  PLATFORM_FEE_PERCENT: {settings.PLATFORM_FEE_PERCENT}")
print(f"  Payment range: {settings.MIN_PAYMENT_CENTS} - {settings.MAX_PAYMENT_CENTS} cents")
print(f"  MIN_PAYOUT_CENTS: {settings.MIN_PAYOUT_CENTS}")
print()

print("Frontend:")
print(f"  FRONTEND_URL: {settings.FRONTEND_URL}")
print(f"  Allowed origins: {settings.get_allowed_origins()}")
print()

problems = []
if not settings.STRIPE_SECRET_KEY:
    problems.append("STRIPE_SECRET_KEY is not set - payment intents and payouts will fail")
elif not settings.STRIPE_SECRET_KEY.startswith(("sk_", "rk_")):
    problems.append("STRIPE_SECRET_KEY should start with 'sk_' or 'rk_'")
if not settings.STRIPE_WEBHOOK_SECRET:
    problems.append("STRIPE_WEBHOOK_SECRET is not set - every webhook will be rejected")
elif not settings.STRIPE_WEBHOOK_SECRET.startswith("whsec_"):
    problems.append("STRIPE_WEBHOOK_SECRET should start with 'whsec_'")
if settings.MIN_PAYMENT_CENTS > settings.MAX_PAYMENT_CENTS:
    problems.append("MIN_PAYMENT_CENTS is greater than MAX_PAYMENT_CENTS")

print("Diagnostics:")
if problems:
    for problem in problems:
        print(f"  ❌ {problem}")
    sys.exit(1)
print("  ✅ Configuration looks complete")
