import enum

from sqlalchemy import Enum as SQLEnum


class PurchaseKind(str, enum.Enum):
    SUBSCRIPTION = "subscription"
    TIP = "tip"
    PPV = "ppv"
    LIVE_STREAM = "live_stream"


class SubscriptionTier(str, enum.Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    PENDING = "pending"


class PayoutStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AccountStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"


def enum_column_type(enum_cls):
    """Store the enum's lowercase values as plain VARCHAR (no native PG enum)."""
    return SQLEnum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )
