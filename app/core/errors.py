"""
Error taxonomy for the settlement workflow.

Services raise these; app.main maps them to JSON responses of the form
{"error": message}. Messages are safe to show to end users.
"""
from fastapi import status


class SettlementError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SettlementError):
    """Bad amount, missing field, PPV flag mismatch, not onboarded..."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(SettlementError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(SettlementError):
    """Duplicate active subscription, content already purchased."""
    status_code = status.HTTP_409_CONFLICT


class GatewayError(SettlementError):
    """
    Card processor rejected the request or could not be reached.

    `message` is the generic text returned to the client; `detail` keeps the
    gateway's own explanation for the logs only.
    """
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str = "Payment failed", detail: str = ""):
        super().__init__(message)
        self.detail = detail


class SignatureError(SettlementError):
    """Webhook signature missing or invalid. Nothing is mutated."""
    status_code = status.HTTP_400_BAD_REQUEST
