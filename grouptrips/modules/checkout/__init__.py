"""Exports for the checkout return flow"""

from .flow import CheckoutFlow
from .guard import ProcessGuard
from .models import (
    INTENT_LOST_MESSAGE,
    PAYMENT_ALREADY_USED_MESSAGE,
    PAYMENT_CANCELLED_MESSAGE,
    PAYMENT_NOT_VERIFIED_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    VERIFICATION_UNAVAILABLE_MESSAGE,
    CheckoutRedirect,
    FlowOutcome,
    FlowState,
)

__all__ = [
    "CheckoutFlow",
    "CheckoutRedirect",
    "FlowOutcome",
    "FlowState",
    "INTENT_LOST_MESSAGE",
    "PAYMENT_ALREADY_USED_MESSAGE",
    "PAYMENT_CANCELLED_MESSAGE",
    "PAYMENT_NOT_VERIFIED_MESSAGE",
    "ProcessGuard",
    "UNEXPECTED_ERROR_MESSAGE",
    "VERIFICATION_UNAVAILABLE_MESSAGE",
]
