"""Exports for payment correlation and the gateway boundary"""

from .correlator import PAYMENT_UNAVAILABLE_MESSAGE, Correlator
from .exceptions import PaymentGatewayError, PaymentUnavailableError
from .gateway import PaymentGateway
from .models import (
    ActorVerification,
    CorrelationToken,
    GatewaySession,
    ReturnClassification,
    ReturnKind,
    ReturnSignals,
    SessionVerification,
    TokenShape,
)

__all__ = [
    "ActorVerification",
    "CorrelationToken",
    "Correlator",
    "GatewaySession",
    "PAYMENT_UNAVAILABLE_MESSAGE",
    "PaymentGateway",
    "PaymentGatewayError",
    "PaymentUnavailableError",
    "ReturnClassification",
    "ReturnKind",
    "ReturnSignals",
    "SessionVerification",
    "TokenShape",
]
