"""States and outcomes of the checkout return flow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from grouptrips.modules.payments import CorrelationToken, ReturnKind
from grouptrips.modules.trips import Trip

INTENT_LOST_MESSAGE = (
    "Payment succeeded but your trip details were lost. "
    "Please create the trip again; no duplicate charge will occur."
)
PAYMENT_NOT_VERIFIED_MESSAGE = "Could not verify payment. If you paid, please contact support."
PAYMENT_ALREADY_USED_MESSAGE = (
    "This payment has already been used for another trip. Please complete a new payment to create this trip."
)
VERIFICATION_UNAVAILABLE_MESSAGE = (
    "We could not confirm your payment right now. Your trip details are saved; reload this page to try again."
)
PAYMENT_CANCELLED_MESSAGE = "Payment was cancelled. Your trip has not been created."
UNEXPECTED_ERROR_MESSAGE = (
    "Something went wrong while finishing your trip. Your trip details are saved; reload this page to try again."
)
TRIP_CREATED_MESSAGE = "Trip created! Share the join code with your group."


class FlowState(str, Enum):
    IDLE = "idle"
    AWAITING_PAYMENT = "awaiting_payment"
    RETURN_VERIFICATION = "return_verification"
    CREATING = "creating"
    SUCCESS = "success"
    ERROR_RECOVERABLE = "error_recoverable"


# While in one of these the UI keeps showing a spinner.
BUSY_STATES = frozenset({FlowState.RETURN_VERIFICATION, FlowState.CREATING})


@dataclass(slots=True)
class FlowOutcome:
    state: FlowState
    message: Optional[str] = None
    warning: Optional[str] = None
    trip: Optional[Trip] = None
    prefill: Optional[dict[str, Any]] = None
    # the return parameters must be stripped from the visible URL
    clear_signals: bool = False
    # signals seen but not processed yet (actor unknown or still running)
    pending: bool = False
    classification: ReturnKind = ReturnKind.NONE


@dataclass(frozen=True, slots=True)
class CheckoutRedirect:
    url: str
    token: CorrelationToken
    intent_id: str
