"""Domain models shared by the correlator and the payment gateway."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from grouptrips.modules.drafts import TripDraft

STATUS_PARAM = "payment"
SESSION_PARAM = "session_id"
SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


class TokenShape(str, Enum):
    # gateway-issued checkout session, verifiable together with its metadata
    SESSION = "session"
    # actor id only, the draft has to come from the storage tiers
    ACTOR = "actor"


class ReturnKind(str, Enum):
    NONE = "none"
    SUCCESS = "success"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class CorrelationToken:
    shape: TokenShape
    value: str
    redirect_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class GatewaySession:
    id: str
    url: str


@dataclass(frozen=True, slots=True)
class SessionVerification:
    paid: bool
    draft: Optional[TripDraft] = None
    actor_id: Optional[str] = None
    # some metadata values were cut to fit the gateway limits
    draft_truncated: bool = False


@dataclass(frozen=True, slots=True)
class ActorVerification:
    """Paid checkouts of one actor, most recent first."""

    session_ids: tuple[str, ...] = ()

    @property
    def paid(self) -> bool:
        return bool(self.session_ids)


@dataclass(frozen=True, slots=True)
class ReturnSignals:
    """Return-trip signals seen by one page load.

    ``awaiting_payment`` is the explicit marker set before redirecting out;
    it stands in for the status flag when the gateway returns without one.
    """

    status: Optional[str] = None
    session_id: Optional[str] = None
    awaiting_payment: bool = False

    @classmethod
    def from_query(cls, params: Mapping[str, Any], *, awaiting_payment: bool = False) -> "ReturnSignals":
        status = params.get(STATUS_PARAM)
        session_id = params.get(SESSION_PARAM)
        return cls(
            status=str(status).strip().lower() if status else None,
            session_id=str(session_id).strip() if session_id else None,
            awaiting_payment=awaiting_payment,
        )

    @property
    def has_return_params(self) -> bool:
        return bool(self.status or self.session_id)


@dataclass(frozen=True, slots=True)
class ReturnClassification:
    kind: ReturnKind
    shape: Optional[TokenShape] = None
    token: Optional[str] = None

    @classmethod
    def none(cls) -> "ReturnClassification":
        return cls(ReturnKind.NONE)

    @classmethod
    def cancelled(cls) -> "ReturnClassification":
        return cls(ReturnKind.CANCELLED)

    @classmethod
    def success(cls, shape: TokenShape, token: str | None = None) -> "ReturnClassification":
        return cls(ReturnKind.SUCCESS, shape=shape, token=token)
