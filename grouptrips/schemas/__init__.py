"""Pydantic schemas for the checkout API."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenData(BaseModel):
    actor_id: str
    email: Optional[str] = None


class TripDraftRequest(BaseModel):
    title: str = Field(..., max_length=200)
    start_at: datetime
    group_label: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    end_at: Optional[datetime] = None


class CheckoutStartResponse(BaseModel):
    redirect_url: str
    token_shape: str
    intent_id: str


class TripResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    join_code: str
    admin_id: str
    departure_time: datetime
    status: str
    group_name: Optional[str] = None
    description: Optional[str] = None
    return_time: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CheckoutReturnResponse(BaseModel):
    state: str
    classification: str
    message: Optional[str] = None
    warning: Optional[str] = None
    trip: Optional[TripResponse] = None
    prefill: Optional[dict[str, Any]] = None
    pending: bool = False
    clear_signals: bool = False
    location: Optional[str] = None


__all__ = [
    "TokenData",
    "TripDraftRequest",
    "CheckoutStartResponse",
    "TripResponse",
    "CheckoutReturnResponse",
]
