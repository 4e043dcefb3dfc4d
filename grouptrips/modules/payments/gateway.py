"""Payment gateway boundary, specified at the interface only."""

from __future__ import annotations

from typing import Protocol

from grouptrips.modules.drafts import TripDraft

from .models import ActorVerification, CorrelationToken, GatewaySession, SessionVerification


class PaymentGateway(Protocol):
    @property
    def supports_sessions(self) -> bool:
        """Whether the gateway can hold checkout sessions carrying draft metadata."""
        ...

    @property
    def supports_actor_links(self) -> bool:
        """Whether an actor-bound redirect (payment link) is configured."""
        ...

    async def create_session(self, draft: TripDraft, actor_id: str, *, email: str | None = None) -> GatewaySession:
        ...

    def redirect_to(self, token: CorrelationToken, actor_hint: str | None = None) -> str:
        """Return the outbound URL; nothing is observable after the user follows it."""
        ...

    async def verify_by_session(self, token: str) -> SessionVerification:
        ...

    async def verify_by_actor(self, actor_id: str) -> ActorVerification:
        ...
