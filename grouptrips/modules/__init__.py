"""Feature modules of the checkout service."""

from . import drafts, payments, persistence, trips, checkout

__all__ = [
    "drafts",
    "payments",
    "persistence",
    "trips",
    "checkout",
]
