"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .checkout import get_app_container, get_checkout_flow

__all__ = [
    "get_db_session",
    "get_app_container",
    "get_checkout_flow",
]
