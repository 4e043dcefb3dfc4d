"""Checkout related dependency providers."""

from fastapi import Depends

from grouptrips.core.container import ApplicationContainer, get_container
from grouptrips.infrastructure.database.session import get_session_factory
from grouptrips.modules.checkout import CheckoutFlow


def get_app_container() -> ApplicationContainer:
    return get_container()


def get_checkout_flow(container: ApplicationContainer = Depends(get_app_container)) -> CheckoutFlow:
    # a flow models one page mount, so every request gets a fresh one
    return container.build_checkout_flow(get_session_factory())


__all__ = [
    "get_app_container",
    "get_checkout_flow",
]
