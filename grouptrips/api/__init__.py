from fastapi import APIRouter

from grouptrips.api.routers import checkout, trips


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(checkout.router, prefix="/checkout", tags=["checkout"])
    router.include_router(trips.router, prefix="/trips", tags=["trips"])
    return router


__all__ = [
    "create_api_router",
]
