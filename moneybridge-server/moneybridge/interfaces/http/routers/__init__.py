from fastapi import APIRouter

from moneybridge.interfaces.http.routers import activity, admin, auth, fees, health, mobile_money, wallet


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(mobile_money.router, prefix="/mobile-money", tags=["mobile-money"])
    router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
    router.include_router(fees.router, prefix="/fee-settings", tags=["fees"])
    router.include_router(activity.router, prefix="/activity-logs", tags=["activity"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    router.include_router(health.router, tags=["health"])
    return router


__all__ = [
    "create_api_router",
]
