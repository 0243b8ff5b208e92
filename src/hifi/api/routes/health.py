"""Health check endpoints."""

from fastapi import APIRouter, Depends

from hifi import __version__
from hifi.config import get_settings
from hifi.deposits.factory import get_deposit_service
from hifi.deposits.service import DepositService
from hifi.pools.database import ping_db

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "hifi"}


@router.get("/health/detailed")
async def detailed_health(service: DepositService = Depends(get_deposit_service)):
    """Detailed health check with configuration and deposit tracker info."""
    settings = get_settings()
    database_ok = await ping_db()
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": "hifi",
        "version": __version__,
        "database": "ok" if database_ok else "unavailable",
        "deposits": {
            "tracked": len(service.store.values()),
            "in_flight": len(service.orchestrator.active_ids),
            "bridge": service.orchestrator.bridge.name,
            "vault": service.orchestrator.vault.name,
        },
        "config": settings.get_safe_dict(),
    }
