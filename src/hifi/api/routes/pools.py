"""Pool metadata endpoints."""

import logging

from fastapi import APIRouter

from hifi.api.errors import error_response
from hifi.pools.database import get_db
from hifi.pools.repository import PoolRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/pools/{pool_id}")
async def get_pool(pool_id: str):
    """Get pool metadata by id."""
    try:
        async with get_db() as session:
            pool = await PoolRepository(session).get_pool(pool_id)
            data = pool.to_dict() if pool is not None else None
    except Exception as e:
        logger.error(f"Error fetching pool {pool_id}: {e}")
        return error_response(500, "Failed to fetch pool")

    if data is None:
        return error_response(404, "Pool not found")

    return {"pool": data}
