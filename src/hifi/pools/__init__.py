"""Pool metadata storage."""

from hifi.pools.database import close_db, get_db, init_db
from hifi.pools.models import AdapterType, Pool, PoolState, RiskLevel
from hifi.pools.repository import PoolRepository

__all__ = [
    # Models
    "Pool",
    # Enums
    "PoolState",
    "RiskLevel",
    "AdapterType",
    # Database
    "get_db",
    "init_db",
    "close_db",
    "PoolRepository",
]
