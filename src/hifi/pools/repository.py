"""Repository for pool metadata (read-mostly)."""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from hifi.pools.models import AdapterType, Pool, PoolState, RiskLevel


class PoolRepository:
    """Repository for pool lookups and seeding."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_pool(self, pool_id: str) -> Optional[Pool]:
        """Get pool by id."""
        return await self.session.get(Pool, pool_id)

    async def list_pools(self, state: Optional[PoolState] = None) -> list[Pool]:
        """List pools, optionally filtered by state."""
        stmt = select(Pool).order_by(Pool.created_at, Pool.name)
        if state is not None:
            stmt = stmt.where(Pool.state == PoolState(state).value)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_pool_by_contract(self, contract_address: str, chain_id: int) -> Optional[Pool]:
        """Get pool by vault contract address and chain."""
        stmt = select(Pool).where(
            Pool.contract_address == contract_address.lower(),
            Pool.chain_id == chain_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_pool(
        self,
        name: str,
        description: str,
        cap: str,
        contract_address: str,
        chain_id: int,
        state: PoolState = PoolState.COLLECTING,
        tvl: str = "0",
        apy: str = "0",
        wait_time: int = 420,
        min_deposit: int = 100,
        risk_level: RiskLevel = RiskLevel.LOW,
        adapter_type: AdapterType = AdapterType.AAVE,
        pool_id: Optional[str] = None,
    ) -> Pool:
        """Create a new pool."""
        pool = Pool(
            name=name.strip(),
            description=description.strip(),
            state=PoolState(state).value,
            tvl=tvl,
            cap=cap,
            apy=apy,
            wait_time=wait_time,
            min_deposit=min_deposit,
            contract_address=contract_address,
            chain_id=chain_id,
            risk_level=RiskLevel(risk_level).value,
            adapter_type=AdapterType(adapter_type).value,
        )
        if pool_id is not None:
            pool.id = pool_id
        self.session.add(pool)
        await self.session.flush()
        await self.session.refresh(pool)
        return pool

    async def delete_all(self) -> int:
        """Delete every pool. Returns the number removed."""
        result = await self.session.execute(delete(Pool))
        return result.rowcount or 0
