#!/usr/bin/env python3
"""Seed the pool database with the default pool.

Usage:
    python scripts/seed_pools.py                 # Add default pool
    python scripts/seed_pools.py --reset         # Delete all pools first
    python scripts/seed_pools.py --list          # Show pools and exit

Environment variables:
    DATABASE_URL: Pool database (default: sqlite+aiosqlite:///./data/hifi.db)
    POOL_VAULT_ADDRESS: PoolVault contract address (required to seed)
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv
load_dotenv()

from hifi.config import get_settings
from hifi.pools import PoolRepository, PoolState, close_db, get_db, init_db

BASE_SEPOLIA_CHAIN_ID = 84532

DEFAULT_POOL = {
    "name": "Base Sepolia Conservative",
    "description": (
        "Low-risk USDC pool with automated Aave V3 deployment. "
        "Testnet deployment on Base Sepolia for yield generation."
    ),
    "state": PoolState.COLLECTING,
    "tvl": "0",
    "cap": "10",
    "apy": "5-8",
    "wait_time": 10080 * 60,  # 7 days
    "min_deposit": 1,
    "chain_id": BASE_SEPOLIA_CHAIN_ID,
}


async def list_pools() -> None:
    async with get_db() as session:
        pools = await PoolRepository(session).list_pools()

    if not pools:
        print("No pools")
        return
    for pool in pools:
        print(f"{pool.id}  {pool.name:<32} {pool.state:<16} {pool.contract_address} (chain {pool.chain_id})")


async def seed(reset: bool) -> int:
    settings = get_settings()
    if not settings.pool_vault_address:
        print("POOL_VAULT_ADDRESS not configured")
        return 1

    async with get_db() as session:
        repo = PoolRepository(session)

        if reset:
            removed = await repo.delete_all()
            print(f"Deleted {removed} existing pool(s)")

        existing = await repo.get_pool_by_contract(
            settings.pool_vault_address, DEFAULT_POOL["chain_id"]
        )
        if existing:
            print(f"Pool already seeded: {existing.id} ({existing.name})")
            return 0

        pool = await repo.create_pool(
            contract_address=settings.pool_vault_address, **DEFAULT_POOL
        )
        print(f"Pool seeded successfully: {pool.id} ({pool.name})")
    return 0


async def main() -> int:
    parser = argparse.ArgumentParser(description="Seed pool metadata")
    parser.add_argument("--reset", action="store_true", help="Delete existing pools first")
    parser.add_argument("--list", action="store_true", help="List pools and exit")
    args = parser.parse_args()

    await init_db()
    try:
        if args.list:
            await list_pools()
            return 0
        return await seed(args.reset)
    finally:
        await close_db()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
