"""Pytest configuration and fixtures."""

import asyncio
import os
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "false"
os.environ["SETTLE_DELAY_SECONDS"] = "0"
os.environ["BRIDGE_LATENCY_SECONDS"] = "0"
os.environ["VAULT_LATENCY_SECONDS"] = "0"
os.environ["BRIDGE_PROVIDER"] = "dryrun"
os.environ["VAULT_PROVIDER"] = "dryrun"

from hifi.api.app import create_app
from hifi.deposits.errors import BridgeFailure, VaultFailure
from hifi.deposits.factory import get_deposit_service
from hifi.deposits.orchestrator import LifecycleOrchestrator
from hifi.deposits.service import DepositService
from hifi.deposits.store import InMemoryDepositStore
from hifi.gateway.base import BridgeClient, BridgeTransfer
from hifi.gateway.dryrun import DryRunBridgeClient
from hifi.pools.database import close_db, init_db
from hifi.vault.base import VaultClient, VaultDeposit
from hifi.vault.dryrun import DryRunVaultClient

# vitalik.eth, correctly EIP-55 checksummed
VALID_ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"

START_MS = 1_700_000_000_000


def deposit_body(**overrides) -> dict:
    """A valid deposit request body."""
    body = {
        "amount": "1000000",
        "sourceChain": "ethereum",
        "userAddress": VALID_ADDRESS,
    }
    body.update(overrides)
    return body


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = START_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


class GatedBridge(BridgeClient):
    """Bridge that blocks until the test releases it."""

    name = "gated"

    def __init__(self, fail_with: Optional[str] = None):
        self.fail_with = fail_with
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls: list[BridgeTransfer] = []

    async def transfer(self, request: BridgeTransfer) -> str:
        self.calls.append(request)
        self.started.set()
        await self.release.wait()
        if self.fail_with:
            raise BridgeFailure(self.fail_with)
        return "0x" + "b" * 64


class GatedVault(VaultClient):
    """Vault that blocks until the test releases it."""

    name = "gated"

    def __init__(self, fail_with: Optional[str] = None):
        self.fail_with = fail_with
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls: list[VaultDeposit] = []

    async def deposit(self, request: VaultDeposit) -> str:
        self.calls.append(request)
        self.started.set()
        await self.release.wait()
        if self.fail_with:
            raise VaultFailure(self.fail_with)
        return "0x" + "c" * 64


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryDepositStore:
    """Store with a one hour retention window and a manual clock."""
    return InMemoryDepositStore(retention_seconds=3600, clock=clock)


@pytest.fixture
def bridge() -> GatedBridge:
    return GatedBridge()


@pytest.fixture
def vault() -> GatedVault:
    return GatedVault()


@pytest.fixture
async def orchestrator(store, bridge, vault) -> AsyncGenerator[LifecycleOrchestrator, None]:
    orch = LifecycleOrchestrator(store, bridge, vault, settle_delay=0)
    yield orch
    await orch.shutdown()


@pytest.fixture
def service(store, orchestrator) -> DepositService:
    return DepositService(
        store=store,
        orchestrator=orchestrator,
        supported_chains=["ethereum", "base"],
        destination_chain="sepolia",
    )


@pytest.fixture
async def dryrun_service(clock) -> AsyncGenerator[DepositService, None]:
    """Service wired to zero-latency dry-run collaborators."""
    store = InMemoryDepositStore(retention_seconds=3600, clock=clock)
    orch = LifecycleOrchestrator(
        store,
        DryRunBridgeClient(latency=0),
        DryRunVaultClient(latency=0),
        settle_delay=0,
    )
    yield DepositService(store, orch, ["ethereum", "base"], "sepolia")
    await orch.shutdown()


@pytest.fixture
async def test_app(service):
    """Application with fresh pool database and the gated deposit service."""
    await init_db()

    app = create_app()
    app.dependency_overrides[get_deposit_service] = lambda: service

    yield app

    # Cleanup
    await close_db()


@pytest.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
