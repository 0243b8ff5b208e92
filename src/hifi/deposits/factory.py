"""Factory wiring the deposit lifecycle components from settings."""

from hifi.config import get_settings
from hifi.deposits.orchestrator import LifecycleOrchestrator
from hifi.deposits.service import DepositService
from hifi.deposits.store import InMemoryDepositStore
from hifi.deposits.sweeper import RetentionSweeper
from hifi.gateway import get_bridge_client
from hifi.vault import get_vault_client

# Singleton instances
_service_instance: DepositService | None = None
_sweeper_instance: RetentionSweeper | None = None


def get_deposit_service() -> DepositService:
    """Get the process-wide deposit service.

    Store, orchestrator and collaborators are built once from settings;
    the bridge and vault clients come from their own factories.
    """
    global _service_instance

    if _service_instance is not None:
        return _service_instance

    settings = get_settings()
    store = InMemoryDepositStore(
        retention_seconds=settings.retention_seconds,
        terminal_only=settings.retention_terminal_only,
    )
    orchestrator = LifecycleOrchestrator(
        store=store,
        bridge=get_bridge_client(),
        vault=get_vault_client(),
        settle_delay=settings.settle_delay_seconds,
    )
    _service_instance = DepositService(
        store=store,
        orchestrator=orchestrator,
        supported_chains=settings.source_chains,
        destination_chain=settings.destination_chain,
    )
    return _service_instance


def get_retention_sweeper() -> RetentionSweeper:
    """Get the sweeper bound to the deposit service's store."""
    global _sweeper_instance

    if _sweeper_instance is not None:
        return _sweeper_instance

    settings = get_settings()
    _sweeper_instance = RetentionSweeper(
        store=get_deposit_service().store,
        retention_seconds=settings.retention_seconds,
        interval=settings.sweep_interval_seconds,
        terminal_only=settings.retention_terminal_only,
    )
    return _sweeper_instance


def reset_deposit_service() -> None:
    """Reset deposit singletons (useful for testing).

    Callers must stop the sweeper and shut down the orchestrator first.
    """
    global _service_instance, _sweeper_instance
    _service_instance = None
    _sweeper_instance = None
