"""SQLAlchemy models for pool metadata."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, validates


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class PoolState(str, Enum):
    """Lifecycle state of a pool."""

    COLLECTING = "COLLECTING"            # Accepting deposits
    DEPLOYED = "DEPLOYED"                # Funds deployed to the yield adapter
    WITHDRAW_WINDOW = "WITHDRAW_WINDOW"  # Withdrawals open
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    CLOSED = "CLOSED"


class RiskLevel(str, Enum):
    """Risk bucket of a pool."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AdapterType(str, Enum):
    """Yield adapter behind a pool."""

    AAVE = "aave"
    SIMULATED = "simulated"
    COMPOUND = "compound"
    OTHER = "other"


def _new_pool_id() -> str:
    return uuid.uuid4().hex


class Pool(Base):
    """A vault-backed deposit pool.

    Amounts (tvl, cap, apy) are stored as strings to keep decimal precision;
    apy may be a range such as "5-8".
    """

    __tablename__ = "pools"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_pool_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PoolState.COLLECTING.value
    )
    tvl: Mapped[str] = mapped_column(String(78), nullable=False, default="0")
    cap: Mapped[str] = mapped_column(String(78), nullable=False)
    apy: Mapped[str] = mapped_column(String(32), nullable=False, default="0")
    wait_time: Mapped[int] = mapped_column(Integer, nullable=False, default=420)  # seconds
    min_deposit: Mapped[int] = mapped_column(Integer, nullable=False, default=100)  # USDC
    contract_address: Mapped[str] = mapped_column(String(42), nullable=False)
    chain_id: Mapped[int] = mapped_column(Integer, nullable=False)
    risk_level: Mapped[str] = mapped_column(
        String(10), nullable=False, default=RiskLevel.LOW.value
    )
    adapter_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AdapterType.AAVE.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("contract_address", "chain_id", name="uq_pool_contract_chain"),
        Index("ix_pools_state", "state"),
    )

    @validates("contract_address")
    def _lowercase_address(self, key: str, value: str) -> str:
        return value.lower()

    @validates("state")
    def _check_state(self, key: str, value: str) -> str:
        return PoolState(value).value

    @validates("risk_level")
    def _check_risk_level(self, key: str, value: str) -> str:
        return RiskLevel(value).value

    @validates("adapter_type")
    def _check_adapter_type(self, key: str, value: str) -> str:
        return AdapterType(value).value

    def to_dict(self) -> dict:
        """Convert to the JSON shape served by the API."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "state": self.state,
            "tvl": self.tvl,
            "cap": self.cap,
            "apy": self.apy,
            "waitTime": self.wait_time,
            "minDeposit": self.min_deposit,
            "contractAddress": self.contract_address,
            "chainId": self.chain_id,
            "riskLevel": self.risk_level,
            "adapterType": self.adapter_type,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Pool {self.id} {self.name!r} {self.state}>"
