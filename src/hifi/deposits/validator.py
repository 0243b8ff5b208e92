"""Validation of inbound deposit requests."""

import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from eth_utils import is_checksum_address, is_hex_address

from hifi.deposits.errors import (
    InvalidAddress,
    InvalidAmount,
    MissingField,
    UnsupportedChain,
)
from hifi.deposits.models import DepositRequest

REQUIRED_FIELDS = ("amount", "sourceChain", "userAddress")

# Token amounts are uint256 on chain
MAX_AMOUNT = 2**256 - 1
MAX_AMOUNT_DIGITS = len(str(MAX_AMOUNT))

_INTEGER_RE = re.compile(r"^[0-9]+$")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(value: Any) -> int:
    """Parse an amount in the asset's smallest unit.

    Accepts base-10 integer strings (and JSON integers) in the uint256
    range. Decimals, signs, exponents, zero and non-numeric input are
    rejected.

    Raises:
        InvalidAmount: If the value is not a positive uint256 integer
    """
    if isinstance(value, bool):
        raise InvalidAmount("Invalid amount format")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        digits = value.strip().lstrip("0") or "0"
        if len(digits) > MAX_AMOUNT_DIGITS:
            raise InvalidAmount("Invalid amount format")
        amount = int(digits)
    else:
        raise InvalidAmount("Invalid amount format")

    if not 0 < amount <= MAX_AMOUNT:
        raise InvalidAmount("Invalid amount format")
    return amount


def validate_chain(value: Any, supported_chains: Iterable[str]) -> str:
    """Normalize a chain name and check it is supported."""
    supported = {chain.lower() for chain in supported_chains}
    if not isinstance(value, str) or value.strip().lower() not in supported:
        raise UnsupportedChain(f"Unsupported source chain: {value}")
    return value.strip().lower()


def _is_mixed_case(address: str) -> bool:
    body = address[2:]
    return body != body.lower() and body != body.upper()


def validate_address(value: Any) -> str:
    """Check an EVM address.

    All-lower and all-upper hex skip the checksum; mixed case must be a
    valid EIP-55 checksum address.
    """
    if not isinstance(value, str):
        raise InvalidAddress("Invalid user address")
    address = value.strip()
    if not address.startswith("0x") or not is_hex_address(address):
        raise InvalidAddress("Invalid user address")
    if _is_mixed_case(address) and not is_checksum_address(address):
        raise InvalidAddress("Invalid user address")
    return address


def validate_deposit_request(
    raw: Mapping[str, Any],
    supported_chains: Iterable[str],
) -> DepositRequest:
    """Validate a raw deposit request body.

    Args:
        raw: Decoded JSON body with ``amount``, ``sourceChain``,
            ``userAddress`` and optionally ``poolId``
        supported_chains: Accepted source chains (case-insensitive)

    Returns:
        Normalized DepositRequest

    Raises:
        MissingField, InvalidAmount, UnsupportedChain, InvalidAddress
    """
    if not isinstance(raw, Mapping) or any(
        _is_blank(raw.get(field)) for field in REQUIRED_FIELDS
    ):
        raise MissingField(f"Missing required fields: {', '.join(REQUIRED_FIELDS)}")

    amount = parse_amount(raw["amount"])
    source_chain = validate_chain(raw["sourceChain"], supported_chains)
    user_address = validate_address(raw["userAddress"])

    pool_id: Optional[str] = raw.get("poolId")
    if pool_id is not None and not isinstance(pool_id, str):
        pool_id = str(pool_id)

    return DepositRequest(
        amount=str(amount),
        source_chain=source_chain,
        user_address=user_address,
        pool_id=pool_id or None,
    )
