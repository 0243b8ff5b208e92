"""HTTP access to the relayer service.

The relayer holds the hot wallet: it signs burn intents, mints on the
destination chain and calls PoolVault.depositFor. This service only talks
JSON to it.
"""

import logging
from typing import Optional

import httpx

from hifi.deposits.errors import CollaboratorError

logger = logging.getLogger(__name__)


async def call_relayer(
    base_url: str,
    path: str,
    payload: dict,
    *,
    error_cls: type[CollaboratorError],
    timeout: float = 120.0,
    api_key: str = "",
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """POST payload to the relayer and return the transaction hash.

    The relayer answers ``{"success": true, "txHash": "0x..."}`` on
    success and ``{"success": false, "error": "..."}`` (or a non-2xx status)
    on failure.

    Raises:
        error_cls: On transport errors, error responses or missing txHash
    """
    url = f"{base_url.rstrip('/')}{path}"
    headers = {"X-API-Key": api_key} if api_key else {}

    try:
        if client is not None:
            resp = await client.post(url, json=payload, headers=headers, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as http:
                resp = await http.post(url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Relayer request to {url} failed: {e}")
        raise error_cls(f"Relayer unreachable: {e}") from e

    try:
        data = resp.json()
    except ValueError:
        data = {}

    if resp.status_code >= 400 or data.get("success") is False:
        message = data.get("error") or data.get("message") or f"Relayer error: {resp.status_code}"
        logger.error(f"Relayer {path} rejected request: {message}")
        raise error_cls(message)

    tx_hash = data.get("txHash")
    if not tx_hash:
        raise error_cls(f"Relayer {path} returned no transaction hash")
    return tx_hash
