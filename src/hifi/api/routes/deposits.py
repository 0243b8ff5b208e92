"""Deposit submission and status endpoints."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from hifi.api.errors import internal_error
from hifi.config import get_settings
from hifi.deposits.errors import DepositError, DepositValidationError
from hifi.deposits.factory import get_deposit_service
from hifi.deposits.service import DepositService
from hifi.deposits.status import DepositStatusView

logger = logging.getLogger(__name__)

router = APIRouter()


class DepositCreatedResponse(BaseModel):
    """Response for an accepted deposit."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    tx_id: str = Field(..., alias="txId", description="Deposit id to poll")
    message: str = "Deposit initiated successfully"
    estimated_time: str = Field(..., alias="estimatedTime")


class DepositStatusResponse(BaseModel):
    """Response for a status poll."""

    success: bool = True
    status: DepositStatusView


class LegacyInitiateResponse(BaseModel):
    """Response of the deprecated initiate endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    deposit_id: str = Field(..., alias="depositId")
    message: str = "Deposit initiated. You will receive shares in ~2 minutes."


async def read_json_body(request: Request) -> Any:
    """Decode the request body, rejecting malformed JSON as a client error."""
    try:
        return await request.json()
    except ValueError:
        raise DepositValidationError("Invalid JSON body") from None


@router.post("/deposits", response_model=DepositCreatedResponse)
async def create_deposit(
    request: Request,
    service: DepositService = Depends(get_deposit_service),
):
    """
    Submit a cross-chain deposit.

    Returns immediately with an id; bridging and the vault deposit run in
    the background. Poll GET /deposits/{id} for progress.
    """
    body = await read_json_body(request)
    try:
        record = service.submit(body)
    except DepositError:
        raise
    except Exception:
        logger.exception("Deposit API error")
        return internal_error()

    return DepositCreatedResponse(
        tx_id=record.id,
        estimated_time=get_settings().estimated_time,
    )


@router.get("/deposits/{deposit_id}", response_model=DepositStatusResponse)
async def get_deposit_status(
    deposit_id: str,
    service: DepositService = Depends(get_deposit_service),
):
    """Get the lifecycle status of a deposit."""
    try:
        view = service.get_status(deposit_id)
    except DepositError:
        raise
    except Exception:
        logger.exception("Deposit status API error")
        return internal_error()

    return DepositStatusResponse(status=view)


# ======================
# Deprecated address-keyed endpoints
# ======================


@router.post(
    "/deposit/initiate",
    response_model=LegacyInitiateResponse,
    deprecated=True,
)
async def initiate_deposit_legacy(
    request: Request,
    service: DepositService = Depends(get_deposit_service),
):
    """Deprecated alias of POST /deposits for old clients."""
    body = await read_json_body(request)
    try:
        record = service.initiate_legacy(body)
    except DepositError:
        raise
    except Exception:
        logger.exception("Deposit initiation error")
        return internal_error()

    return LegacyInitiateResponse(deposit_id=record.id)


@router.get("/deposit/lookup", deprecated=True)
async def lookup_deposit_legacy(
    tx: Optional[str] = None,
    service: DepositService = Depends(get_deposit_service),
):
    """Deprecated lookup of a deposit by transaction hash."""
    if not tx:
        return JSONResponse(status_code=400, content={"error": "Missing tx hash"})

    record = service.lookup_by_tx(tx)
    if record is None:
        return {"userAddress": None}

    return {
        "userAddress": record.user_address,
        "depositId": record.id,
        "amount": record.amount,
        "status": record.status.value,
    }
