"""Coin enabling endpoints, including restore settings requests."""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from coinwallet.api.dependencies import get_context
from coinwallet.context import AppContext
from coinwallet.models.restore_settings import RestoreSettingsRequest
from coinwallet.utils.errors import (
    AdapterValidationError,
    RestoreSettingsError,
    UnsupportedCoinError,
    WalletNotFoundError,
)

router = APIRouter()


class EnableCoinRequest(BaseModel):
    """Request model for enabling a coin."""
    coin_uid: str = Field(..., description="Coin uid, e.g. 'eos:EOS'")
    account_id: str


class BirthdayHeightRequest(BaseModel):
    birthday_height: str = Field(..., description="Block height to restore history from")


def _request_response(request: RestoreSettingsRequest) -> dict:
    return {
        "request_id": request.request_id,
        "coin_uid": request.coin.uid,
        "type": request.type.value
    }


@router.get("")
async def list_coins(context: AppContext = Depends(get_context)):
    return [
        {
            "uid": coin.uid,
            "title": coin.title,
            "supported": context.adapter_factory.supports(coin.type),
            "restore_settings": [t.value for t in coin.type.restore_setting_types]
        }
        for coin in context.coins.values()
    ]


@router.post("/enable")
async def enable_coin(request: EnableCoinRequest, context: AppContext = Depends(get_context)):
    """
    Enable a coin for an account.

    Returns "approved" when the wallet was created, or "pending" with the
    request that must be answered before it can be.
    """
    try:
        coin = context.coin(request.coin_uid)
        account = context.account(request.account_id)
    except WalletNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        result = context.manage_wallets_service.enable(coin, account)
    except (UnsupportedCoinError, AdapterValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    if isinstance(result, RestoreSettingsRequest):
        return {"status": "pending", "request": _request_response(result)}
    return {"status": "approved", "coin_uid": coin.uid, "account_id": account.id}


@router.get("/requests")
async def list_requests(context: AppContext = Depends(get_context)):
    return [_request_response(r) for r in context.restore_settings_service.pending_requests]


@router.post("/requests/{request_id}/birthday-height")
async def enter_birthday_height(
    request_id: str,
    request: BirthdayHeightRequest,
    context: AppContext = Depends(get_context)
):
    service = context.restore_settings_service
    pending = service.pending_request(request_id)
    if pending is None:
        raise HTTPException(status_code=404, detail=f"No pending request '{request_id}'")

    try:
        service.enter(request.birthday_height, pending.coin, request_id=request_id)
    except (UnsupportedCoinError, AdapterValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RestoreSettingsError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"status": "approved", "coin_uid": pending.coin.uid}


@router.post("/requests/{request_id}/cancel")
async def cancel_request(request_id: str, context: AppContext = Depends(get_context)):
    service = context.restore_settings_service
    pending = service.pending_request(request_id)
    if pending is None:
        raise HTTPException(status_code=404, detail=f"No pending request '{request_id}'")

    try:
        service.cancel(pending.coin, request_id=request_id)
    except RestoreSettingsError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"status": "rejected", "coin_uid": pending.coin.uid}
