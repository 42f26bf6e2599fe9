"""Wallet endpoints backed by chain adapters."""
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from typing import Optional
from coinwallet.api.dependencies import get_context
from coinwallet.context import AppContext
from coinwallet.models.adapter import SendParameters
from coinwallet.services.chain_adapters.base import Adapter
from coinwallet.utils.errors import (
    AdapterError,
    AdapterValidationError,
    EosKitError,
    WalletNotFoundError,
)

router = APIRouter()


class SendRequest(BaseModel):
    """Request model for sending funds."""
    amount: Decimal = Field(..., gt=0, description="Amount in coin units")
    address: str = Field(..., min_length=1, description="Recipient address")
    memo: Optional[str] = Field(None, description="Optional memo")


class PaymentAddressRequest(BaseModel):
    payment_address: str = Field(..., description="Address or payment URI")


def _adapter(context: AppContext, account_id: str, coin_uid: str) -> Adapter:
    try:
        return context.manage_wallets_service.adapter(context.wallet(coin_uid, account_id))
    except WalletNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("")
async def list_wallets(account_id: Optional[str] = None, context: AppContext = Depends(get_context)):
    """List enabled wallets with balance and sync state."""
    service = context.manage_wallets_service
    result = []
    for wallet in service.wallets:
        if account_id is not None and wallet.account.id != account_id:
            continue
        adapter = service.adapter(wallet)
        result.append({
            "account_id": wallet.account.id,
            "coin_uid": wallet.coin.uid,
            "balance": str(adapter.balance),
            "state": adapter.state.model_dump(mode="json"),
            "last_block_height": adapter.last_block_height,
            "receive_address": adapter.receive_address
        })
    return result


@router.post("/refresh")
async def refresh_wallets(context: AppContext = Depends(get_context)):
    """Sync every kit with its node; failures show up as wallet state."""
    await context.eos_kit_manager.refresh()
    return {"status": "refreshed"}


@router.get("/{account_id}/{coin_uid}/transactions")
async def list_transactions(
    account_id: str,
    coin_uid: str,
    from_hash: Optional[str] = Query(default=None, description="Hash of the oldest loaded record"),
    from_index: Optional[int] = Query(default=None, description="Inter-transaction index of the oldest loaded record"),
    limit: int = Query(default=20, ge=1, le=100),
    context: AppContext = Depends(get_context)
):
    """Page through transaction history, newest first."""
    adapter = _adapter(context, account_id, coin_uid)

    cursor = None
    if from_hash is not None or from_index is not None:
        if from_hash is None or from_index is None:
            raise HTTPException(status_code=400, detail="from_hash and from_index must be given together")
        cursor = (from_hash, from_index)

    try:
        records = await adapter.transactions_single(from_=cursor, limit=limit)
    except EosKitError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return [record.model_dump(mode="json") for record in records]


@router.get("/{account_id}/{coin_uid}/validate/{address}")
async def validate_address(account_id: str, coin_uid: str, address: str, context: AppContext = Depends(get_context)):
    adapter = _adapter(context, account_id, coin_uid)
    try:
        adapter.validate_address(address)
    except AdapterValidationError as e:
        return {"address": address, "valid": False, "message": str(e)}
    return {"address": address, "valid": True, "message": "Address is valid"}


@router.post("/{account_id}/{coin_uid}/parse")
async def parse_payment_address(
    account_id: str,
    coin_uid: str,
    request: PaymentAddressRequest,
    context: AppContext = Depends(get_context)
):
    adapter = _adapter(context, account_id, coin_uid)
    parsed = adapter.parse_payment_address(request.payment_address)
    return {
        "address": parsed.address,
        "amount": str(parsed.amount) if parsed.amount is not None else None,
        "error": str(parsed.error) if parsed.error is not None else None
    }


@router.post("/{account_id}/{coin_uid}/send")
async def send(account_id: str, coin_uid: str, request: SendRequest, context: AppContext = Depends(get_context)):
    """
    Send funds.

    The address and amount are checked before anything reaches the chain.
    """
    adapter = _adapter(context, account_id, coin_uid)
    params = SendParameters(amount=request.amount, address=request.address, memo=request.memo)

    try:
        adapter.validate_address(params.address)
    except AdapterValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    errors = adapter.validate_params(params)
    if errors:
        raise HTTPException(
            status_code=400,
            detail=[error.model_dump(mode="json") for error in errors]
        )

    try:
        await adapter.send_single(params)
    except AdapterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EosKitError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {"status": "sent", "amount": str(params.amount), "address": params.address}
