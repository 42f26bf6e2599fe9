"""Account registration endpoints."""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Optional
from coinwallet.api.dependencies import get_context
from coinwallet.context import AppContext
from coinwallet.models.coin import Account, AccountOrigin
from coinwallet.services.chain_adapters.eos import validate_account
from coinwallet.utils.errors import AdapterValidationError

router = APIRouter()


class AccountRequest(BaseModel):
    """Request model for account registration."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., description="Display name")
    origin: AccountOrigin = Field(..., description="created or restored")
    eos_account: Optional[str] = Field(None, description="EOS account name")


@router.post("")
async def add_account(request: AccountRequest, context: AppContext = Depends(get_context)):
    """Register an account so coins can be enabled for it."""
    if request.id in context.accounts:
        raise HTTPException(status_code=409, detail=f"Account '{request.id}' already exists")

    if request.eos_account is not None:
        try:
            validate_account(request.eos_account)
        except AdapterValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))

    account = Account(**request.model_dump())
    context.accounts[account.id] = account
    return account


@router.get("")
async def list_accounts(context: AppContext = Depends(get_context)):
    return list(context.accounts.values())


@router.delete("/{account_id}")
async def delete_account(account_id: str, context: AppContext = Depends(get_context)):
    """Remove an account together with its wallets, kits and restore settings."""
    account = context.accounts.pop(account_id, None)
    if account is None:
        raise HTTPException(status_code=404, detail=f"Unknown account '{account_id}'")

    for wallet in context.manage_wallets_service.wallets:
        if wallet.account.id == account_id:
            context.manage_wallets_service.disable(wallet)
    await context.eos_kit_manager.unlink(account_id)
    context.restore_settings_manager.account_deleted(account_id)

    return {"account_id": account_id, "status": "deleted"}
