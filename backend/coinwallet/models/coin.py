"""Coin, account and wallet models."""
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class RestoreSettingType(str, Enum):
    """
    Keys of per-account, per-coin restore settings.

    Declaration order is the order in which missing keys are requested.
    """
    BIRTHDAY_HEIGHT = "birthday_height"


class CoinType(str, Enum):
    """Supported chain families."""
    BITCOIN = "bitcoin"
    ETHEREUM = "ethereum"
    EOS = "eos"
    ZCASH = "zcash"

    @property
    def restore_setting_types(self) -> List[RestoreSettingType]:
        """Restore settings a restored account must supply for this chain."""
        return _RESTORE_SETTING_TYPES.get(self, [])


_RESTORE_SETTING_TYPES: Dict[CoinType, List[RestoreSettingType]] = {
    CoinType.ZCASH: [RestoreSettingType.BIRTHDAY_HEIGHT],
}


class Coin(BaseModel):
    """A supported asset on a given chain."""
    type: CoinType = Field(..., description="Chain family")
    code: str = Field(..., description="Ticker symbol, e.g. EOS")
    title: str = Field("", description="Human-readable name")
    decimals: int = Field(8, description="Display precision")
    token: Optional[str] = Field(None, description="Token contract, when the coin is a token")

    class Config:
        frozen = True

    @property
    def uid(self) -> str:
        return f"{self.type.value}:{self.code}"


class AccountOrigin(str, Enum):
    """Whether account keys were generated here or imported."""
    CREATED = "created"
    RESTORED = "restored"


class Account(BaseModel):
    """A user-held credential set."""
    id: str
    name: str
    origin: AccountOrigin
    eos_account: Optional[str] = Field(None, description="EOS account name bound to these keys")

    class Config:
        frozen = True


class Wallet(BaseModel):
    """A coin enabled for an account."""
    coin: Coin
    account: Account

    class Config:
        frozen = True
