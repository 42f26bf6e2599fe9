"""Restore settings models."""
import uuid
from typing import Dict, Optional
from pydantic import BaseModel, Field
from coinwallet.models.coin import Coin, RestoreSettingType

RestoreSettings = Dict[RestoreSettingType, str]


class CoinWithSettings(BaseModel):
    """A coin paired with the settings it was approved with."""
    coin: Coin
    settings: RestoreSettings = Field(default_factory=dict)
    request_id: Optional[str] = Field(None, description="Request this approval answers, if any")

    class Config:
        frozen = True


class RestoreSettingsRequest(BaseModel):
    """User input required before a coin can be enabled."""
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    coin: Coin
    type: RestoreSettingType

    class Config:
        frozen = True
