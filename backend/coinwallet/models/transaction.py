"""Chain-agnostic transaction model."""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field


class TransactionAddress(BaseModel):
    """One side of a transfer."""
    address: str
    mine: bool = Field(..., description="Whether the address belongs to this wallet")

    class Config:
        frozen = True


class TransactionRecord(BaseModel):
    """Unified transaction model for all chains."""
    transaction_hash: str = Field(..., description="Transaction identifier")
    transaction_index: int = Field(0, description="Position inside the block")
    inter_transaction_index: int = Field(0, description="Secondary ordering key, e.g. action sequence")
    block_height: Optional[int] = Field(None, description="Block containing the transaction")
    amount: Decimal = Field(..., description="Signed amount, negative when sent by this wallet")
    date: datetime = Field(..., description="Block timestamp")
    from_addresses: List[TransactionAddress] = Field(default_factory=list)
    to_addresses: List[TransactionAddress] = Field(default_factory=list)

    class Config:
        frozen = True
        json_encoders = {
            Decimal: str,
            datetime: lambda v: v.isoformat()
        }

    @property
    def incoming(self) -> bool:
        return self.amount > 0
