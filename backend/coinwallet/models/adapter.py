"""Models shared by every chain adapter."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Union
from pydantic import BaseModel, Field
from coinwallet.utils.errors import AdapterError, AdapterErrorReason


class AdapterField(str, Enum):
    """Keys of untyped send parameter maps."""
    AMOUNT = "amount"
    ADDRESS = "address"
    MEMO = "memo"


class AdapterStateKind(str, Enum):
    SYNCED = "synced"
    NOT_SYNCED = "not_synced"
    SYNCING = "syncing"


class AdapterState(BaseModel):
    """Sync state of an adapter."""
    kind: AdapterStateKind
    progress: Optional[int] = Field(None, description="Sync progress in percent")
    last_block_date: Optional[datetime] = None

    class Config:
        frozen = True

    @classmethod
    def synced(cls) -> "AdapterState":
        return cls(kind=AdapterStateKind.SYNCED)

    @classmethod
    def not_synced(cls) -> "AdapterState":
        return cls(kind=AdapterStateKind.NOT_SYNCED)

    @classmethod
    def syncing(cls, progress: int, last_block_date: Optional[datetime] = None) -> "AdapterState":
        return cls(kind=AdapterStateKind.SYNCING, progress=progress, last_block_date=last_block_date)


class FeeRatePriority(str, Enum):
    LOWEST = "lowest"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    HIGHEST = "highest"


class SendParameters(BaseModel):
    """Typed parameters of a send operation."""
    amount: Decimal = Field(..., allow_inf_nan=False, description="Amount in coin units")
    address: str = Field(..., min_length=1, description="Recipient address")
    memo: Optional[str] = Field(None, description="Optional memo attached to the transfer")

    class Config:
        frozen = True

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "SendParameters":
        """
        Build typed parameters from an untyped map.

        Raises:
            AdapterError: WRONG_PARAMETERS if amount or address is missing or mistyped
        """
        amount = amount_from_params(params)
        address = params.get(AdapterField.ADDRESS.value)
        if not isinstance(address, str) or not address:
            raise AdapterError(AdapterErrorReason.WRONG_PARAMETERS, "address is missing or not a string")

        memo = params.get(AdapterField.MEMO.value)
        return cls(
            amount=amount,
            address=address,
            memo=memo if isinstance(memo, str) else None
        )


ParamsLike = Union[SendParameters, Mapping[str, Any]]


def amount_from_params(params: ParamsLike) -> Decimal:
    """Extract the amount from typed or untyped parameters."""
    if isinstance(params, SendParameters):
        return params.amount

    amount = params.get(AdapterField.AMOUNT.value)
    if isinstance(amount, bool) or not isinstance(amount, (Decimal, int)):
        raise AdapterError(AdapterErrorReason.WRONG_PARAMETERS, "amount is missing or not a decimal")

    amount = Decimal(amount)
    if not amount.is_finite():
        raise AdapterError(AdapterErrorReason.WRONG_PARAMETERS, "amount is not a finite decimal")
    return amount


def send_parameters(params: ParamsLike) -> SendParameters:
    if isinstance(params, SendParameters):
        return params
    return SendParameters.from_params(params)


class SendStateErrorKind(str, Enum):
    INSUFFICIENT_AMOUNT = "insufficient_amount"
    MAXIMUM_AMOUNT_EXCEEDED = "maximum_amount_exceeded"
    TOO_FEW_AMOUNT = "too_few_amount"


class SendStateError(BaseModel):
    """Soft pre-send error, returned rather than raised."""
    kind: SendStateErrorKind
    value: Decimal = Field(..., description="Available balance or the bound that was crossed")

    class Config:
        frozen = True

    @classmethod
    def insufficient_amount(cls, available_balance: Decimal) -> "SendStateError":
        return cls(kind=SendStateErrorKind.INSUFFICIENT_AMOUNT, value=available_balance)

    @classmethod
    def maximum_amount_exceeded(cls, maximum: Decimal) -> "SendStateError":
        return cls(kind=SendStateErrorKind.MAXIMUM_AMOUNT_EXCEEDED, value=maximum)

    @classmethod
    def too_few_amount(cls, minimum: Decimal) -> "SendStateError":
        return cls(kind=SendStateErrorKind.TOO_FEW_AMOUNT, value=minimum)


class PaymentRequestAddress(BaseModel):
    """Result of parsing a payment URI."""
    address: str
    amount: Optional[Decimal] = None
    error: Optional[Exception] = Field(None, description="Validation error of the embedded address")

    class Config:
        frozen = True
        arbitrary_types_allowed = True
