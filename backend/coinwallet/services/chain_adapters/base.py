"""Abstract base class for chain adapters."""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional, Tuple
from coinwallet.models.adapter import (
    AdapterState,
    FeeRatePriority,
    ParamsLike,
    PaymentRequestAddress,
    SendStateError,
)
from coinwallet.models.transaction import TransactionRecord
from coinwallet.services.reactive import Observable

# (transaction hash, inter-transaction index) of the oldest record already loaded
TransactionCursor = Tuple[str, int]


class Adapter(ABC):
    """Uniform surface of a wallet on any blockchain."""

    @property
    @abstractmethod
    def confirmations_threshold(self) -> int:
        """Number of blocks after which a transaction is final."""
        pass

    @property
    @abstractmethod
    def refreshable(self) -> bool:
        pass

    @abstractmethod
    def start(self) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def refresh(self) -> None:
        pass

    @property
    @abstractmethod
    def last_block_height(self) -> Optional[int]:
        pass

    @property
    @abstractmethod
    def last_block_height_updated_observable(self) -> Observable[None]:
        pass

    @property
    @abstractmethod
    def state(self) -> AdapterState:
        pass

    @property
    @abstractmethod
    def state_updated_observable(self) -> Observable[None]:
        pass

    @property
    @abstractmethod
    def balance(self) -> Decimal:
        pass

    @property
    @abstractmethod
    def balance_updated_observable(self) -> Observable[None]:
        """Fires on every balance change; new observers are notified immediately."""
        pass

    @property
    @abstractmethod
    def transaction_records_observable(self) -> Observable[List[TransactionRecord]]:
        """
        Push stream of the full transaction list.

        Each emission is a complete snapshot that replaces the previous one.
        """
        pass

    @abstractmethod
    async def transactions_single(
        self,
        from_: Optional[TransactionCursor] = None,
        limit: int = 50
    ) -> List[TransactionRecord]:
        """
        Fetch one page of transaction history.

        Args:
            from_: Cursor of the oldest record already loaded, None for the newest page
            limit: Maximum number of records to return

        Returns:
            Up to `limit` records strictly older than the cursor, newest first
        """
        pass

    @abstractmethod
    async def send_single(self, params: ParamsLike) -> None:
        """
        Submit a transfer.

        Raises:
            AdapterError: WRONG_PARAMETERS before any chain call if parameters are invalid
        """
        pass

    @abstractmethod
    def available_balance(self, params: ParamsLike) -> Decimal:
        pass

    @abstractmethod
    def fee_rate(self, priority: FeeRatePriority) -> int:
        pass

    @abstractmethod
    def fee(self, params: ParamsLike) -> Decimal:
        pass

    @abstractmethod
    def validate_address(self, address: str) -> None:
        """
        Validate an address format.

        Raises:
            AdapterValidationError: If the address is malformed for this chain
        """
        pass

    @abstractmethod
    def validate_params(self, params: ParamsLike) -> List[SendStateError]:
        """Soft pre-send checks; an empty list means the send may proceed."""
        pass

    @abstractmethod
    def parse_payment_address(self, payment_address: str) -> PaymentRequestAddress:
        pass

    @property
    @abstractmethod
    def receive_address(self) -> str:
        pass

    @property
    def debug_info(self) -> str:
        return ""
