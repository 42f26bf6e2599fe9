"""EOS chain adapter."""
import logging
import re
import weakref
from decimal import Decimal
from typing import List, Optional
from coinwallet.config import settings
from coinwallet.models.adapter import (
    AdapterState,
    FeeRatePriority,
    ParamsLike,
    PaymentRequestAddress,
    SendStateError,
    amount_from_params,
    send_parameters,
)
from coinwallet.models.coin import Wallet
from coinwallet.models.transaction import TransactionAddress, TransactionRecord
from coinwallet.services.address_parser import AddressParser
from coinwallet.services.chain_adapters.base import Adapter, TransactionCursor
from coinwallet.services.chain_adapters.eos_kit import (
    EosKit,
    EosTransaction,
    SyncState,
    validate_private_key,
)
from coinwallet.services.reactive import Observable
from coinwallet.utils.errors import AdapterValidationError, ValidationErrorReason

logger = logging.getLogger(__name__)

# Up to 12 characters of [a-z1-5.], starting with a letter and not ending with a dot
ACCOUNT_NAME_PATTERN = re.compile(r"^[a-z][a-z1-5.]{0,10}[a-z1-5]$")

# Kits do not report granular sync progress
SYNCING_PROGRESS_PLACEHOLDER = 50


def validate_account(account: str) -> None:
    """
    Validate an EOS account name.

    Raises:
        AdapterValidationError: INVALID_ACCOUNT if the name is malformed
    """
    if not ACCOUNT_NAME_PATTERN.match(account) or ".." in account:
        raise AdapterValidationError(ValidationErrorReason.INVALID_ACCOUNT, f"Invalid EOS account: {account!r}")


class EosAdapter(Adapter):
    """
    Adapter for one token on an EOS account.

    Lifecycle is driven by EosKitManager, so start/stop/refresh are no-ops.
    """

    IRREVERSIBLE_THRESHOLD = 330

    def __init__(
        self,
        wallet: Wallet,
        eos_kit: EosKit,
        address_parser: AddressParser,
        token: str,
        symbol: str,
        decimals: int = 4
    ):
        self.wallet = wallet
        self.eos_kit = eos_kit
        self.address_parser = address_parser
        self.decimals = decimals

        self.asset = eos_kit.register(token, symbol, decimals)

    def _transaction_record(self, transaction: EosTransaction) -> TransactionRecord:
        from_address = TransactionAddress(
            address=transaction.from_,
            mine=transaction.from_ == self.eos_kit.account
        )
        to_address = TransactionAddress(
            address=transaction.to,
            mine=transaction.to == self.eos_kit.account
        )

        amount = transaction.quantity.amount
        if from_address.mine:
            amount = -amount

        return TransactionRecord(
            transaction_hash=transaction.id,
            transaction_index=0,
            inter_transaction_index=transaction.action_sequence,
            block_height=transaction.block_number,
            amount=amount,
            date=transaction.date,
            from_addresses=[from_address],
            to_addresses=[to_address]
        )

    @staticmethod
    def validate_account(account: str) -> None:
        validate_account(account)

    @staticmethod
    def validate_private_key(private_key: str) -> None:
        validate_private_key(private_key)

    @property
    def confirmations_threshold(self) -> int:
        return self.IRREVERSIBLE_THRESHOLD

    @property
    def refreshable(self) -> bool:
        return True

    def start(self) -> None:
        # started via EosKitManager
        pass

    def stop(self) -> None:
        # stopped via EosKitManager
        pass

    def refresh(self) -> None:
        # refreshed via EosKitManager
        pass

    @property
    def last_block_height(self) -> Optional[int]:
        height = self.eos_kit.irreversible_block_height
        if height is None:
            return None
        return height + self.IRREVERSIBLE_THRESHOLD

    @property
    def last_block_height_updated_observable(self) -> Observable[None]:
        return self.eos_kit.irreversible_block_height_observable.map(lambda _: None)

    @property
    def state(self) -> AdapterState:
        sync_state = self.asset.sync_state
        if sync_state == SyncState.SYNCED:
            return AdapterState.synced()
        if sync_state == SyncState.NOT_SYNCED:
            return AdapterState.not_synced()
        return AdapterState.syncing(progress=SYNCING_PROGRESS_PLACEHOLDER)

    @property
    def state_updated_observable(self) -> Observable[None]:
        return self.asset.sync_state_observable.map(lambda _: None)

    @property
    def balance(self) -> Decimal:
        return self.asset.balance

    @property
    def balance_updated_observable(self) -> Observable[None]:
        return self.asset.balance_observable.map(lambda _: None)

    @property
    def transaction_records_observable(self) -> Observable[List[TransactionRecord]]:
        adapter = weakref.ref(self)

        def records(transactions: List[EosTransaction]) -> List[TransactionRecord]:
            this = adapter()
            if this is None:
                return []
            return [this._transaction_record(tx) for tx in transactions]

        return self.asset.transactions_observable.map(records)

    async def transactions_single(
        self,
        from_: Optional[TransactionCursor] = None,
        limit: int = 50
    ) -> List[TransactionRecord]:
        transactions = await self.eos_kit.transactions(
            self.asset,
            from_action_sequence=from_[1] if from_ is not None else None,
            limit=limit
        )
        return [self._transaction_record(tx) for tx in transactions]

    async def send_single(self, params: ParamsLike) -> None:
        parameters = send_parameters(params)
        logger.debug("Sending %s %s to %s", parameters.amount, self.asset.symbol, parameters.address)

        await self.eos_kit.send(
            self.asset,
            to=parameters.address,
            amount=parameters.amount,
            memo=parameters.memo if parameters.memo is not None else settings.eos_default_memo
        )

    def available_balance(self, params: ParamsLike) -> Decimal:
        return self.asset.balance

    def fee_rate(self, priority: FeeRatePriority) -> int:
        return 0

    def fee(self, params: ParamsLike) -> Decimal:
        return Decimal("0")

    def validate_address(self, address: str) -> None:
        validate_account(address)

    def validate_params(self, params: ParamsLike) -> List[SendStateError]:
        amount = amount_from_params(params)

        errors = []
        balance = self.asset.balance
        if amount > balance:
            errors.append(SendStateError.insufficient_amount(balance))

        return errors

    def parse_payment_address(self, payment_address: str) -> PaymentRequestAddress:
        payment_data = self.address_parser.parse(payment_address)

        validation_error = None
        try:
            self.validate_address(payment_data.address)
        except AdapterValidationError as e:
            validation_error = e

        return PaymentRequestAddress(
            address=payment_data.address,
            amount=payment_data.amount,
            error=validation_error
        )

    @property
    def receive_address(self) -> str:
        return self.eos_kit.account
