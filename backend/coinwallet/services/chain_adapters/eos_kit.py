"""EOS kit: account state and history from an EOS node's HTTP RPC."""
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol
import base58
import httpx
from pydantic import BaseModel
from coinwallet.services.reactive import BehaviorRelay, Observable
from coinwallet.utils.errors import AdapterValidationError, EosKitError, ValidationErrorReason

logger = logging.getLogger(__name__)

WIF_PREFIX = 0x80


class SyncState(str, Enum):
    SYNCED = "synced"
    NOT_SYNCED = "not_synced"
    SYNCING = "syncing"


class Quantity(BaseModel):
    """An EOS asset amount such as `1.0000 EOS`."""
    amount: Decimal
    symbol: str

    class Config:
        frozen = True

    @classmethod
    def parse(cls, value: str) -> "Quantity":
        try:
            amount, symbol = value.split(" ")
            return cls(amount=Decimal(amount), symbol=symbol)
        except (ValueError, InvalidOperation):
            raise EosKitError(f"Malformed quantity: {value!r}")


class EosTransaction(BaseModel):
    """A token transfer action as recorded by the node."""
    id: str
    from_: str
    to: str
    quantity: Quantity
    memo: str = ""
    date: datetime
    block_number: Optional[int] = None
    action_sequence: int

    class Config:
        frozen = True


class Asset:
    """A token registered with the kit, with its own balance, state and history."""

    def __init__(self, token: str, symbol: str, decimals: int = 4):
        self.token = token
        self.symbol = symbol
        self.decimals = decimals

        self._balance_relay: BehaviorRelay[Decimal] = BehaviorRelay(Decimal("0"))
        self._sync_state_relay: BehaviorRelay[SyncState] = BehaviorRelay(SyncState.NOT_SYNCED)
        self._transactions_relay: BehaviorRelay[List[EosTransaction]] = BehaviorRelay([])

    @property
    def balance(self) -> Decimal:
        return self._balance_relay.value

    @property
    def balance_observable(self) -> Observable[Decimal]:
        return self._balance_relay.as_observable()

    @property
    def sync_state(self) -> SyncState:
        return self._sync_state_relay.value

    @property
    def sync_state_observable(self) -> Observable[SyncState]:
        return self._sync_state_relay.as_observable()

    @property
    def transactions(self) -> List[EosTransaction]:
        return self._transactions_relay.value

    @property
    def transactions_observable(self) -> Observable[List[EosTransaction]]:
        return self._transactions_relay.as_observable()

    def format_quantity(self, amount: Decimal) -> str:
        return f"{amount:.{self.decimals}f} {self.symbol}"

    def set_balance(self, balance: Decimal) -> None:
        if balance != self.balance:
            self._balance_relay.accept(balance)

    def set_sync_state(self, state: SyncState) -> None:
        if state != self.sync_state:
            self._sync_state_relay.accept(state)

    def set_transactions(self, transactions: List[EosTransaction]) -> None:
        self._transactions_relay.accept(list(transactions))


class EosKit(Protocol):
    """What an EOS adapter needs from the kit."""

    @property
    def account(self) -> str:
        ...

    @property
    def irreversible_block_height(self) -> Optional[int]:
        ...

    @property
    def irreversible_block_height_observable(self) -> Observable[Optional[int]]:
        ...

    def register(self, token: str, symbol: str, decimals: int = 4) -> Asset:
        ...

    async def transactions(
        self,
        asset: Asset,
        from_action_sequence: Optional[int] = None,
        limit: int = 50
    ) -> List[EosTransaction]:
        ...

    async def send(self, asset: Asset, to: str, amount: Decimal, memo: str) -> str:
        ...


class TransactionSigner(Protocol):
    """Signs transfer actions into a push_transaction payload."""

    async def sign(self, actions: List[Dict[str, Any]], chain_info: Dict[str, Any]) -> Dict[str, Any]:
        ...


def validate_private_key(private_key: str) -> None:
    """
    Validate a WIF-encoded EOS private key.

    Raises:
        AdapterValidationError: INVALID_PRIVATE_KEY if the checksum, prefix or length is wrong
    """
    try:
        decoded = base58.b58decode_check(private_key)
    except ValueError:
        raise AdapterValidationError(ValidationErrorReason.INVALID_PRIVATE_KEY)

    if len(decoded) != 33 or decoded[0] != WIF_PREFIX:
        raise AdapterValidationError(ValidationErrorReason.INVALID_PRIVATE_KEY)


class HttpEosKit:
    """Kit backed by the chain and history RPC of an EOS node."""

    def __init__(
        self,
        account: str,
        rpc_url: str,
        signer: Optional[TransactionSigner] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        page_size: int = 50
    ):
        self._account = account
        self.rpc_url = rpc_url.rstrip("/")
        self.signer = signer
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.page_size = page_size

        self._assets: List[Asset] = []
        self._irreversible_block_height_relay: BehaviorRelay[Optional[int]] = BehaviorRelay(None)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    @property
    def account(self) -> str:
        return self._account

    @property
    def irreversible_block_height(self) -> Optional[int]:
        return self._irreversible_block_height_relay.value

    @property
    def irreversible_block_height_observable(self) -> Observable[Optional[int]]:
        return self._irreversible_block_height_relay.as_observable()

    @property
    def assets(self) -> List[Asset]:
        return list(self._assets)

    def register(self, token: str, symbol: str, decimals: int = 4) -> Asset:
        for asset in self._assets:
            if asset.token == token and asset.symbol == symbol:
                return asset

        asset = Asset(token=token, symbol=symbol, decimals=decimals)
        self._assets.append(asset)
        return asset

    async def _rpc_call(self, path: str, payload: Dict[str, Any]) -> Any:
        """Make RPC call to the EOS node."""
        try:
            response = await self.client.post(f"{self.rpc_url}/v1/{path}", json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise EosKitError(f"EOS RPC {path} failed with status {e.response.status_code}")
        except httpx.HTTPError as e:
            raise EosKitError(f"HTTP error calling EOS RPC: {str(e)}")
        except ValueError as e:
            raise EosKitError(f"EOS RPC {path} returned a malformed body: {str(e)}")

    async def _rpc_object(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = await self._rpc_call(path, payload)
        if not isinstance(result, dict):
            raise EosKitError(f"EOS RPC {path} returned {type(result).__name__}, expected an object")
        return result

    async def refresh(self) -> None:
        """
        Pull chain head, balances and latest history for every registered asset.

        Failures are reported through each asset's sync state.
        """
        for asset in self._assets:
            asset.set_sync_state(SyncState.SYNCING)

        try:
            info = await self._rpc_object("chain/get_info", {})
            height = info.get("last_irreversible_block_num")
            if not isinstance(height, int):
                raise EosKitError(f"Malformed irreversible block height: {height!r}")
            self._irreversible_block_height_relay.accept(height)

            for asset in self._assets:
                balance = await self._fetch_balance(asset)
                transactions = await self.transactions(asset, limit=self.page_size)
                asset.set_balance(balance)
                asset.set_transactions(transactions)
                asset.set_sync_state(SyncState.SYNCED)
        except EosKitError as e:
            logger.warning("EOS kit refresh failed for %s: %s", self._account, e)
            for asset in self._assets:
                asset.set_sync_state(SyncState.NOT_SYNCED)

    async def _fetch_balance(self, asset: Asset) -> Decimal:
        result = await self._rpc_call("chain/get_currency_balance", {
            "code": asset.token,
            "account": self._account,
            "symbol": asset.symbol
        })
        if not result:
            return Decimal("0")
        if not isinstance(result, list) or not isinstance(result[0], str):
            raise EosKitError(f"Malformed balance: {result!r}")
        return Quantity.parse(result[0]).amount

    async def transactions(
        self,
        asset: Asset,
        from_action_sequence: Optional[int] = None,
        limit: int = 50
    ) -> List[EosTransaction]:
        """
        Fetch transfers of the asset, newest first.

        Args:
            asset: Registered asset
            from_action_sequence: Only actions strictly older than this sequence
            limit: Maximum number of actions to scan
        """
        if limit <= 0:
            return []

        if from_action_sequence is None:
            pos, offset = -1, -limit
        else:
            if from_action_sequence <= 0:
                return []
            pos, offset = from_action_sequence - 1, -(limit - 1)

        result = await self._rpc_object("history/get_actions", {
            "account_name": self._account,
            "pos": pos,
            "offset": offset
        })

        actions = result.get("actions", [])
        if not isinstance(actions, list):
            raise EosKitError(f"Malformed actions: {actions!r}")

        transactions = []
        for action in actions:
            try:
                transaction = self._parse_action(asset, action)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise EosKitError(f"Malformed action from EOS RPC: {e!r}")
            if transaction is None:
                continue
            if from_action_sequence is not None and transaction.action_sequence >= from_action_sequence:
                continue
            transactions.append(transaction)

        transactions.sort(key=lambda tx: tx.action_sequence, reverse=True)
        return transactions[:limit]

    def _parse_action(self, asset: Asset, action: Dict[str, Any]) -> Optional[EosTransaction]:
        trace = action.get("action_trace", {})
        act = trace.get("act", {})
        if act.get("account") != asset.token or act.get("name") != "transfer":
            return None

        # The same transfer is recorded once per notified account
        receiver = trace.get("receiver")
        if receiver is not None and receiver != self._account:
            return None

        data = act.get("data", {})
        quantity = Quantity.parse(data.get("quantity", ""))
        if quantity.symbol != asset.symbol:
            return None

        date = datetime.fromisoformat(action["block_time"]).replace(tzinfo=timezone.utc)

        return EosTransaction(
            id=trace.get("trx_id", ""),
            from_=data.get("from", ""),
            to=data.get("to", ""),
            quantity=quantity,
            memo=data.get("memo", ""),
            date=date,
            block_number=action.get("block_num"),
            action_sequence=action["account_action_seq"]
        )

    async def send(self, asset: Asset, to: str, amount: Decimal, memo: str) -> str:
        """Sign and push a transfer, returning the transaction id."""
        if self.signer is None:
            raise EosKitError("No transaction signer configured")

        action = {
            "account": asset.token,
            "name": "transfer",
            "authorization": [{"actor": self._account, "permission": "active"}],
            "data": {
                "from": self._account,
                "to": to,
                "quantity": asset.format_quantity(amount),
                "memo": memo
            }
        }

        info = await self._rpc_object("chain/get_info", {})
        signed = await self.signer.sign([action], info)
        result = await self._rpc_object("chain/push_transaction", signed)
        transaction_id = result.get("transaction_id", "")
        logger.info("Pushed transfer %s of %s to %s", transaction_id, asset.format_quantity(amount), to)
        return transaction_id
