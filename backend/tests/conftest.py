from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

import pytest

from coinwallet.models.coin import Account, AccountOrigin, Coin, CoinType
from coinwallet.services.chain_adapters.eos_kit import Asset, EosTransaction, Quantity
from coinwallet.services.reactive import BehaviorRelay, Observable
from coinwallet.services.restore_settings_manager import (
    InMemoryRestoreSettingsStorage,
    RestoreSettingsManager,
)
from coinwallet.services.restore_settings_service import RestoreSettingsService


class FakeEosKit:
    """In-memory kit that records what the adapter asks of it."""

    def __init__(self, account: str = "alice"):
        self.account = account
        self.history: List[EosTransaction] = []
        self.sent: List[tuple] = []
        self.transaction_calls = 0
        self.fail_with: Optional[Exception] = None
        self.closed = False
        self._height: BehaviorRelay[Optional[int]] = BehaviorRelay(None)
        self._assets: List[Asset] = []

    @property
    def irreversible_block_height(self) -> Optional[int]:
        return self._height.value

    @property
    def irreversible_block_height_observable(self) -> Observable[Optional[int]]:
        return self._height.as_observable()

    def set_irreversible_block_height(self, height: int) -> None:
        self._height.accept(height)

    def register(self, token: str, symbol: str, decimals: int = 4) -> Asset:
        asset = Asset(token=token, symbol=symbol, decimals=decimals)
        self._assets.append(asset)
        return asset

    async def transactions(self, asset, from_action_sequence=None, limit=50):
        self.transaction_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        transactions = sorted(self.history, key=lambda tx: tx.action_sequence, reverse=True)
        if from_action_sequence is not None:
            transactions = [tx for tx in transactions if tx.action_sequence < from_action_sequence]
        return transactions[:limit]

    async def send(self, asset, to, amount, memo):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append((asset.symbol, to, amount, memo))
        return "trx-id"

    async def refresh(self):
        pass

    async def aclose(self):
        self.closed = True


@pytest.fixture
def eos_coin():
    return Coin(type=CoinType.EOS, code="EOS", title="EOS", decimals=4, token="eosio.token")


@pytest.fixture
def zcash_coin():
    return Coin(type=CoinType.ZCASH, code="ZEC", title="Zcash", decimals=8)


@pytest.fixture
def created_account():
    return Account(id="created-1", name="Fresh", origin=AccountOrigin.CREATED, eos_account="alice")


@pytest.fixture
def restored_account():
    return Account(id="restored-1", name="Imported", origin=AccountOrigin.RESTORED, eos_account="alice")


@pytest.fixture
def restore_settings_manager():
    return RestoreSettingsManager(InMemoryRestoreSettingsStorage())


@pytest.fixture
def restore_settings_service(restore_settings_manager):
    return RestoreSettingsService(restore_settings_manager)


@pytest.fixture
def fake_kit():
    return FakeEosKit()


@pytest.fixture
def make_transaction():
    base_date = datetime(2021, 1, 1, tzinfo=timezone.utc)

    def make(sequence: int, from_: str = "bob", to: str = "alice", amount: str = "1.0000") -> EosTransaction:
        return EosTransaction(
            id=f"trx-{sequence}",
            from_=from_,
            to=to,
            quantity=Quantity(amount=Decimal(amount), symbol="EOS"),
            memo="",
            date=base_date + timedelta(minutes=sequence),
            block_number=1000 + sequence,
            action_sequence=sequence
        )

    return make
