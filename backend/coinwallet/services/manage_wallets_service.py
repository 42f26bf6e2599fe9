"""Coin-addition flow: restore settings negotiation followed by adapter construction."""
import logging
import uuid
from typing import Dict, List, Union
from coinwallet.models.coin import Account, Coin, Wallet
from coinwallet.models.restore_settings import CoinWithSettings, RestoreSettingsRequest
from coinwallet.services.adapter_factory import AdapterFactory
from coinwallet.services.chain_adapters.base import Adapter
from coinwallet.services.reactive import DisposeBag, Observable, PublishRelay
from coinwallet.services.restore_settings_service import RestoreSettingsService
from coinwallet.utils.errors import WalletNotFoundError

logger = logging.getLogger(__name__)


class _PendingEnable:
    def __init__(self, coin: Coin, account: Account, request_id: str):
        self.coin = coin
        self.account = account
        self.request_id = request_id


class ManageWalletsService:
    """
    Enables coins for accounts.

    Enabling asks the restore settings service for approval; once approved, the
    wallet's adapter is built and the resolved settings are saved for the account.
    Each enable is bound to its own request id, so concurrent enables of the same
    coin for different accounts never answer each other.
    """

    def __init__(self, restore_settings_service: RestoreSettingsService, adapter_factory: AdapterFactory):
        self.restore_settings_service = restore_settings_service
        self.adapter_factory = adapter_factory

        self._adapters: Dict[Wallet, Adapter] = {}
        self._pending: Dict[str, _PendingEnable] = {}
        self._wallets_relay: PublishRelay[List[Wallet]] = PublishRelay()
        self._cancel_enable_coin_relay: PublishRelay[Coin] = PublishRelay()

        self._disposables = DisposeBag()
        self._disposables.add(restore_settings_service.approve_settings_observable.subscribe(self._handle_approve))
        self._disposables.add(restore_settings_service.reject_approve_settings_observable.subscribe(self._handle_reject))

    @property
    def wallets(self) -> List[Wallet]:
        return list(self._adapters.keys())

    @property
    def wallets_observable(self) -> Observable[List[Wallet]]:
        return self._wallets_relay.as_observable()

    @property
    def cancel_enable_coin_observable(self) -> Observable[Coin]:
        return self._cancel_enable_coin_relay.as_observable()

    def adapter(self, wallet: Wallet) -> Adapter:
        adapter = self._adapters.get(wallet)
        if adapter is None:
            raise WalletNotFoundError(f"Wallet {wallet.coin.uid} is not enabled for {wallet.account.id}")
        return adapter

    def enable(self, coin: Coin, account: Account) -> Union[CoinWithSettings, RestoreSettingsRequest]:
        """
        Start enabling a coin.

        Returns the approval when the wallet was created right away, or the
        request that has to be answered first.
        """
        pending = _PendingEnable(coin, account, uuid.uuid4().hex)
        self._pending[pending.request_id] = pending
        try:
            return self.restore_settings_service.approve_settings(coin, account, request_id=pending.request_id)
        except Exception:
            self._pending.pop(pending.request_id, None)
            raise

    def disable(self, wallet: Wallet) -> None:
        adapter = self._adapters.pop(wallet, None)
        if adapter is None:
            raise WalletNotFoundError(f"Wallet {wallet.coin.uid} is not enabled for {wallet.account.id}")
        adapter.stop()
        self._wallets_relay.accept(self.wallets)

    def close(self) -> None:
        self._disposables.dispose()
        for adapter in self._adapters.values():
            adapter.stop()
        self._adapters.clear()
        self._pending.clear()

    def _handle_approve(self, coin_with_settings: CoinWithSettings) -> None:
        request_id = coin_with_settings.request_id
        pending = self._pending.pop(request_id, None) if request_id is not None else None
        if pending is None:
            # Approvals requested by another flow
            return

        coin = coin_with_settings.coin
        account = pending.account
        wallet = Wallet(coin=coin, account=account)
        adapter = self._adapters.get(wallet)
        if adapter is None:
            adapter = self.adapter_factory.adapter(wallet)

        if coin_with_settings.settings:
            self.restore_settings_service.save(coin_with_settings.settings, account, coin)

        if wallet not in self._adapters:
            adapter.start()
            self._adapters[wallet] = adapter
            logger.info("Enabled %s for %s", coin.uid, account.id)

        self._wallets_relay.accept(self.wallets)

    def _handle_reject(self, coin: Coin) -> None:
        # The cancelled request has already left the service's pending set
        for request_id, pending in list(self._pending.items()):
            if pending.coin == coin and self.restore_settings_service.pending_request(request_id) is None:
                del self._pending[request_id]
                logger.info("Enabling %s for %s cancelled", coin.uid, pending.account.id)
                self._cancel_enable_coin_relay.accept(coin)
                return
