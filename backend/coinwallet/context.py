"""Explicit wiring of services, built once per application."""
from pathlib import Path
from typing import Dict, List, Optional
from coinwallet.config import Settings
from coinwallet.models.coin import Account, Coin, CoinType, Wallet
from coinwallet.services.adapter_factory import AdapterFactory, eos_adapter_builder
from coinwallet.services.chain_adapters.eos_kit import TransactionSigner
from coinwallet.services.chain_adapters.eos_kit_manager import EosKitManager
from coinwallet.services.manage_wallets_service import ManageWalletsService
from coinwallet.services.restore_settings_manager import (
    InMemoryRestoreSettingsStorage,
    JsonFileRestoreSettingsStorage,
    RestoreSettingsManager,
    RestoreSettingsStorage,
)
from coinwallet.services.restore_settings_service import RestoreSettingsService
from coinwallet.utils.errors import WalletNotFoundError


def default_coins(settings: Settings) -> List[Coin]:
    return [
        Coin(
            type=CoinType.EOS,
            code=settings.eos_symbol,
            title="EOS",
            decimals=settings.eos_decimals,
            token=settings.eos_token
        ),
        Coin(type=CoinType.ZCASH, code="ZEC", title="Zcash", decimals=8),
    ]


class AppContext:
    """Holds every collaborator; routes receive it instead of reaching for globals."""

    def __init__(
        self,
        settings: Settings,
        eos_kit_manager: Optional[EosKitManager] = None,
        storage: Optional[RestoreSettingsStorage] = None,
        signer: Optional[TransactionSigner] = None
    ):
        self.settings = settings

        if storage is None:
            if settings.restore_settings_path:
                storage = JsonFileRestoreSettingsStorage(Path(settings.restore_settings_path))
            else:
                storage = InMemoryRestoreSettingsStorage()

        self.eos_kit_manager = eos_kit_manager or EosKitManager(
            rpc_url=settings.eos_rpc_url,
            signer=signer,
            timeout=settings.eos_http_timeout,
            page_size=settings.eos_transactions_page_size
        )

        self.restore_settings_manager = RestoreSettingsManager(storage)
        self.restore_settings_service = RestoreSettingsService(self.restore_settings_manager)

        self.adapter_factory = AdapterFactory()
        self.adapter_factory.register(CoinType.EOS, eos_adapter_builder(self.eos_kit_manager, settings.eos_token))

        self.manage_wallets_service = ManageWalletsService(self.restore_settings_service, self.adapter_factory)

        self.coins: Dict[str, Coin] = {coin.uid: coin for coin in default_coins(settings)}
        self.accounts: Dict[str, Account] = {}

    def coin(self, coin_uid: str) -> Coin:
        if coin_uid not in self.coins:
            raise WalletNotFoundError(f"Unknown coin '{coin_uid}'")
        return self.coins[coin_uid]

    def account(self, account_id: str) -> Account:
        if account_id not in self.accounts:
            raise WalletNotFoundError(f"Unknown account '{account_id}'")
        return self.accounts[account_id]

    def wallet(self, coin_uid: str, account_id: str) -> Wallet:
        return Wallet(coin=self.coin(coin_uid), account=self.account(account_id))

    async def close(self) -> None:
        self.manage_wallets_service.close()
        await self.eos_kit_manager.close()
