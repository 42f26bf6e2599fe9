"""Adapter construction per coin type."""
import logging
from typing import Callable, Dict
from coinwallet.models.coin import CoinType, Wallet
from coinwallet.services.address_parser import AddressParser
from coinwallet.services.chain_adapters.base import Adapter
from coinwallet.services.chain_adapters.eos import EosAdapter
from coinwallet.services.chain_adapters.eos_kit_manager import EosKitManager
from coinwallet.utils.errors import UnsupportedCoinError

logger = logging.getLogger(__name__)

AdapterBuilder = Callable[[Wallet], Adapter]


class AdapterFactory:
    """Builds the adapter of a wallet from the builder registered for its coin type."""

    def __init__(self):
        self._builders: Dict[CoinType, AdapterBuilder] = {}

    def register(self, coin_type: CoinType, builder: AdapterBuilder) -> None:
        self._builders[coin_type] = builder

    def supports(self, coin_type: CoinType) -> bool:
        return coin_type in self._builders

    def adapter(self, wallet: Wallet) -> Adapter:
        """
        Create the adapter for a wallet.

        Raises:
            UnsupportedCoinError: If no builder is registered for the coin type
        """
        builder = self._builders.get(wallet.coin.type)
        if builder is None:
            raise UnsupportedCoinError(f"No adapter for coin type '{wallet.coin.type.value}'")

        adapter = builder(wallet)
        logger.info("Created %s for %s/%s", type(adapter).__name__, wallet.account.id, wallet.coin.uid)
        return adapter


def eos_adapter_builder(kit_manager: EosKitManager, default_token: str) -> AdapterBuilder:
    address_parser = AddressParser(valid_scheme="eos")

    def build(wallet: Wallet) -> Adapter:
        return EosAdapter(
            wallet=wallet,
            eos_kit=kit_manager.kit(wallet.account),
            address_parser=address_parser,
            token=wallet.coin.token or default_token,
            symbol=wallet.coin.code,
            decimals=wallet.coin.decimals
        )

    return build
