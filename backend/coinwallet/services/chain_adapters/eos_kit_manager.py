"""Lifecycle of EOS kits, one per account."""
import logging
from typing import Callable, Dict, Optional
from coinwallet.models.coin import Account
from coinwallet.services.chain_adapters.eos import validate_account
from coinwallet.services.chain_adapters.eos_kit import HttpEosKit, TransactionSigner
from coinwallet.utils.errors import AdapterValidationError, ValidationErrorReason

logger = logging.getLogger(__name__)

KitFactory = Callable[[str], HttpEosKit]


class EosKitManager:
    """Creates, refreshes and closes the kits shared by every EOS token of an account."""

    def __init__(
        self,
        rpc_url: str,
        signer: Optional[TransactionSigner] = None,
        timeout: float = 30.0,
        page_size: int = 50,
        kit_factory: Optional[KitFactory] = None
    ):
        self.rpc_url = rpc_url
        self.signer = signer
        self.timeout = timeout
        self.page_size = page_size
        self._kit_factory = kit_factory or self._create_kit
        self._kits: Dict[str, HttpEosKit] = {}

    def _create_kit(self, eos_account: str) -> HttpEosKit:
        return HttpEosKit(
            account=eos_account,
            rpc_url=self.rpc_url,
            signer=self.signer,
            timeout=self.timeout,
            page_size=self.page_size
        )

    def kit(self, account: Account) -> HttpEosKit:
        if account.id in self._kits:
            return self._kits[account.id]

        if not account.eos_account:
            raise AdapterValidationError(
                ValidationErrorReason.INVALID_ACCOUNT,
                f"Account {account.id} has no EOS account name"
            )
        validate_account(account.eos_account)

        kit = self._kit_factory(account.eos_account)
        self._kits[account.id] = kit
        logger.info("Created EOS kit for %s (%s)", account.id, account.eos_account)
        return kit

    async def refresh(self) -> None:
        for kit in list(self._kits.values()):
            await kit.refresh()

    async def unlink(self, account_id: str) -> None:
        kit = self._kits.pop(account_id, None)
        if kit is not None:
            await kit.aclose()

    async def close(self) -> None:
        kits, self._kits = self._kits, {}
        for kit in kits.values():
            await kit.aclose()
