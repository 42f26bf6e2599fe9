"""Negotiation of restore settings before a coin is enabled."""
import logging
import uuid
from typing import Dict, List, Optional, Union
from coinwallet.models.coin import Account, AccountOrigin, Coin, RestoreSettingType
from coinwallet.models.restore_settings import CoinWithSettings, RestoreSettings, RestoreSettingsRequest
from coinwallet.services.reactive import Observable, PublishRelay
from coinwallet.services.restore_settings_manager import RestoreSettingsManager
from coinwallet.utils.errors import RestoreSettingsError

logger = logging.getLogger(__name__)


class RestoreSettingsService:
    """
    Decides whether enabling a coin needs user input first.

    Every call to approve_settings ends in exactly one of: an approval, or a
    request that is later resolved by enter() (approval) or cancel()
    (rejection). All three streams are live-only.
    """

    def __init__(self, manager: RestoreSettingsManager):
        self.manager = manager

        self._approve_settings_relay: PublishRelay[CoinWithSettings] = PublishRelay()
        self._reject_approve_settings_relay: PublishRelay[Coin] = PublishRelay()
        self._request_relay: PublishRelay[RestoreSettingsRequest] = PublishRelay()

        self._pending_requests: Dict[str, RestoreSettingsRequest] = {}

    @property
    def approve_settings_observable(self) -> Observable[CoinWithSettings]:
        return self._approve_settings_relay.as_observable()

    @property
    def reject_approve_settings_observable(self) -> Observable[Coin]:
        return self._reject_approve_settings_relay.as_observable()

    @property
    def request_observable(self) -> Observable[RestoreSettingsRequest]:
        return self._request_relay.as_observable()

    @property
    def pending_requests(self) -> List[RestoreSettingsRequest]:
        return list(self._pending_requests.values())

    def pending_request(self, request_id: str) -> Optional[RestoreSettingsRequest]:
        return self._pending_requests.get(request_id)

    def approve_settings(
        self,
        coin: Coin,
        account: Optional[Account] = None,
        request_id: Optional[str] = None
    ) -> Union[CoinWithSettings, RestoreSettingsRequest]:
        """
        Approve the coin immediately or emit a request for the first missing setting.

        Freshly created accounts have no history to skip, so they never need settings.

        Args:
            coin: Coin being enabled
            account: Account the coin is enabled for
            request_id: Correlation id carried by the approval or the request;
                generated when omitted

        Returns:
            The approval or request that was emitted
        """
        if request_id is None:
            request_id = uuid.uuid4().hex
        elif request_id in self._pending_requests:
            raise RestoreSettingsError(f"Request {request_id} is already pending")

        if account is None or account.origin == AccountOrigin.CREATED:
            approval = CoinWithSettings(coin=coin, settings={}, request_id=request_id)
            self._approve_settings_relay.accept(approval)
            return approval

        existing_settings = self.manager.settings(account, coin)
        required_types = coin.type.restore_setting_types

        for setting_type in RestoreSettingType:
            if setting_type in required_types and setting_type not in existing_settings:
                request = RestoreSettingsRequest(request_id=request_id, coin=coin, type=setting_type)
                self._pending_requests[request.request_id] = request
                logger.info("Requesting %s for %s (request %s)", setting_type.value, coin.uid, request.request_id)
                self._request_relay.accept(request)
                return request

        approval = CoinWithSettings(coin=coin, settings=existing_settings, request_id=request_id)
        self._approve_settings_relay.accept(approval)
        return approval

    def save(self, settings: RestoreSettings, account: Account, coin: Coin) -> None:
        self.manager.save(settings, account, coin)

    def enter(self, birthday_height: str, coin: Coin, request_id: Optional[str] = None) -> None:
        """Resolve a birthday height request with user input. Nothing is persisted here."""
        resolved_id = self._resolve(coin, request_id)

        settings: RestoreSettings = {RestoreSettingType.BIRTHDAY_HEIGHT: birthday_height}
        self._approve_settings_relay.accept(CoinWithSettings(coin=coin, settings=settings, request_id=resolved_id))

    def cancel(self, coin: Coin, request_id: Optional[str] = None) -> None:
        self._resolve(coin, request_id)
        self._reject_approve_settings_relay.accept(coin)

    def _resolve(self, coin: Coin, request_id: Optional[str]) -> Optional[str]:
        if request_id is not None:
            request = self._pending_requests.get(request_id)
            if request is None or request.coin != coin:
                raise RestoreSettingsError(f"No pending request {request_id} for {coin.uid}")
            del self._pending_requests[request_id]
            logger.info("Resolved request %s for %s", request_id, coin.uid)
            return request_id

        # Without an id, the oldest outstanding request for the coin is resolved
        for pending_id, request in self._pending_requests.items():
            if request.coin == coin:
                del self._pending_requests[pending_id]
                logger.info("Resolved request %s for %s", pending_id, coin.uid)
                return pending_id

        return None
