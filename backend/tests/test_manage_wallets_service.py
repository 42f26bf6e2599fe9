import pytest

from coinwallet.models.coin import CoinType, RestoreSettingType, Wallet
from coinwallet.models.restore_settings import CoinWithSettings, RestoreSettingsRequest
from coinwallet.services.adapter_factory import AdapterFactory, eos_adapter_builder
from coinwallet.services.address_parser import AddressParser
from coinwallet.services.chain_adapters.eos import EosAdapter
from coinwallet.services.chain_adapters.eos_kit_manager import EosKitManager
from coinwallet.services.manage_wallets_service import ManageWalletsService
from coinwallet.utils.errors import AdapterValidationError, UnsupportedCoinError, WalletNotFoundError


@pytest.fixture
def kit_manager(fake_kit):
    return EosKitManager(rpc_url="http://node.test", kit_factory=lambda eos_account: fake_kit)


@pytest.fixture
def adapter_factory(kit_manager):
    factory = AdapterFactory()
    factory.register(CoinType.EOS, eos_adapter_builder(kit_manager, "eosio.token"))
    return factory


@pytest.fixture
def service(restore_settings_service, adapter_factory):
    return ManageWalletsService(restore_settings_service, adapter_factory)


def register_zcash(adapter_factory, fake_kit):
    adapter_factory.register(CoinType.ZCASH, lambda wallet: EosAdapter(
        wallet, fake_kit, AddressParser(valid_scheme="zcash"), token="zcash", symbol="ZEC"
    ))


def test_enable_for_created_account_builds_adapter(service, eos_coin, created_account) -> None:
    published = []
    service.wallets_observable.subscribe(published.append)

    service.enable(eos_coin, created_account)

    wallet = Wallet(coin=eos_coin, account=created_account)
    assert service.wallets == [wallet]
    assert isinstance(service.adapter(wallet), EosAdapter)
    assert published == [[wallet]]


def test_enable_waits_for_birthday_height(service, restore_settings_service, adapter_factory, fake_kit,
                                          zcash_coin, restored_account) -> None:
    register_zcash(adapter_factory, fake_kit)
    requests = []
    restore_settings_service.request_observable.subscribe(requests.append)

    service.enable(zcash_coin, restored_account)
    assert service.wallets == []

    restore_settings_service.enter("1234567", zcash_coin, request_id=requests[0].request_id)

    assert service.wallets == [Wallet(coin=zcash_coin, account=restored_account)]
    assert restore_settings_service.manager.settings(restored_account, zcash_coin) == {
        RestoreSettingType.BIRTHDAY_HEIGHT: "1234567"
    }


def test_cancel_publishes_cancelled_coin(service, restore_settings_service, zcash_coin, restored_account) -> None:
    cancelled = []
    service.cancel_enable_coin_observable.subscribe(cancelled.append)

    service.enable(zcash_coin, restored_account)
    restore_settings_service.cancel(zcash_coin)

    assert cancelled == [zcash_coin]
    assert service.wallets == []


def test_concurrent_enables_of_one_coin_stay_with_their_accounts(
    service, restore_settings_service, adapter_factory, fake_kit, zcash_coin, restored_account, created_account
) -> None:
    register_zcash(adapter_factory, fake_kit)

    request = service.enable(zcash_coin, restored_account)
    assert isinstance(request, RestoreSettingsRequest)

    approval = service.enable(zcash_coin, created_account)
    assert isinstance(approval, CoinWithSettings)
    assert service.wallets == [Wallet(coin=zcash_coin, account=created_account)]

    restore_settings_service.enter("1234567", zcash_coin, request_id=request.request_id)

    assert set(service.wallets) == {
        Wallet(coin=zcash_coin, account=created_account),
        Wallet(coin=zcash_coin, account=restored_account),
    }
    manager = restore_settings_service.manager
    assert manager.settings(restored_account, zcash_coin) == {RestoreSettingType.BIRTHDAY_HEIGHT: "1234567"}
    assert manager.settings(created_account, zcash_coin) == {}


def test_cancel_only_drops_the_cancelled_enable(
    service, restore_settings_service, adapter_factory, fake_kit, zcash_coin, restored_account
) -> None:
    register_zcash(adapter_factory, fake_kit)
    other_account = restored_account.model_copy(update={"id": "restored-2"})
    cancelled = []
    service.cancel_enable_coin_observable.subscribe(cancelled.append)

    first = service.enable(zcash_coin, restored_account)
    second = service.enable(zcash_coin, other_account)

    restore_settings_service.cancel(zcash_coin, request_id=second.request_id)
    assert cancelled == [zcash_coin]

    restore_settings_service.enter("42", zcash_coin, request_id=first.request_id)

    assert service.wallets == [Wallet(coin=zcash_coin, account=restored_account)]
    assert restore_settings_service.manager.settings(other_account, zcash_coin) == {}


def test_approvals_from_other_flows_are_ignored(service, restore_settings_service, eos_coin, created_account) -> None:
    restore_settings_service.approve_settings(eos_coin, created_account)

    assert service.wallets == []


def test_unsupported_coin_raises(service, zcash_coin, created_account) -> None:
    with pytest.raises(UnsupportedCoinError):
        service.enable(zcash_coin, created_account)


def test_entered_settings_are_not_saved_when_adapter_cannot_be_built(
    service, restore_settings_service, zcash_coin, restored_account
) -> None:
    request = service.enable(zcash_coin, restored_account)

    with pytest.raises(UnsupportedCoinError):
        restore_settings_service.enter("1234567", zcash_coin, request_id=request.request_id)

    assert service.wallets == []
    assert restore_settings_service.manager.settings(restored_account, zcash_coin) == {}


def test_account_without_eos_name_is_refused(service, eos_coin, created_account) -> None:
    account = created_account.model_copy(update={"eos_account": None})
    with pytest.raises(AdapterValidationError):
        service.enable(eos_coin, account)


def test_disable_removes_wallet(service, eos_coin, created_account) -> None:
    service.enable(eos_coin, created_account)
    wallet = Wallet(coin=eos_coin, account=created_account)

    service.disable(wallet)

    assert service.wallets == []
    with pytest.raises(WalletNotFoundError):
        service.adapter(wallet)


@pytest.mark.asyncio
async def test_kit_manager_closes_kits(kit_manager, fake_kit, created_account) -> None:
    assert kit_manager.kit(created_account) is fake_kit

    await kit_manager.unlink(created_account.id)

    assert fake_kit.closed
