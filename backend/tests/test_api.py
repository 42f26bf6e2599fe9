from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from coinwallet.config import Settings
from coinwallet.context import AppContext
from coinwallet.main import create_app
from coinwallet.models.coin import CoinType, RestoreSettingType
from coinwallet.services.address_parser import AddressParser
from coinwallet.services.chain_adapters.eos import EosAdapter
from coinwallet.services.chain_adapters.eos_kit_manager import EosKitManager

PREFIX = "/api/v1"


@pytest.fixture
def context(fake_kit):
    context = AppContext(
        Settings(),
        eos_kit_manager=EosKitManager(rpc_url="http://node.test", kit_factory=lambda eos_account: fake_kit)
    )
    context.adapter_factory.register(CoinType.ZCASH, lambda wallet: EosAdapter(
        wallet, fake_kit, AddressParser(valid_scheme="zcash"), token="zcash", symbol="ZEC"
    ))
    return context


@pytest.fixture
def client(context):
    return TestClient(create_app(context))


def add_account(client, account_id, origin):
    response = client.post(f"{PREFIX}/accounts", json={
        "id": account_id,
        "name": account_id,
        "origin": origin,
        "eos_account": "alice"
    })
    assert response.status_code == 200
    return response


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "healthy"}


def test_account_with_invalid_eos_name_is_refused(client) -> None:
    response = client.post(f"{PREFIX}/accounts", json={
        "id": "a", "name": "a", "origin": "created", "eos_account": "NotValid"
    })
    assert response.status_code == 400


def test_enable_eos_is_approved_immediately(client) -> None:
    add_account(client, "acc1", "restored")

    response = client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "eos:EOS", "account_id": "acc1"})

    assert response.json()["status"] == "approved"
    wallets = client.get(f"{PREFIX}/wallets").json()
    assert [(w["account_id"], w["coin_uid"]) for w in wallets] == [("acc1", "eos:EOS")]
    assert wallets[0]["state"]["kind"] == "not_synced"


def test_enable_zcash_for_restored_account_needs_birthday_height(client, context) -> None:
    add_account(client, "acc1", "restored")

    response = client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "zcash:ZEC", "account_id": "acc1"})
    body = response.json()
    assert body["status"] == "pending"
    assert body["request"]["type"] == "birthday_height"
    request_id = body["request"]["request_id"]
    assert [r["request_id"] for r in client.get(f"{PREFIX}/coins/requests").json()] == [request_id]

    response = client.post(
        f"{PREFIX}/coins/requests/{request_id}/birthday-height",
        json={"birthday_height": "1234567"}
    )

    assert response.json()["status"] == "approved"
    assert client.get(f"{PREFIX}/coins/requests").json() == []
    account = context.account("acc1")
    coin = context.coin("zcash:ZEC")
    assert context.restore_settings_manager.settings(account, coin) == {RestoreSettingType.BIRTHDAY_HEIGHT: "1234567"}


def test_cancel_request(client) -> None:
    add_account(client, "acc1", "restored")
    body = client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "zcash:ZEC", "account_id": "acc1"}).json()
    request_id = body["request"]["request_id"]

    response = client.post(f"{PREFIX}/coins/requests/{request_id}/cancel")

    assert response.json() == {"status": "rejected", "coin_uid": "zcash:ZEC"}
    assert client.post(f"{PREFIX}/coins/requests/{request_id}/cancel").status_code == 404
    assert client.get(f"{PREFIX}/wallets").json() == []


def test_unknown_coin_or_account(client) -> None:
    add_account(client, "acc1", "created")

    assert client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "eos:XYZ", "account_id": "acc1"}).status_code == 404
    assert client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "eos:EOS", "account_id": "nobody"}).status_code == 404


def test_send_checks_address_and_balance_before_sending(client, fake_kit) -> None:
    add_account(client, "acc1", "created")
    client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "eos:EOS", "account_id": "acc1"})
    url = f"{PREFIX}/wallets/acc1/eos:EOS/send"

    assert client.post(url, json={"amount": "1", "address": "BOB"}).status_code == 400

    response = client.post(url, json={"amount": "1", "address": "bob"})
    assert response.status_code == 400
    assert response.json()["detail"][0]["kind"] == "insufficient_amount"
    assert fake_kit.sent == []

    fake_kit._assets[0].set_balance(Decimal("10"))
    response = client.post(url, json={"amount": "1", "address": "bob", "memo": "thanks"})

    assert response.status_code == 200
    assert fake_kit.sent == [("EOS", "bob", Decimal("1"), "thanks")]


def test_transactions_pagination(client, fake_kit, make_transaction) -> None:
    add_account(client, "acc1", "created")
    client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "eos:EOS", "account_id": "acc1"})
    fake_kit.history = [make_transaction(sequence) for sequence in range(8)]
    url = f"{PREFIX}/wallets/acc1/eos:EOS/transactions"

    first = client.get(url, params={"limit": 5}).json()
    assert [r["inter_transaction_index"] for r in first] == [7, 6, 5, 4, 3]

    second = client.get(url, params={"limit": 5, "from_hash": first[-1]["transaction_hash"], "from_index": 3}).json()
    assert [r["inter_transaction_index"] for r in second] == [2, 1, 0]

    assert client.get(url, params={"from_hash": "trx-3"}).status_code == 400


def test_validate_and_parse(client) -> None:
    add_account(client, "acc1", "created")
    client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "eos:EOS", "account_id": "acc1"})

    assert client.get(f"{PREFIX}/wallets/acc1/eos:EOS/validate/eosio.token").json()["valid"] is True
    assert client.get(f"{PREFIX}/wallets/acc1/eos:EOS/validate/EOSIO").json()["valid"] is False

    parsed = client.post(f"{PREFIX}/wallets/acc1/eos:EOS/parse", json={"payment_address": "eos:bob?amount=2"}).json()
    assert parsed == {"address": "bob", "amount": "2", "error": None}


def test_delete_account_removes_wallets(client, fake_kit) -> None:
    add_account(client, "acc1", "created")
    client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "eos:EOS", "account_id": "acc1"})

    assert client.delete(f"{PREFIX}/accounts/acc1").status_code == 200
    assert client.get(f"{PREFIX}/wallets").json() == []
    assert fake_kit.closed


def test_pending_enable_is_not_completed_by_another_accounts_enable(client, context) -> None:
    add_account(client, "restored", "restored")
    add_account(client, "fresh", "created")

    pending = client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "zcash:ZEC", "account_id": "restored"}).json()
    approved = client.post(f"{PREFIX}/coins/enable", json={"coin_uid": "zcash:ZEC", "account_id": "fresh"}).json()

    assert pending["status"] == "pending"
    assert approved["status"] == "approved"
    assert [w["account_id"] for w in client.get(f"{PREFIX}/wallets").json()] == ["fresh"]

    request_id = pending["request"]["request_id"]
    client.post(f"{PREFIX}/coins/requests/{request_id}/birthday-height", json={"birthday_height": "99"})

    coin = context.coin("zcash:ZEC")
    manager = context.restore_settings_manager
    assert manager.settings(context.account("restored"), coin) == {RestoreSettingType.BIRTHDAY_HEIGHT: "99"}
    assert manager.settings(context.account("fresh"), coin) == {}
    assert sorted(w["account_id"] for w in client.get(f"{PREFIX}/wallets").json()) == ["fresh", "restored"]
