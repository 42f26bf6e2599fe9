"""Persistence of per-account, per-coin restore settings."""
import json
import logging
from pathlib import Path
from typing import Dict, List, Protocol
from pydantic import BaseModel
from coinwallet.models.coin import Account, Coin, RestoreSettingType
from coinwallet.models.restore_settings import RestoreSettings

logger = logging.getLogger(__name__)


class RestoreSettingRecord(BaseModel):
    """One stored setting value."""
    account_id: str
    coin_uid: str
    key: str
    value: str


class RestoreSettingsStorage(Protocol):
    def records(self, account_id: str, coin_uid: str) -> List[RestoreSettingRecord]:
        ...

    def save(self, records: List[RestoreSettingRecord]) -> None:
        ...

    def delete_all(self, account_id: str) -> None:
        ...


class InMemoryRestoreSettingsStorage:
    def __init__(self):
        self._records: Dict[tuple, RestoreSettingRecord] = {}

    def records(self, account_id: str, coin_uid: str) -> List[RestoreSettingRecord]:
        return [
            record for record in self._records.values()
            if record.account_id == account_id and record.coin_uid == coin_uid
        ]

    def save(self, records: List[RestoreSettingRecord]) -> None:
        for record in records:
            self._records[(record.account_id, record.coin_uid, record.key)] = record

    def delete_all(self, account_id: str) -> None:
        self._records = {
            key: record for key, record in self._records.items()
            if record.account_id != account_id
        }


class JsonFileRestoreSettingsStorage:
    """Stores records as a JSON list in a single file."""

    def __init__(self, path: Path):
        self._path = path

    def records(self, account_id: str, coin_uid: str) -> List[RestoreSettingRecord]:
        return [
            record for record in self._read_all()
            if record.account_id == account_id and record.coin_uid == coin_uid
        ]

    def save(self, records: List[RestoreSettingRecord]) -> None:
        stored = {(r.account_id, r.coin_uid, r.key): r for r in self._read_all()}
        for record in records:
            stored[(record.account_id, record.coin_uid, record.key)] = record
        self._write_all(list(stored.values()))

    def delete_all(self, account_id: str) -> None:
        self._write_all([r for r in self._read_all() if r.account_id != account_id])

    def _read_all(self) -> List[RestoreSettingRecord]:
        if not self._path.exists():
            return []
        data = json.loads(self._path.read_text())
        return [RestoreSettingRecord(**item) for item in data]

    def _write_all(self, records: List[RestoreSettingRecord]) -> None:
        payload = [record.model_dump() for record in records]
        self._path.write_text(json.dumps(payload, indent=2))


class RestoreSettingsManager:
    """Reads and writes restore settings keyed by (account, coin)."""

    def __init__(self, storage: RestoreSettingsStorage):
        self.storage = storage

    def settings(self, account: Account, coin: Coin) -> RestoreSettings:
        """Stored settings for the pair, empty if none."""
        settings: RestoreSettings = {}
        for record in self.storage.records(account.id, coin.uid):
            try:
                settings[RestoreSettingType(record.key)] = record.value
            except ValueError:
                logger.warning("Ignoring unknown restore setting %s for %s", record.key, coin.uid)
        return settings

    def save(self, settings: RestoreSettings, account: Account, coin: Coin) -> None:
        """Persist settings, overwriting stored values for the keys present."""
        records = [
            RestoreSettingRecord(
                account_id=account.id,
                coin_uid=coin.uid,
                key=key.value,
                value=value
            )
            for key, value in settings.items()
        ]
        self.storage.save(records)
        logger.debug("Saved %d restore setting(s) for %s/%s", len(records), account.id, coin.uid)

    def account_deleted(self, account_id: str) -> None:
        self.storage.delete_all(account_id)
