# Overview: Service-layer operations for business settings; key/value upserts and defaults.

from __future__ import annotations

from ..models import Setting
from ..store import PersistentStore
from ..time_utils import utcnow
from ..validation import ValidationError

DEFAULT_SETTINGS = {
    "companyName": "INVENTORY MANAGEMENT SYSTEM",
    "trnNumber": "",
    "currencyCode": "$",
    "currencySymbol": "$",
    "taxRate": "10",
    "address": "",
    "phone": "",
    "email": "",
}

MAX_KEY_LENGTH = 128


def _normalize_key(key) -> str:
    if key is None or not str(key).strip():
        raise ValidationError("setting key is required")
    key = str(key).strip()
    if len(key) > MAX_KEY_LENGTH:
        raise ValidationError(f"setting key exceeds max length {MAX_KEY_LENGTH}")
    return key


def _serialize_value(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SettingsGateway:
    def __init__(self, store: PersistentStore):
        self.store = store

    def get(self, key: str) -> str | None:
        row = self.store.query(Setting).filter_by(key=_normalize_key(key)).first()
        return row.value if row else None

    def get_all(self) -> dict[str, str | None]:
        rows = self.store.query(Setting).order_by(Setting.key.asc()).all()
        return {row.key: row.value for row in rows}

    def set(self, key: str, value) -> Setting:
        """Insert or replace the value for key."""
        key = _normalize_key(key)
        with self.store.transaction() as tx:
            row = tx.locked(Setting, key=key)
            if row is None:
                row = Setting(key=key)
                tx.add(row)
            row.value = _serialize_value(value)
            row.updated_at = utcnow()
            tx.flush()
        return row

    def set_many(self, values: dict) -> dict[str, str | None]:
        """Upsert several keys in one transaction (the settings form saves together)."""
        if not isinstance(values, dict) or not values:
            raise ValidationError("settings must be a non-empty object")

        normalized = {_normalize_key(k): _serialize_value(v) for k, v in values.items()}
        with self.store.transaction() as tx:
            for key, value in normalized.items():
                row = tx.locked(Setting, key=key)
                if row is None:
                    row = Setting(key=key)
                    tx.add(row)
                row.value = value
                row.updated_at = utcnow()
        return normalized

    def initialize_defaults(self) -> list[str]:
        """
        Fill in any missing default key. Existing values are never overwritten.

        Returns the keys that were added.
        """
        added = []
        with self.store.transaction() as tx:
            existing = {key for (key,) in tx.query(Setting.key).all()}
            for key, value in DEFAULT_SETTINGS.items():
                if key in existing:
                    continue
                tx.add(Setting(key=key, value=value))
                added.append(key)
        return added
