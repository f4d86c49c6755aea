"""Key/value persistence for the access token and budget selection."""

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Protocol

from .budget_client import BudgetClient
from .models import AuthorizationStatus
from .provider import BudgetProvider

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "ynab-access-token"
SELECTED_BUDGET_ID_KEY = "ynab-selected-budget-id"


class KeyValueStore(Protocol):
    """String key/value storage."""

    def get_string(self, key: str) -> str | None: ...

    def set_string(self, key: str, value: str | None): ...

    def remove_value(self, key: str): ...

    def remove_all_values(self): ...

    def keys(self) -> list[str]: ...

    def __len__(self) -> int: ...


class SqliteKeyValueStore:
    """SQLite-backed key/value store."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS key_values (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )
        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    def get_string(self, key: str) -> str | None:
        """Get a value by key."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM key_values WHERE key = ?", (key,))
        row = cursor.fetchone()
        return str(row["value"]) if row else None

    def set_string(self, key: str, value: str | None):
        """Set a value, or remove the key when value is None."""
        if value is None:
            self.remove_value(key)
            return

        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO key_values (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value, datetime.now().isoformat()),
        )
        self.conn.commit()

    def remove_value(self, key: str):
        """Remove a key if present."""
        self.conn.execute("DELETE FROM key_values WHERE key = ?", (key,))
        self.conn.commit()

    def remove_all_values(self):
        """Remove every key."""
        self.conn.execute("DELETE FROM key_values")
        self.conn.commit()

    def keys(self) -> list[str]:
        """All stored keys."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT key FROM key_values ORDER BY key")
        return [row["key"] for row in cursor.fetchall()]

    def __len__(self) -> int:
        cursor = self.conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM key_values")
        count: int = cursor.fetchone()[0]
        return count


class InMemoryKeyValueStore:
    """Dictionary-backed key/value store, safe to share between threads."""

    def __init__(self, storage: dict[str, str] | None = None):
        self._storage = dict(storage or {})
        self._lock = threading.Lock()

    def get_string(self, key: str) -> str | None:
        with self._lock:
            return self._storage.get(key)

    def set_string(self, key: str, value: str | None):
        with self._lock:
            if value is None:
                self._storage.pop(key, None)
            else:
                self._storage[key] = value

    def remove_value(self, key: str):
        with self._lock:
            self._storage.pop(key, None)

    def remove_all_values(self):
        with self._lock:
            self._storage.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._storage)

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)


# ============================================================================
# Budget client wiring
# ============================================================================


def store_access_token(access_token: str | None, store: KeyValueStore):
    """Persist the access token, or forget it when None."""
    store.set_string(ACCESS_TOKEN_KEY, access_token)


def store_selected_budget_id(budget_id: str | None, store: KeyValueStore):
    """Persist the selected budget id, or forget it when None."""
    store.set_string(SELECTED_BUDGET_ID_KEY, budget_id)


def make_live_client(
    store: KeyValueStore,
    access_token: str | None = None,
    provider: BudgetProvider | None = None,
) -> BudgetClient:
    """
    Build a budget client from the given or stored access token.

    Args:
        store: Where the token and selected budget id are persisted
        access_token: Token to use instead of the stored one
        provider: Provider to use instead of the YNAB provider

    Returns:
        A client over the provider, or a not-authorized client when no
        access token is available
    """
    access_token = access_token or store.get_string(ACCESS_TOKEN_KEY)
    if not access_token:
        logger.info("No access token available, using not authorized client")
        return BudgetClient.not_authorized_client()

    store_access_token(access_token, store)

    return BudgetClient(
        provider=provider or BudgetProvider.ynab(access_token),
        selected_budget_id=store.get_string(SELECTED_BUDGET_ID_KEY),
    )


def update_ynab_provider(client: BudgetClient, access_token: str, store: KeyValueStore):
    """Persist a new access token and switch the client to a YNAB provider."""
    store_access_token(access_token, store)
    client.update_provider(BudgetProvider.ynab(access_token))
    client.authorization_status = AuthorizationStatus.UNKNOWN


def logout(client: BudgetClient, store: KeyValueStore):
    """Forget the access token and put the client in the logged out state."""
    store_access_token(None, store)
    client.update_provider(BudgetProvider.not_authorized())
    client.authorization_status = AuthorizationStatus.LOGGED_OUT
    logger.info("Logged out of YNAB")
