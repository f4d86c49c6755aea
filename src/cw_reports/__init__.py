"""CW Reports - Budget and account reports for YNAB."""

__version__ = "0.1.0"

from .budget_client import BudgetClient
from .config import Settings, load_settings
from .deeplink import DEEPLINK_SCHEME, fragment_items, is_deeplink, query_items
from .models import Account, AuthorizationStatus, BudgetSummary, QueryItem
from .provider import BudgetProvider
from .store import InMemoryKeyValueStore, SqliteKeyValueStore, make_live_client

__all__ = [
    "Settings",
    "load_settings",
    "DEEPLINK_SCHEME",
    "is_deeplink",
    "query_items",
    "fragment_items",
    "QueryItem",
    "Account",
    "AuthorizationStatus",
    "BudgetSummary",
    "BudgetProvider",
    "BudgetClient",
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    "make_live_client",
]
