"""Budget data providers."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from .clients.ynab import YnabClient
from .exceptions import BudgetClientError
from .models import (
    Account,
    BudgetSummary,
    CategoryValues,
    TransactionEntries,
)


def _no_categories(budget_id: str, last_server_knowledge: int | None) -> CategoryValues:
    return CategoryValues([], [], last_server_knowledge or 0)


def _no_transactions(
    budget_id: str, since_date: date | None, last_server_knowledge: int | None
) -> TransactionEntries:
    return TransactionEntries([], last_server_knowledge or 0)


@dataclass(frozen=True)
class BudgetProvider:
    """A source of budget summaries, accounts, categories and transactions.

    Each fetch either returns the complete result or raises; providers never
    return partial results. ``close`` releases whatever the fetches hold open.
    """

    fetch_budget_summaries: Callable[[], list[BudgetSummary]]
    fetch_accounts: Callable[[str], list[Account]]
    fetch_categories: Callable[[str, int | None], CategoryValues] = _no_categories
    fetch_transactions: Callable[
        [str, date | None, int | None], TransactionEntries
    ] = _no_transactions
    on_close: Callable[[], None] = lambda: None

    def close(self):
        """Release the provider's resources."""
        self.on_close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    @classmethod
    def ynab(cls, access_token: str) -> "BudgetProvider":
        """Create a provider backed by the YNAB API."""
        client = YnabClient(access_token)
        return cls(
            fetch_budget_summaries=client.get_budgets,
            fetch_accounts=client.get_accounts,
            fetch_categories=client.get_categories,
            fetch_transactions=client.get_transactions,
            on_close=client.close,
        )

    @classmethod
    def noop(cls) -> "BudgetProvider":
        """Create a provider that always returns empty results."""
        return cls(
            fetch_budget_summaries=lambda: [],
            fetch_accounts=lambda budget_id: [],
        )

    @classmethod
    def not_authorized(cls) -> "BudgetProvider":
        """Create a provider that fails every request as unauthorized."""

        def fail(*args) -> list:
            raise BudgetClientError.not_authorized()

        return cls(
            fetch_budget_summaries=fail,
            fetch_accounts=fail,
            fetch_categories=fail,
            fetch_transactions=fail,
        )
