"""Stateful budget client wrapping a BudgetProvider."""

import logging
from collections.abc import Iterable
from datetime import date

from .exceptions import BudgetClientError, SelectedBudgetIdInvalidError
from .models import (
    Account,
    AuthorizationStatus,
    BudgetSummary,
    Category,
    CategoryGroup,
    CategoryValues,
    TransactionEntries,
)
from .provider import BudgetProvider

logger = logging.getLogger(__name__)


class BudgetClient:
    """Holds the budgets and accounts loaded from a provider."""

    def __init__(
        self,
        provider: BudgetProvider,
        selected_budget_id: str | None = None,
        authorization_status: AuthorizationStatus = AuthorizationStatus.UNKNOWN,
    ):
        """Initialize the client with a provider and optional selection."""
        self.provider = provider
        self.selected_budget_id = selected_budget_id
        self.authorization_status = authorization_status
        self.budget_summaries: list[BudgetSummary] = []
        self.accounts: list[Account] = []
        self.category_groups: list[CategoryGroup] = []
        self.categories: list[Category] = []

    @classmethod
    def not_authorized_client(cls) -> "BudgetClient":
        """Create a logged out client whose requests all fail as unauthorized."""
        return cls(
            provider=BudgetProvider.not_authorized(),
            authorization_status=AuthorizationStatus.LOGGED_OUT,
        )

    @property
    def is_authenticated(self) -> bool:
        """True once the provider has successfully returned data."""
        return self.authorization_status == AuthorizationStatus.LOGGED_IN

    @property
    def selected_budget(self) -> BudgetSummary | None:
        """The loaded summary matching the selected budget id."""
        if self.selected_budget_id is None:
            return None
        for budget in self.budget_summaries:
            if budget.id == self.selected_budget_id:
                return budget
        return None

    def update_provider(self, provider: BudgetProvider):
        """Replace the data provider, closing the previous one."""
        if provider is not self.provider:
            self.provider.close()
        self.provider = provider

    def close(self):
        """Close the current provider."""
        self.provider.close()

    def update_selected_budget_id(self, budget_id: str):
        """
        Select a budget.

        Raises:
            SelectedBudgetIdInvalidError: If the id is not a loaded budget
        """
        if budget_id not in {b.id for b in self.budget_summaries}:
            raise SelectedBudgetIdInvalidError(budget_id)

        if budget_id == self.selected_budget_id:
            logger.debug(
                f"Selected budgetId is already set to: {budget_id}. No action taken."
            )
            return

        self.selected_budget_id = budget_id
        self.accounts = []
        self.category_groups = []
        self.categories = []
        logger.debug(f"BudgetClient selectedBudgetId updated to: {budget_id}")

    def fetch_budget_summaries(self) -> list[BudgetSummary]:
        """Load budget summaries from the provider."""
        logger.debug("fetching budget summaries ...")
        try:
            budget_summaries = self.provider.fetch_budget_summaries()
        except Exception as e:
            self.logout_if_needed(e)
            raise

        self.budget_summaries = budget_summaries
        self.authorization_status = AuthorizationStatus.LOGGED_IN

        # Drop a selection that no longer exists on the server
        if self.selected_budget_id is not None and self.selected_budget is None:
            self.selected_budget_id = None
            logger.debug("selectedBudgetId set to None")

        return budget_summaries

    def fetch_accounts(self) -> list[Account]:
        """Load accounts for the selected budget (empty if none is selected)."""
        if self.selected_budget_id is None:
            logger.debug("No budget selected, skipping account fetch")
            return []

        logger.debug(f"fetching accounts for budget {self.selected_budget_id} ...")
        try:
            accounts = self.provider.fetch_accounts(self.selected_budget_id)
        except Exception as e:
            self.logout_if_needed(e)
            raise

        self.accounts = accounts
        return accounts

    def fetch_category_values(
        self, last_server_knowledge: int | None = None
    ) -> CategoryValues:
        """Load category groups and categories for the selected budget."""
        if self.selected_budget_id is None:
            logger.debug("No budget selected, skipping category fetch")
            return CategoryValues([], [], last_server_knowledge or 0)

        logger.debug(f"fetching categories for budget {self.selected_budget_id} ...")
        try:
            values = self.provider.fetch_categories(
                self.selected_budget_id, last_server_knowledge
            )
        except Exception as e:
            self.logout_if_needed(e)
            raise

        self.category_groups = values.groups
        self.categories = values.categories
        return values

    def fetch_transactions(
        self,
        start_date: date | None = None,
        finish_date: date | None = None,
        account_ids: Iterable[str] | None = None,
        last_server_knowledge: int | None = None,
    ) -> TransactionEntries:
        """
        Load transactions for the selected budget.

        YNAB only filters by start date, so the finish date and account
        filters are applied here. Deleted transactions are dropped.
        """
        if self.selected_budget_id is None:
            logger.debug("No budget selected, skipping transaction fetch")
            return TransactionEntries([], last_server_knowledge or 0)

        logger.debug(
            f"fetching transactions for budget {self.selected_budget_id} "
            f"since {start_date} ..."
        )
        try:
            entries = self.provider.fetch_transactions(
                self.selected_budget_id, start_date, last_server_knowledge
            )
        except Exception as e:
            self.logout_if_needed(e)
            raise

        wanted_accounts = set(account_ids) if account_ids else None
        transactions = [
            t
            for t in entries.transactions
            if not t.deleted
            and (finish_date is None or t.date <= finish_date)
            and (wanted_accounts is None or t.account_id in wanted_accounts)
        ]
        logger.debug(
            f"Kept {len(transactions)} of {len(entries.transactions)} transactions"
        )
        return TransactionEntries(transactions, entries.server_knowledge)

    def logout_if_needed(self, error: Exception):
        """Mark the client logged out when the error is an authorization failure."""
        if isinstance(error, BudgetClientError) and error.is_not_authorized:
            self.authorization_status = AuthorizationStatus.LOGGED_OUT
            logger.error("Budget Client is not authorized, status updated to logged out")
            return
        logger.error(f"{error}")
