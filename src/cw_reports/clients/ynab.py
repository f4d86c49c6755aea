"""YNAB API client."""

import logging
from datetime import date

import httpx

from ..exceptions import BudgetClientError
from ..models import (
    Account,
    BudgetSummary,
    Category,
    CategoryGroup,
    CategoryValues,
    CurrencyFormat,
    Transaction,
    TransactionEntries,
)

logger = logging.getLogger(__name__)


class YnabClient:
    """Client for the YNAB API v1."""

    BASE_URL = "https://api.ynab.com/v1"

    def __init__(self, access_token: str, transport: httpx.BaseTransport | None = None):
        """Initialize the YNAB client."""
        self.access_token = access_token
        self.client = httpx.Client(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            timeout=30.0,
            transport=transport,
        )

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def _get(self, path: str, **kwargs) -> dict:
        """GET a YNAB endpoint and return its ``data`` object."""
        try:
            response = self.client.get(path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"YNAB API error: {e}")
            raise map_http_error(e.response) from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling YNAB: {e}")
            raise BudgetClientError() from e

        try:
            data: dict = response.json()["data"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Unexpected YNAB response body from {path}: {e}")
            raise BudgetClientError(
                code=str(response.status_code),
                message="Unexpected response from YNAB",
            ) from e
        return data

    def get_budgets(self, include_accounts: bool = False) -> list[BudgetSummary]:
        """
        Get budget summaries for the authorized user.

        Args:
            include_accounts: Ask YNAB to embed accounts in each summary

        Returns:
            List of budget summaries
        """
        params = {"include_accounts": "true"} if include_accounts else None
        data = self._get("/budgets", params=params)

        budgets = [budget_summary_from_ynab(b) for b in data["budgets"]]
        logger.debug(f"budgetSummaries count({len(budgets)})")
        return budgets

    def get_accounts(self, budget_id: str) -> list[Account]:
        """
        Get accounts for a budget.

        Args:
            budget_id: The YNAB budget ID

        Returns:
            List of accounts
        """
        data = self._get(f"/budgets/{budget_id}/accounts")
        return [account_from_ynab(a) for a in data["accounts"]]

    def get_categories(
        self, budget_id: str, last_knowledge_of_server: int | None = None
    ) -> CategoryValues:
        """
        Get category groups and categories for a budget.

        Args:
            budget_id: The YNAB budget ID
            last_knowledge_of_server: Only return changes after this knowledge

        Returns:
            Category groups, categories and the new server knowledge
        """
        params: dict[str, int] = {}
        if last_knowledge_of_server is not None:
            params["last_knowledge_of_server"] = last_knowledge_of_server
        data = self._get(f"/budgets/{budget_id}/categories", params=params)

        groups = []
        categories = []
        for group_data in data["category_groups"]:
            groups.append(category_group_from_ynab(group_data))
            categories.extend(
                category_from_ynab(c) for c in group_data.get("categories", [])
            )

        logger.debug(
            f"Fetched {len(groups)} category groups and {len(categories)} categories"
        )
        return CategoryValues(groups, categories, data.get("server_knowledge", 0))

    def get_transactions(
        self,
        budget_id: str,
        since_date: date | None = None,
        last_knowledge_of_server: int | None = None,
    ) -> TransactionEntries:
        """
        Get transactions for a budget.

        Args:
            budget_id: The YNAB budget ID
            since_date: Only return transactions on or after this date
            last_knowledge_of_server: Only return changes after this knowledge

        Returns:
            Transactions and the new server knowledge
        """
        params: dict[str, str | int] = {}
        if since_date is not None:
            params["since_date"] = since_date.isoformat()
        if last_knowledge_of_server is not None:
            params["last_knowledge_of_server"] = last_knowledge_of_server
        data = self._get(f"/budgets/{budget_id}/transactions", params=params)

        transactions = [transaction_from_ynab(t) for t in data["transactions"]]
        return TransactionEntries(transactions, data.get("server_knowledge", 0))


def map_http_error(response: httpx.Response) -> BudgetClientError:
    """Map a failed YNAB response to a BudgetClientError.

    YNAB reports failures as ``{"error": {"id", "name", "detail"}}``; responses
    without that body are classified by status code alone.
    """
    try:
        detail = response.json()["error"]
        return BudgetClientError(
            code=str(detail["id"]),
            message=f"{detail['name']} - {detail['detail']}",
        )
    except (ValueError, KeyError, TypeError):
        return BudgetClientError(code=str(response.status_code))


def budget_summary_from_ynab(data: dict) -> BudgetSummary:
    """Map a YNAB budget summary payload to a BudgetSummary."""
    currency_data = data.get("currency_format")
    return BudgetSummary(
        id=data["id"],
        name=data["name"],
        last_modified_on=data.get("last_modified_on"),
        first_month=data.get("first_month"),
        last_month=data.get("last_month"),
        currency_format=(
            CurrencyFormat(**currency_data) if currency_data is not None else None
        ),
    )


def account_from_ynab(data: dict) -> Account:
    """Map a YNAB account payload to an Account."""
    return Account(
        id=data["id"],
        name=data["name"],
        type=data.get("type", "other"),
        on_budget=data.get("on_budget", True),
        closed=data.get("closed", False),
        deleted=data.get("deleted", False),
        balance=data.get("balance", 0),
    )


def category_group_from_ynab(data: dict) -> CategoryGroup:
    """Map a YNAB category group payload to a CategoryGroup."""
    return CategoryGroup(
        id=data["id"],
        name=data["name"],
        hidden=data.get("hidden", False),
        deleted=data.get("deleted", False),
        category_ids=[c["id"] for c in data.get("categories", [])],
    )


def category_from_ynab(data: dict) -> Category:
    """Map a YNAB category payload to a Category."""
    return Category(
        id=data["id"],
        name=data["name"],
        category_group_id=data["category_group_id"],
        hidden=data.get("hidden", False),
        deleted=data.get("deleted", False),
        note=data.get("note"),
        balance=data.get("balance", 0),
    )


def transaction_from_ynab(data: dict) -> Transaction:
    """Map a YNAB transaction payload to a Transaction."""
    return Transaction(
        id=data["id"],
        date=data["date"],
        amount=data["amount"],
        account_id=data["account_id"],
        account_name=data.get("account_name"),
        payee_name=data.get("payee_name"),
        category_id=data.get("category_id"),
        category_name=data.get("category_name"),
        transfer_account_id=data.get("transfer_account_id"),
        deleted=data.get("deleted", False),
    )
