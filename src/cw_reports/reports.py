"""Spending totals over a date range, computed from loaded budget data."""

import logging
from collections.abc import Iterable
from datetime import date

from .models import Account, Category, CategoryGroup, CategoryTotal, Transaction

logger = logging.getLogger(__name__)

INTERNAL_MASTER_CATEGORY = "Internal Master Category"
UNCATEGORIZED = "Uncategorized"


def _spending_transactions(
    transactions: Iterable[Transaction],
    accounts: Iterable[Account],
    start_date: date,
    finish_date: date,
    account_ids: Iterable[str] | None = None,
) -> list[Transaction]:
    """Keep live transactions inside the date range on on-budget accounts."""
    on_budget = {a.id for a in accounts if a.on_budget}
    if account_ids:
        on_budget &= set(account_ids)

    return [
        t
        for t in transactions
        if not t.deleted
        and start_date <= t.date <= finish_date
        and t.account_id in on_budget
    ]


def _sorted_totals(totals: dict[str, CategoryTotal]) -> list[CategoryTotal]:
    # Largest outflow first
    return sorted((t for t in totals.values() if t.total != 0), key=lambda t: t.total)


def spending_totals_by_category_group(
    transactions: Iterable[Transaction],
    accounts: Iterable[Account],
    categories: Iterable[Category],
    groups: Iterable[CategoryGroup],
    start_date: date,
    finish_date: date,
    account_ids: Iterable[str] | None = None,
) -> list[CategoryTotal]:
    """
    Sum transaction amounts per category group for a date range.

    Both dates are inclusive. Only on-budget accounts count. YNAB's
    internal master group is skipped except for its Uncategorized
    category. Groups that net to zero are omitted.

    Args:
        transactions: Transactions to sum
        accounts: Accounts of the budget, used for the on-budget check
        categories: Categories of the budget
        groups: Category groups of the budget
        start_date: First day of the range
        finish_date: Last day of the range
        account_ids: Only count these accounts when given

    Returns:
        Totals in milliunits, ordered from most negative to most positive
    """
    categories_by_id = {c.id: c for c in categories}
    groups_by_id = {g.id: g for g in groups}

    totals: dict[str, CategoryTotal] = {}
    for transaction in _spending_transactions(
        transactions, accounts, start_date, finish_date, account_ids
    ):
        category = categories_by_id.get(transaction.category_id or "")
        if category is None:
            continue
        group = groups_by_id.get(category.category_group_id)
        if group is None:
            continue
        if group.name == INTERNAL_MASTER_CATEGORY and category.name != UNCATEGORIZED:
            continue

        entry = totals.setdefault(
            group.id, CategoryTotal(id=group.id, name=group.name, total=0)
        )
        entry.total += transaction.amount

    results = _sorted_totals(totals)
    logger.debug(f"Computed {len(results)} category group totals")
    return results


def spending_totals_by_category(
    category_group_id: str,
    transactions: Iterable[Transaction],
    accounts: Iterable[Account],
    categories: Iterable[Category],
    start_date: date,
    finish_date: date,
    account_ids: Iterable[str] | None = None,
) -> list[CategoryTotal]:
    """Sum transaction amounts per category within one category group.

    Same date, account and ordering rules as the per-group totals.
    """
    group_categories = {
        c.id: c for c in categories if c.category_group_id == category_group_id
    }

    totals: dict[str, CategoryTotal] = {}
    for transaction in _spending_transactions(
        transactions, accounts, start_date, finish_date, account_ids
    ):
        category = group_categories.get(transaction.category_id or "")
        if category is None:
            continue

        entry = totals.setdefault(
            category.id, CategoryTotal(id=category.id, name=category.name, total=0)
        )
        entry.total += transaction.amount

    return _sorted_totals(totals)
