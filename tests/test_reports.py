"""Tests for spending total reports."""

from datetime import date

import pytest

from cw_reports.models import Account, Category, CategoryGroup, Transaction
from cw_reports.reports import (
    spending_totals_by_category,
    spending_totals_by_category_group,
)

START = date(2024, 3, 1)
FINISH = date(2024, 3, 31)


@pytest.fixture
def accounts():
    """On-budget checking and card plus an off-budget tracking account."""
    return [
        Account(id="checking", name="Everyday"),
        Account(id="card", name="Card", type="creditCard"),
        Account(id="mortgage", name="Mortgage", on_budget=False),
    ]


@pytest.fixture
def groups():
    return [
        CategoryGroup(id="bills", name="Bills"),
        CategoryGroup(id="food", name="Food"),
        CategoryGroup(id="internal", name="Internal Master Category"),
    ]


@pytest.fixture
def categories():
    return [
        Category(id="rent", name="Rent", category_group_id="bills"),
        Category(id="power", name="Power", category_group_id="bills"),
        Category(id="groceries", name="Groceries", category_group_id="food"),
        Category(id="dining", name="Dining Out", category_group_id="food"),
        Category(
            id="tbb", name="Inflow: Ready to Assign", category_group_id="internal"
        ),
        Category(id="uncat", name="Uncategorized", category_group_id="internal"),
    ]


def txn(
    id, category_id, amount, on=date(2024, 3, 10), account_id="checking", deleted=False
):
    return Transaction(
        id=id,
        date=on,
        amount=amount,
        account_id=account_id,
        category_id=category_id,
        deleted=deleted,
    )


class TestTotalsByCategoryGroup:
    """Per-group spending totals."""

    def test_sums_and_orders_by_total(self, accounts, categories, groups):
        transactions = [
            txn("1", "rent", -2000000),
            txn("2", "power", -150000, account_id="card"),
            txn("3", "groceries", -300000),
            txn("4", "dining", -50000),
        ]

        totals = spending_totals_by_category_group(
            transactions, accounts, categories, groups, START, FINISH
        )

        assert [(t.name, t.total) for t in totals] == [
            ("Bills", -2150000),
            ("Food", -350000),
        ]
        assert totals[0].id == "bills"

    def test_date_range_is_inclusive(self, accounts, categories, groups):
        transactions = [
            txn("first", "rent", -1000, on=START),
            txn("last", "rent", -2000, on=FINISH),
            txn("after", "rent", -4000, on=date(2024, 4, 1)),
        ]

        totals = spending_totals_by_category_group(
            transactions, accounts, categories, groups, START, FINISH
        )

        assert [t.total for t in totals] == [-3000]

    def test_skips_off_budget_deleted_and_uncategorized_rows(
        self, accounts, categories, groups
    ):
        transactions = [
            txn("1", "rent", -1000),
            txn("off", "rent", -5000, account_id="mortgage"),
            txn("gone", "rent", -7000, deleted=True),
            txn("transfer", None, -9000),
            txn("unknown", "missing-category", -11000),
        ]

        totals = spending_totals_by_category_group(
            transactions, accounts, categories, groups, START, FINISH
        )

        assert [(t.name, t.total) for t in totals] == [("Bills", -1000)]

    def test_internal_master_only_counts_uncategorized(
        self, accounts, categories, groups
    ):
        transactions = [
            txn("income", "tbb", 5000000),
            txn("stray", "uncat", -25000),
        ]

        totals = spending_totals_by_category_group(
            transactions, accounts, categories, groups, START, FINISH
        )

        assert [(t.name, t.total) for t in totals] == [
            ("Internal Master Category", -25000)
        ]

    def test_zero_totals_omitted(self, accounts, categories, groups):
        transactions = [
            txn("buy", "groceries", -40000),
            txn("refund", "groceries", 40000),
            txn("rent", "rent", -1000),
        ]

        totals = spending_totals_by_category_group(
            transactions, accounts, categories, groups, START, FINISH
        )

        assert [t.name for t in totals] == ["Bills"]

    def test_account_filter(self, accounts, categories, groups):
        transactions = [
            txn("1", "rent", -1000),
            txn("2", "power", -2000, account_id="card"),
        ]

        totals = spending_totals_by_category_group(
            transactions,
            accounts,
            categories,
            groups,
            START,
            FINISH,
            account_ids=["card"],
        )

        assert [t.total for t in totals] == [-2000]

    def test_off_budget_account_filter_yields_nothing(
        self, accounts, categories, groups
    ):
        transactions = [txn("1", "rent", -1000, account_id="mortgage")]

        assert (
            spending_totals_by_category_group(
                transactions,
                accounts,
                categories,
                groups,
                START,
                FINISH,
                account_ids=["mortgage"],
            )
            == []
        )


class TestTotalsByCategory:
    """Per-category totals within one group."""

    def test_breaks_down_group(self, accounts, categories):
        transactions = [
            txn("1", "groceries", -300000),
            txn("2", "dining", -50000),
            txn("3", "dining", -70000, account_id="card"),
            txn("4", "rent", -2000000),
        ]

        totals = spending_totals_by_category(
            "food", transactions, accounts, categories, START, FINISH
        )

        assert [(t.id, t.name, t.total) for t in totals] == [
            ("groceries", "Groceries", -300000),
            ("dining", "Dining Out", -120000),
        ]

    def test_unknown_group_is_empty(self, accounts, categories):
        transactions = [txn("1", "rent", -1000)]

        assert (
            spending_totals_by_category(
                "nope", transactions, accounts, categories, START, FINISH
            )
            == []
        )

    def test_applies_same_row_filters(self, accounts, categories):
        transactions = [
            txn("1", "rent", -1000),
            txn("off", "rent", -5000, account_id="mortgage"),
            txn("gone", "power", -7000, deleted=True),
            txn("late", "power", -9000, on=date(2024, 4, 1)),
        ]

        totals = spending_totals_by_category(
            "bills", transactions, accounts, categories, START, FINISH
        )

        assert [(t.name, t.total) for t in totals] == [("Rent", -1000)]
