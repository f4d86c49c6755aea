"""Pydantic domain models for CW Reports."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field

# ============================================================================
# URL Models
# ============================================================================


class QueryItem(NamedTuple):
    """A single name/value pair from a URL query string."""

    name: str
    value: str | None = None


# ============================================================================
# Budget Models
# ============================================================================


class CurrencyFormat(BaseModel):
    """Currency display settings of a YNAB budget."""

    iso_code: str
    example_format: str | None = None
    decimal_digits: int = 2
    decimal_separator: str = "."
    symbol_first: bool = True
    group_separator: str = ","
    currency_symbol: str = ""
    display_symbol: bool = True

    def format(self, amount: Decimal) -> str:
        """Format an amount (in currency units) using this budget's settings."""
        quantized = f"{abs(amount):,.{self.decimal_digits}f}"
        whole, _, fraction = quantized.partition(".")
        text = whole.replace(",", self.group_separator)
        if fraction:
            text += self.decimal_separator + fraction

        if self.display_symbol and self.currency_symbol:
            if self.symbol_first:
                text = f"{self.currency_symbol}{text}"
            else:
                text = f"{text}{self.currency_symbol}"

        return f"-{text}" if amount < 0 else text


class BudgetSummary(BaseModel):
    """A YNAB budget summary."""

    id: str
    name: str
    last_modified_on: datetime | None = None
    first_month: date | None = None
    last_month: date | None = None
    currency_format: CurrencyFormat | None = None

    @property
    def currency_code(self) -> str | None:
        """ISO 4217 code of the budget currency."""
        return self.currency_format.iso_code if self.currency_format else None


class Account(BaseModel):
    """A YNAB account."""

    id: str
    name: str
    type: str = "other"
    on_budget: bool = True
    closed: bool = False
    deleted: bool = False
    balance: int = 0  # milliunits

    @property
    def balance_amount(self) -> Decimal:
        """Balance in currency units."""
        return milliunits_to_amount(self.balance)


class CategoryGroup(BaseModel):
    """A YNAB category group."""

    id: str
    name: str
    hidden: bool = False
    deleted: bool = False
    category_ids: list[str] = Field(default_factory=list)


class Category(BaseModel):
    """A YNAB category."""

    id: str
    name: str
    category_group_id: str
    hidden: bool = False
    deleted: bool = False
    note: str | None = None
    balance: int = 0  # milliunits


class Transaction(BaseModel):
    """A YNAB transaction."""

    id: str
    date: date
    amount: int  # milliunits, negative=outflow
    account_id: str
    account_name: str | None = None
    payee_name: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    transfer_account_id: str | None = None
    deleted: bool = False


class CategoryValues(NamedTuple):
    """Category groups and categories with the server knowledge they reflect."""

    groups: list[CategoryGroup]
    categories: list[Category]
    server_knowledge: int


class TransactionEntries(NamedTuple):
    """Transactions with the server knowledge they reflect."""

    transactions: list[Transaction]
    server_knowledge: int


class CategoryTotal(BaseModel):
    """Summed transaction amount for a category group or category."""

    id: str
    name: str
    total: int  # milliunits


def milliunits_to_amount(milliunits: int) -> Decimal:
    """Convert YNAB milliunits (thousandths of a unit) to a Decimal amount."""
    return Decimal(milliunits) / Decimal(1000)


# ============================================================================
# Authorization Models
# ============================================================================


class AuthorizationStatus(str, Enum):
    """Whether the budget client holds a working access token."""

    LOGGED_IN = "logged_in"
    LOGGED_OUT = "logged_out"
    UNKNOWN = "unknown"

