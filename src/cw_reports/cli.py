"""CLI for CW Reports using Typer."""

import calendar
import logging
import sys
from contextlib import contextmanager
from datetime import date, datetime

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .budget_client import BudgetClient
from .config import load_settings
from .deeplink import (
    fragment_items,
    handle_open_url,
    is_deeplink,
    query_items,
    url_host,
    url_scheme,
)
from .exceptions import BudgetClientError
from .models import BudgetSummary, CategoryTotal, milliunits_to_amount
from .reports import spending_totals_by_category, spending_totals_by_category_group
from .store import (
    SqliteKeyValueStore,
    logout as logout_client,
    make_live_client,
    store_selected_budget_id,
)
from .ui import select_budget_interactive

app = typer.Typer(
    name="cw-reports",
    help="Budget and account reports for YNAB",
)

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@contextmanager
def command_session(verbose: bool):
    """Open the store and budget client for a command and report failures."""
    setup_logging(verbose)
    store = None
    client = None
    try:
        settings = load_settings()
        store = SqliteKeyValueStore(settings.database_path)
        client = make_live_client(store, access_token=settings.ynab_access_token)
        yield settings, store, client
    except typer.Exit:
        raise
    except BudgetClientError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if e.is_not_authorized:
            console.print(
                "[yellow]Not logged in to YNAB. Run [cyan]cw-reports login-url[/cyan] "
                "to authorize.[/yellow]"
            )
        if verbose:
            raise
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)
    finally:
        if client is not None:
            client.close()
        if store is not None:
            store.close()


def format_money(milliunits: int, budget: BudgetSummary | None = None) -> str:
    """Format a milliunit amount with the budget currency, colored by sign."""
    amount = milliunits_to_amount(milliunits)
    if budget is not None and budget.currency_format is not None:
        text = budget.currency_format.format(amount)
    else:
        text = f"{amount:,.2f}"
    color = "red" if amount < 0 else "green"
    return f"[{color}]{text}[/{color}]"


@app.command("login-url")
def login_url(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Print the YNAB authorization URL.

    Open it in a browser and approve access; YNAB redirects to
    cw-reports://oauth#access_token=..., which is passed to `open-url`.
    """
    setup_logging(verbose)
    settings = load_settings()
    console.print("\n[bold]Authorize CW Reports in YNAB:[/bold]")
    console.print(f"  [cyan]{settings.oauth_authorize_url}[/cyan]\n")


@app.command("open-url")
def open_url(
    url: str = typer.Argument(..., help="Deep link received from the browser"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Handle a cw-reports:// deep link such as the OAuth callback."""
    with command_session(verbose) as (_settings, store, client):
        if not handle_open_url(url, client, store):
            console.print("[yellow]URL was not handled.[/yellow]")
            raise typer.Exit(code=1)

        budgets = client.fetch_budget_summaries()
        console.print(
            f"[bold green]✓ Logged in to YNAB[/bold green] "
            f"({len(budgets)} budget{'s' if len(budgets) != 1 else ''} available)"
        )


@app.command("parse-url")
def parse_url(
    url: str = typer.Argument(..., help="URL to decode"),
):
    """Show how a URL is decoded as a deep link."""
    console.print(f"\n[bold]URL:[/bold] {escape(url)}")
    console.print(f"  Scheme: {escape(url_scheme(url) or '—')}")
    console.print(f"  Host: {escape(url_host(url) or '—')}")
    console.print(f"  Deep link: {'yes' if is_deeplink(url) else 'no'}")

    items = query_items(url)
    if items is None:
        console.print("  Query: [dim]none[/dim]")
    else:
        table = Table(title="Query Items", show_header=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Value")
        for item in items:
            value = escape(item.value) if item.value is not None else "[dim]—[/dim]"
            table.add_row(escape(item.name), value)
        console.print(table)

    fragment = fragment_items(url)
    if fragment is None:
        console.print("  Fragment: [dim]none[/dim]")
    else:
        table = Table(
            title="Fragment Items", show_header=True, header_style="bold magenta"
        )
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in fragment.items():
            table.add_row(escape(key), escape(value))
        console.print(table)


def display_budgets(client: BudgetClient):
    """Display budget summaries in a table."""
    table = Table(title="Budgets", show_header=True, header_style="bold magenta")
    table.add_column("", width=1)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Currency", justify="center")
    table.add_column("Last Modified", style="dim")

    for budget in client.budget_summaries:
        table.add_row(
            "*" if budget.id == client.selected_budget_id else "",
            budget.id,
            budget.name,
            budget.currency_code or "—",
            budget.last_modified_on.strftime("%Y-%m-%d %H:%M")
            if budget.last_modified_on
            else "—",
        )

    console.print(table)


@app.command()
def budgets(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List budgets available to the logged in user."""
    with command_session(verbose) as (_settings, _store, client):
        console.print("\n[bold blue]Fetching budgets...[/bold blue]")
        summaries = client.fetch_budget_summaries()
        if not summaries:
            console.print("[yellow]No budgets found.[/yellow]")
            return
        display_budgets(client)


@app.command("select-budget")
def select_budget(
    budget_id: str | None = typer.Argument(
        None, help="Budget ID (prompted interactively when omitted)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Select the budget used by `accounts` and `spending-total`."""
    with command_session(verbose) as (_settings, store, client):
        summaries = client.fetch_budget_summaries()
        if not summaries:
            console.print("[yellow]No budgets found.[/yellow]")
            return

        if budget_id is None:
            budget_id = select_budget_interactive(summaries, client.selected_budget_id)
            if budget_id is None:
                console.print("[yellow]No budget selected.[/yellow]")
                return

        client.update_selected_budget_id(budget_id)
        store_selected_budget_id(budget_id, store)

        selected = client.selected_budget
        name = selected.name if selected else budget_id
        console.print(f"[bold green]✓ Selected budget:[/bold green] {name}")


@app.command()
def accounts(
    show_all: bool = typer.Option(
        False, "--all", "-a", help="Include closed and deleted accounts"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List accounts of the selected budget."""
    with command_session(verbose) as (_settings, store, client):
        client.fetch_budget_summaries()
        budget = client.selected_budget
        if budget is None:
            store_selected_budget_id(None, store)
            console.print(
                "[yellow]No budget selected. Run [cyan]cw-reports select-budget[/cyan] "
                "first.[/yellow]"
            )
            raise typer.Exit(code=1)

        console.print(f"\n[bold blue]Fetching accounts for {budget.name}...[/bold blue]")
        rows = [
            a
            for a in client.fetch_accounts()
            if show_all or not (a.closed or a.deleted)
        ]

        table = Table(
            title=f"{budget.name} Accounts",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Name", style="cyan")
        table.add_column("Type", style="dim")
        table.add_column("On Budget", justify="center")
        table.add_column("Balance", justify="right")
        if show_all:
            table.add_column("Status", style="dim")

        for account in rows:
            row = [
                account.name,
                account.type,
                "✓" if account.on_budget else "",
                format_money(account.balance, budget),
            ]
            if show_all:
                if account.deleted:
                    row.append("deleted")
                else:
                    row.append("closed" if account.closed else "open")
            table.add_row(*row)

        console.print(table)
        total = sum(a.balance for a in rows if a.on_budget)
        console.print(f"  On-budget total: {format_money(total, budget)}")


def current_month() -> tuple[date, date]:
    """First and last day of the current month."""
    today = date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def display_totals(title: str, totals: list[CategoryTotal], budget: BudgetSummary):
    """Display spending totals with a grand total row."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Total", justify="right")

    for total in totals:
        table.add_row(total.id, escape(total.name), format_money(total.total, budget))

    table.add_section()
    grand_total = sum(t.total for t in totals)
    table.add_row("", "[bold]Total[/bold]", format_money(grand_total, budget))
    console.print(table)


@app.command("spending-total")
def spending_total(
    start: datetime | None = typer.Option(
        None,
        "--start",
        "-s",
        formats=["%Y-%m-%d"],
        help="First day (default: start of month)",
    ),
    finish: datetime | None = typer.Option(
        None,
        "--finish",
        "-f",
        formats=["%Y-%m-%d"],
        help="Last day (default: end of month)",
    ),
    group: str | None = typer.Option(
        None, "--group", "-g", help="Break down one category group by category"
    ),
    account: list[str] | None = typer.Option(
        None, "--account", help="Only count this account ID (repeatable)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show spending totals by category group for a date range."""
    month_start, month_finish = current_month()
    start_date = start.date() if start else month_start
    finish_date = finish.date() if finish else month_finish
    if start_date > finish_date:
        console.print("[red]Start date must not be after finish date.[/red]")
        raise typer.Exit(code=1)

    with command_session(verbose) as (_settings, store, client):
        client.fetch_budget_summaries()
        budget = client.selected_budget
        if budget is None:
            store_selected_budget_id(None, store)
            console.print(
                "[yellow]No budget selected. Run [cyan]cw-reports select-budget[/cyan] "
                "first.[/yellow]"
            )
            raise typer.Exit(code=1)

        console.print(
            f"\n[bold blue]Fetching transactions for {budget.name} "
            f"({start_date} to {finish_date})...[/bold blue]"
        )
        accounts_list = client.fetch_accounts()
        values = client.fetch_category_values()
        entries = client.fetch_transactions(
            start_date=start_date, finish_date=finish_date, account_ids=account
        )

        if group is None:
            title = "Spending by Category Group"
            totals = spending_totals_by_category_group(
                entries.transactions,
                accounts_list,
                values.categories,
                values.groups,
                start_date,
                finish_date,
            )
        else:
            names = {g.id: g.name for g in values.groups}
            if group not in names:
                console.print(f"[red]Unknown category group:[/red] {group}")
                raise typer.Exit(code=1)
            title = f"Spending in {names[group]}"
            totals = spending_totals_by_category(
                group,
                entries.transactions,
                accounts_list,
                values.categories,
                start_date,
                finish_date,
            )

        if not totals:
            console.print("[yellow]No spending in this period.[/yellow]")
            return
        display_totals(title, totals, budget)


@app.command()
def logout(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Forget the stored YNAB access token."""
    with command_session(verbose) as (_settings, store, client):
        logout_client(client, store)
        console.print("[bold green]✓ Logged out[/bold green]")


if __name__ == "__main__":
    app()
