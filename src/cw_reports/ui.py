"""Interactive UI components for budget selection."""

import logging
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .models import BudgetSummary

logger = logging.getLogger(__name__)


def budget_label(budget: BudgetSummary) -> str:
    """Display name for a budget in the picker."""
    if budget.currency_code:
        return f"{budget.name} ({budget.currency_code})"
    return budget.name


class BudgetCompleter(Completer):
    """Fuzzy search completer for YNAB budgets."""

    def __init__(self, budgets: list[BudgetSummary]):
        """Initialize the completer with available budgets."""
        self.budgets = budgets
        self.label_to_id = {budget_label(b): b.id for b in budgets}

    def get_completions(self, document: Document, complete_event: Any):
        """Get fuzzy-matched completions."""
        query = document.text.lower()

        for label in self.label_to_id:
            if not query:
                yield Completion(text=label, start_position=0, display=label)
            elif fuzzy_match(query, label.lower()):
                yield Completion(
                    text=label,
                    start_position=-len(document.text),
                    display=label,
                )


def fuzzy_match(query: str, text: str) -> bool:
    """
    Fuzzy match: all characters in query must appear in order in text.

    Example:
        query="hb" matches "home budget"
    """
    query_idx = 0
    for char in text:
        if query_idx < len(query) and char == query[query_idx]:
            query_idx += 1
    return query_idx == len(query)


def select_budget_interactive(
    budgets: list[BudgetSummary], current_budget_id: str | None = None
) -> str | None:
    """
    Interactive budget selection with fuzzy search.

    Args:
        budgets: Available budgets
        current_budget_id: Budget to pre-fill, if any

    Returns:
        Selected budget ID, or None to cancel
    """
    completer = BudgetCompleter(budgets)
    session: PromptSession[str] = PromptSession(completer=completer)

    default_text = ""
    for budget in budgets:
        if budget.id == current_budget_id:
            default_text = budget_label(budget)

    print("Type to search, press Enter to confirm, Ctrl+C to cancel\n")

    try:
        while True:
            result = session.prompt(
                "Budget: ", default=default_text, complete_while_typing=True
            )

            if not result:
                return None

            budget_id = completer.label_to_id.get(result)
            if budget_id:
                logger.info(f"User selected budget: {result}")
                return budget_id

            print("❌ Invalid budget. Please select from the list or press Tab to complete.")
            default_text = ""

    except (KeyboardInterrupt, EOFError):
        return None
