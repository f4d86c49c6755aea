"""Custom exceptions for CW Reports."""


class CwReportsError(Exception):
    """Base exception for all CW Reports errors."""

    pass


class ConfigurationError(CwReportsError):
    """Raised when configuration is invalid or missing."""

    pass


class BudgetClientError(CwReportsError):
    """Raised when the budget service request fails.

    ``code`` is the HTTP status or YNAB error id; both it and ``message``
    are None when the failure could not be classified.
    """

    NOT_AUTHORIZED_CODE = "401"

    def __init__(self, code: str | None = None, message: str | None = None):
        self.code = code
        self.message = message
        super().__init__(message or (f"HTTP {code}" if code else "Unknown error"))

    @property
    def is_not_authorized(self) -> bool:
        """True when the service rejected the access token."""
        return self.code == self.NOT_AUTHORIZED_CODE

    @classmethod
    def not_authorized(cls) -> "BudgetClientError":
        """Create the error raised when no valid access token is available."""
        return cls(code=cls.NOT_AUTHORIZED_CODE, message="client not authenticated")


class SelectedBudgetIdInvalidError(BudgetClientError):
    """Raised when selecting a budget id that is not among the loaded budgets."""

    def __init__(self, budget_id: str):
        self.budget_id = budget_id
        super().__init__(
            message="The selected budget is not valid or could not be found."
        )
