"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConfigurationError(DomainError):
    """Stored configuration cannot support the requested computation."""


class MissingTaxBracketsError(ConfigurationError):
    """No tax bracket tier yielded brackets for a user and year."""

    def __init__(self, user_id: Optional[str] = None, year: Optional[int] = None):
        self.user_id = user_id
        self.year = year
        super().__init__(missing_tax_brackets(user_id, year))


def invoice_not_found(invoice_id: int) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def expense_not_found(expense_id: int) -> str:
    """Return message for missing expense."""
    return f"Expense {expense_id} not found"


def payment_not_found(kind: str, payment_id: int) -> str:
    """Return message for a missing payment of a given kind (VAT, Urssaf...)."""
    return f"{kind} payment {payment_id} not found"


def duplicate_urssaf_declaration(year: int, trimester: int) -> str:
    """Return message for a second Urssaf declaration on the same quarter."""
    return f"An Urssaf declaration already exists for T{trimester} {year}"


def invalid_rate(name: str, value) -> str:
    """Return message for a percentage outside 0-100."""
    return f"{name} must be between 0 and 100 (got {value})"


def negative_amount(name: str, value) -> str:
    """Return message for an amount that must not be negative."""
    return f"{name} cannot be negative (got {value})"


def missing_recurrence_fields(missing: list[str]) -> str:
    """Return message for a recurring expense missing recurrence fields."""
    return f"Recurring expense requires: {', '.join(missing)}"


def missing_tax_brackets(user_id: Optional[str], year: Optional[int]) -> str:
    """Return message when no bracket tier is configured."""
    if year is None:
        return "No income tax brackets provided"
    owner = f"user '{user_id}'" if user_id is not None else "global defaults"
    return (
        f"No income tax brackets configured for {year} ({owner}, "
        "official defaults and built-in table are all empty)"
    )


def non_positive_amount(name: str, value) -> str:
    """Return message for an amount that must be strictly positive."""
    return f"{name} must be positive (got {value})"


def required_field(name: str) -> str:
    """Return message for a missing mandatory text field."""
    return f"{name} is required"


def invalid_trimester(trimester: int) -> str:
    """Return message for a trimester outside 1-4."""
    return f"Trimester must be between 1 and 4 (got {trimester})"
