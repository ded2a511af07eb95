"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date

# Import entities directly to avoid circular import through domain/__init__.py
from microcompta.domain.entities import (
    AccountBalance,
    Expense,
    IncomeTaxPayment,
    Invoice,
    PaymentStatus,
    Settings,
    TaxBracket,
    TaxPayment,
    UrssafPayment,
    YearlyRates,
)


class Database(ABC):
    """Abstract database interface for microcompta.

    Every ledger operation is scoped by ``user_id``.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Invoice operations
    @abstractmethod
    def create_invoice(self, user_id: str, **fields) -> int:
        """Create an invoice from entity field values. Returns invoice ID."""
        pass

    @abstractmethod
    def get_invoice(self, user_id: str, invoice_id: int) -> Optional[Invoice]:
        """Get invoice by ID."""
        pass

    @abstractmethod
    def list_invoices(
        self,
        user_id: str,
        paid_from: Optional[date] = None,
        paid_to: Optional[date] = None,
        include_canceled: bool = True,
    ) -> list[Invoice]:
        """List invoices, optionally only those paid within [paid_from, paid_to].

        When either payment bound is given, unpaid invoices are left out.
        """
        pass

    @abstractmethod
    def update_invoice(
        self,
        user_id: str,
        invoice_id: int,
        amount_ht=None,
        tax_rate=None,
        amount_ttc=None,
        payment_date: Optional[date] = None,
        clear_payment_date: bool = False,
        is_canceled: Optional[bool] = None,
    ) -> None:
        """Update invoice fields. None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_invoice(self, user_id: str, invoice_id: int) -> None:
        """Delete an invoice."""
        pass

    # Expense operations
    @abstractmethod
    def create_expense(self, user_id: str, **fields) -> int:
        """Create an expense from entity field values. Returns expense ID."""
        pass

    @abstractmethod
    def get_expense(self, user_id: str, expense_id: int) -> Optional[Expense]:
        """Get expense by ID."""
        pass

    @abstractmethod
    def list_expenses(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_recurring: Optional[bool] = None,
    ) -> list[Expense]:
        """List expenses by expense date range and recurring flag."""
        pass

    @abstractmethod
    def list_recurring_expenses(
        self,
        user_id: str,
        active_from: Optional[date] = None,
        active_to: Optional[date] = None,
    ) -> list[Expense]:
        """List recurring expenses whose start/end months overlap [active_from, active_to]."""
        pass

    @abstractmethod
    def update_expense_end_month(self, user_id: str, expense_id: int, end_month: Optional[date]) -> None:
        """Set or clear the last month of a recurring expense."""
        pass

    @abstractmethod
    def delete_expense(self, user_id: str, expense_id: int) -> None:
        """Delete an expense."""
        pass

    # VAT payment operations
    @abstractmethod
    def create_tax_payment(self, user_id: str, **fields) -> int:
        """Create a VAT payment. Returns payment ID."""
        pass

    @abstractmethod
    def get_tax_payment(self, user_id: str, payment_id: int) -> Optional[TaxPayment]:
        """Get VAT payment by ID."""
        pass

    @abstractmethod
    def list_tax_payments(
        self,
        user_id: str,
        start_month: Optional[str] = None,
        end_month: Optional[str] = None,
        status: Optional[PaymentStatus] = None,
    ) -> list[TaxPayment]:
        """List VAT payments whose "YYYY-MM" period lies in [start_month, end_month]."""
        pass

    @abstractmethod
    def update_tax_payment_status(
        self, user_id: str, payment_id: int, status: PaymentStatus, payment_date: Optional[date]
    ) -> None:
        """Update VAT payment status and payment date."""
        pass

    # Urssaf payment operations
    @abstractmethod
    def create_urssaf_payment(self, user_id: str, **fields) -> int:
        """Create an Urssaf payment. Returns payment ID."""
        pass

    @abstractmethod
    def get_urssaf_payment(self, user_id: str, payment_id: int) -> Optional[UrssafPayment]:
        """Get Urssaf payment by ID."""
        pass

    @abstractmethod
    def list_urssaf_payments(
        self,
        user_id: str,
        year: Optional[int] = None,
        trimester: Optional[int] = None,
        status: Optional[PaymentStatus] = None,
    ) -> list[UrssafPayment]:
        """List Urssaf payments ordered by year and trimester."""
        pass

    @abstractmethod
    def update_urssaf_payment_status(
        self, user_id: str, payment_id: int, status: PaymentStatus, payment_date: Optional[date]
    ) -> None:
        """Update Urssaf payment status and payment date."""
        pass

    # Income tax payment operations
    @abstractmethod
    def create_income_tax_payment(self, user_id: str, **fields) -> int:
        """Create an income tax payment. Returns payment ID."""
        pass

    @abstractmethod
    def get_income_tax_payment(self, user_id: str, payment_id: int) -> Optional[IncomeTaxPayment]:
        """Get income tax payment by ID."""
        pass

    @abstractmethod
    def list_income_tax_payments(
        self,
        user_id: str,
        year: Optional[int] = None,
        status: Optional[PaymentStatus] = None,
    ) -> list[IncomeTaxPayment]:
        """List income tax payments."""
        pass

    @abstractmethod
    def update_income_tax_payment_status(
        self, user_id: str, payment_id: int, status: PaymentStatus, payment_date: Optional[date]
    ) -> None:
        """Update income tax payment status and payment date."""
        pass

    # Settings operations
    @abstractmethod
    def get_settings(self, user_id: str) -> Optional[Settings]:
        """Get stored settings, or None if the user has none."""
        pass

    @abstractmethod
    def save_settings(self, user_id: str, settings: Settings) -> None:
        """Create or replace the user's settings."""
        pass

    @abstractmethod
    def get_yearly_rates(self, user_id: str, year: int) -> Optional[YearlyRates]:
        """Get the rate override of a year."""
        pass

    @abstractmethod
    def save_yearly_rates(self, user_id: str, rates: YearlyRates) -> None:
        """Create or replace the rate override of a year."""
        pass

    @abstractmethod
    def delete_yearly_rates(self, user_id: str, year: int) -> bool:
        """Delete the rate override of a year. Returns False if none existed."""
        pass

    # Tax bracket operations
    @abstractmethod
    def list_tax_brackets(self, user_id: Optional[str], year: int) -> list[TaxBracket]:
        """List brackets of a year ordered by min income.

        ``user_id=None`` selects the global default brackets.
        """
        pass

    @abstractmethod
    def replace_tax_brackets(
        self, user_id: Optional[str], year: int, brackets: list[TaxBracket]
    ) -> None:
        """Replace all brackets of an owner (user or global) for a year."""
        pass

    @abstractmethod
    def delete_tax_brackets(self, user_id: str, year: Optional[int] = None) -> int:
        """Delete a user's custom brackets (one year or all). Returns count deleted."""
        pass

    # Account balance operations
    @abstractmethod
    def get_account_balance(self, user_id: str) -> Optional[AccountBalance]:
        """Get the stored balance, or None if never set."""
        pass

    @abstractmethod
    def save_account_balance(self, user_id: str, balance: AccountBalance) -> None:
        """Create or replace the stored balance."""
        pass
