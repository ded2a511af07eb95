"""Ledger domain services: invoices, expenses and declared payments."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from microcompta.database.base import Database
from microcompta.domain.entities import (
    Expense,
    ExpenseCategory,
    IncomeTaxPayment,
    Invoice,
    PaymentStatus,
    RecurrencePeriod,
    TaxPayment,
    UrssafPayment,
)
from microcompta.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_urssaf_declaration,
    expense_not_found,
    invalid_rate,
    invalid_trimester,
    invoice_not_found,
    missing_recurrence_fields,
    negative_amount,
    non_positive_amount,
    payment_not_found,
    required_field,
)
from microcompta.utils.date_parser import month_key, month_start, parse_month
from microcompta.utils.money import amount_ttc, to_decimal

logger = logging.getLogger(__name__)


def _positive(name: str, value) -> Decimal:
    amount = to_decimal(value)
    if amount <= 0:
        raise ValidationError(non_positive_amount(name, value))
    return amount


def _not_negative(name: str, value) -> Decimal:
    amount = to_decimal(value)
    if amount < 0:
        raise ValidationError(negative_amount(name, value))
    return amount


def _rate(name: str, value) -> Decimal:
    rate = to_decimal(value)
    if rate < 0 or rate > 100:
        raise ValidationError(invalid_rate(name, value))
    return rate


def _period_month(value: str) -> str:
    try:
        return month_key(parse_month(value))
    except ValueError as e:
        raise ValidationError(str(e)) from e


class InvoiceService:
    """Service for managing invoices."""

    def __init__(self, db: Database):
        """Initialize invoice service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_invoice(
        self,
        user_id: str,
        client: str,
        invoice_date: date,
        amount_ht,
        tax_rate=Decimal("20"),
        payment_date: Optional[date] = None,
        description: Optional[str] = None,
        invoice_number: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        """Create an invoice, computing its amount including tax.

        Returns:
            Invoice ID

        Raises:
            ValidationError: If client is empty, amount is not positive or
                the tax rate is outside 0-100
        """
        if not client or not client.strip():
            raise ValidationError(required_field("Client"))
        ht = _positive("Amount HT", amount_ht)
        rate = _rate("Tax rate", tax_rate)

        invoice_id = self.db.create_invoice(
            user_id,
            client=client.strip(),
            invoice_date=invoice_date,
            amount_ht=ht,
            tax_rate=rate,
            amount_ttc=amount_ttc(ht, rate),
            payment_date=payment_date,
            description=description,
            invoice_number=invoice_number,
            note=note,
        )
        logger.info("Created invoice %s for %s", invoice_id, user_id)
        return invoice_id

    def get_invoice(self, user_id: str, invoice_id: int) -> Invoice:
        """Get an invoice by ID.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        invoice = self.db.get_invoice(user_id, invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return invoice

    def list_invoices(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        client: Optional[str] = None,
    ) -> list[Invoice]:
        """List invoices by invoice date, newest first.

        Args:
            start_date: Optional lower bound on invoice date
            end_date: Optional upper bound on invoice date
            client: Optional case-insensitive client substring
        """
        invoices = self.db.list_invoices(user_id)
        if start_date is not None:
            invoices = [inv for inv in invoices if inv.invoice_date >= start_date]
        if end_date is not None:
            invoices = [inv for inv in invoices if inv.invoice_date <= end_date]
        if client:
            needle = client.lower()
            invoices = [inv for inv in invoices if needle in inv.client.lower()]
        return sorted(invoices, key=lambda inv: (inv.invoice_date, inv.id), reverse=True)

    def update_amounts(
        self, user_id: str, invoice_id: int, amount_ht=None, tax_rate=None
    ) -> Invoice:
        """Change amount HT and/or tax rate; amount TTC is recomputed.

        Raises:
            NotFoundError: If the invoice does not exist
            ValidationError: If a value is invalid
        """
        invoice = self.get_invoice(user_id, invoice_id)
        ht = _positive("Amount HT", amount_ht) if amount_ht is not None else invoice.amount_ht
        rate = _rate("Tax rate", tax_rate) if tax_rate is not None else invoice.tax_rate
        self.db.update_invoice(
            user_id,
            invoice_id,
            amount_ht=ht,
            tax_rate=rate,
            amount_ttc=amount_ttc(ht, rate),
        )
        return self.get_invoice(user_id, invoice_id)

    def set_payment_date(
        self, user_id: str, invoice_id: int, payment_date: Optional[date]
    ) -> None:
        """Record (or clear, with None) the date the invoice was paid.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        self.get_invoice(user_id, invoice_id)
        self.db.update_invoice(
            user_id,
            invoice_id,
            payment_date=payment_date,
            clear_payment_date=payment_date is None,
        )

    def set_canceled(self, user_id: str, invoice_id: int, canceled: bool = True) -> None:
        """Cancel or reinstate an invoice.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        self.get_invoice(user_id, invoice_id)
        self.db.update_invoice(user_id, invoice_id, is_canceled=canceled)
        logger.info("Invoice %s canceled=%s", invoice_id, canceled)

    def delete_invoice(self, user_id: str, invoice_id: int) -> None:
        """Delete an invoice.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        self.get_invoice(user_id, invoice_id)
        self.db.delete_invoice(user_id, invoice_id)


class ExpenseService:
    """Service for managing expenses."""

    def __init__(self, db: Database):
        """Initialize expense service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_expense(
        self,
        user_id: str,
        description: str,
        expense_date: date,
        amount_ht,
        tax_amount=Decimal("0"),
        tax_recovery_rate=Decimal("100"),
        category: ExpenseCategory = ExpenseCategory.OTHER,
        is_intra_eu: bool = False,
        is_recurring: bool = False,
        recurrence_period: Optional[RecurrencePeriod] = None,
        start_month: Optional[date] = None,
        end_month: Optional[date] = None,
        payment_day: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        """Create an expense.

        Recurring expenses need a recurrence period, a start month and a
        payment day (1-31). Start and end months are stored as the first
        day of their month.

        Returns:
            Expense ID

        Raises:
            ValidationError: If a field is missing or out of range
        """
        if not description or not description.strip():
            raise ValidationError(required_field("Description"))
        ht = _positive("Amount HT", amount_ht)
        tax = _not_negative("Tax amount", tax_amount)
        recovery = _rate("Tax recovery rate", tax_recovery_rate)
        try:
            category = ExpenseCategory(category)
        except ValueError as e:
            raise ValidationError(f"Invalid category '{category}'") from e

        if is_recurring:
            missing = []
            if recurrence_period is None:
                missing.append("recurrence period")
            if start_month is None:
                missing.append("start month")
            if payment_day is None:
                missing.append("payment day")
            if missing:
                raise ValidationError(missing_recurrence_fields(missing))
            recurrence_period = RecurrencePeriod(recurrence_period)
            if not 1 <= payment_day <= 31:
                raise ValidationError(f"Payment day must be between 1 and 31 (got {payment_day})")
            start_month = month_start(start_month)
            if end_month is not None:
                end_month = month_start(end_month)
                if end_month < start_month:
                    raise ValidationError("End month cannot be before start month")
        else:
            recurrence_period = None
            start_month = None
            end_month = None
            payment_day = None

        expense_id = self.db.create_expense(
            user_id,
            description=description.strip(),
            date=expense_date,
            amount_ht=ht,
            tax_amount=tax,
            tax_recovery_rate=recovery,
            category=category,
            is_intra_eu=is_intra_eu,
            is_recurring=is_recurring,
            recurrence_period=recurrence_period,
            start_month=start_month,
            end_month=end_month,
            payment_day=payment_day,
            note=note,
        )
        logger.info("Created expense %s for %s", expense_id, user_id)
        return expense_id

    def get_expense(self, user_id: str, expense_id: int) -> Expense:
        """Get an expense by ID.

        Raises:
            NotFoundError: If the expense does not exist
        """
        expense = self.db.get_expense(user_id, expense_id)
        if expense is None:
            raise NotFoundError(expense_not_found(expense_id))
        return expense

    def list_expenses(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_recurring: Optional[bool] = None,
        category: Optional[ExpenseCategory] = None,
    ) -> list[Expense]:
        """List expenses by date, newest first."""
        expenses = self.db.list_expenses(
            user_id, start_date=start_date, end_date=end_date, is_recurring=is_recurring
        )
        if category is not None:
            expenses = [exp for exp in expenses if exp.category == category]
        return sorted(expenses, key=lambda exp: (exp.date, exp.id), reverse=True)

    def end_recurrence(self, user_id: str, expense_id: int, end_month: date) -> None:
        """Set the last month of a recurring expense.

        Raises:
            NotFoundError: If the expense does not exist
            ValidationError: If it is not recurring or the end is before the start
        """
        expense = self.get_expense(user_id, expense_id)
        if not expense.is_recurring:
            raise ValidationError(f"Expense {expense_id} is not recurring")
        end_month = month_start(end_month)
        if expense.start_month is not None and end_month < expense.start_month:
            raise ValidationError("End month cannot be before start month")
        self.db.update_expense_end_month(user_id, expense_id, end_month)

    def delete_expense(self, user_id: str, expense_id: int) -> None:
        """Delete an expense.

        Raises:
            NotFoundError: If the expense does not exist
        """
        self.get_expense(user_id, expense_id)
        self.db.delete_expense(user_id, expense_id)


class PaymentService:
    """Service for declared VAT, Urssaf and income tax payments."""

    def __init__(self, db: Database):
        """Initialize payment service.

        Args:
            db: Database instance
        """
        self.db = db

    # VAT
    def declare_tax_payment(
        self,
        user_id: str,
        period_month: str,
        amount,
        status: PaymentStatus = PaymentStatus.PENDING,
        payment_date: Optional[date] = None,
        reference: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        """Declare the VAT payment of a "YYYY-MM" month.

        Raises:
            ValidationError: If the month is malformed or amount not positive
        """
        payment_id = self.db.create_tax_payment(
            user_id,
            period_month=_period_month(period_month),
            amount=_positive("Amount", amount),
            status=PaymentStatus(status),
            payment_date=payment_date,
            reference=reference,
            note=note,
        )
        logger.info("Declared VAT payment %s for %s", payment_id, period_month)
        return payment_id

    def list_tax_payments(
        self, user_id: str, year: Optional[int] = None, status: Optional[PaymentStatus] = None
    ) -> list[TaxPayment]:
        """List VAT payments, optionally for one year."""
        if year is None:
            return self.db.list_tax_payments(user_id, status=status)
        return self.db.list_tax_payments(
            user_id, start_month=f"{year}-01", end_month=f"{year}-12", status=status
        )

    def mark_tax_payment_paid(
        self, user_id: str, payment_id: int, payment_date: Optional[date] = None
    ) -> None:
        """Mark a VAT payment as paid.

        Raises:
            NotFoundError: If the payment does not exist
        """
        if self.db.get_tax_payment(user_id, payment_id) is None:
            raise NotFoundError(payment_not_found("VAT", payment_id))
        self.db.update_tax_payment_status(
            user_id, payment_id, PaymentStatus.PAID, payment_date or date.today()
        )

    # Urssaf
    def declare_urssaf_payment(
        self,
        user_id: str,
        year: int,
        trimester: int,
        revenue,
        amount,
        status: PaymentStatus = PaymentStatus.PENDING,
        payment_date: Optional[date] = None,
        reference: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        """Declare the Urssaf contribution of a trimester.

        Raises:
            ValidationError: If trimester is outside 1-4 or an amount is negative
            ConflictError: If the trimester is already declared
        """
        if not 1 <= trimester <= 4:
            raise ValidationError(invalid_trimester(trimester))
        revenue = _not_negative("Revenue", revenue)
        amount = _not_negative("Amount", amount)
        if self.db.list_urssaf_payments(user_id, year=year, trimester=trimester):
            raise ConflictError(duplicate_urssaf_declaration(year, trimester))

        payment_id = self.db.create_urssaf_payment(
            user_id,
            year=year,
            trimester=trimester,
            revenue=revenue,
            amount=amount,
            status=PaymentStatus(status),
            payment_date=payment_date,
            reference=reference,
            note=note,
        )
        logger.info("Declared Urssaf T%s %s for %s", trimester, year, user_id)
        return payment_id

    def list_urssaf_payments(
        self, user_id: str, year: Optional[int] = None, status: Optional[PaymentStatus] = None
    ) -> list[UrssafPayment]:
        return self.db.list_urssaf_payments(user_id, year=year, status=status)

    def mark_urssaf_payment_paid(
        self, user_id: str, payment_id: int, payment_date: Optional[date] = None
    ) -> None:
        """Mark an Urssaf payment as paid.

        Raises:
            NotFoundError: If the payment does not exist
        """
        if self.db.get_urssaf_payment(user_id, payment_id) is None:
            raise NotFoundError(payment_not_found("Urssaf", payment_id))
        self.db.update_urssaf_payment_status(
            user_id, payment_id, PaymentStatus.PAID, payment_date or date.today()
        )

    # Income tax
    def declare_income_tax_payment(
        self,
        user_id: str,
        year: int,
        amount,
        status: PaymentStatus = PaymentStatus.PENDING,
        payment_date: Optional[date] = None,
        reference: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        """Declare an income tax payment for a year.

        Raises:
            ValidationError: If amount is negative
        """
        payment_id = self.db.create_income_tax_payment(
            user_id,
            year=year,
            amount=_not_negative("Amount", amount),
            status=PaymentStatus(status),
            payment_date=payment_date,
            reference=reference,
            note=note,
        )
        logger.info("Declared income tax payment %s for %s", payment_id, year)
        return payment_id

    def list_income_tax_payments(
        self, user_id: str, year: Optional[int] = None, status: Optional[PaymentStatus] = None
    ) -> list[IncomeTaxPayment]:
        return self.db.list_income_tax_payments(user_id, year=year, status=status)

    def mark_income_tax_payment_paid(
        self, user_id: str, payment_id: int, payment_date: Optional[date] = None
    ) -> None:
        """Mark an income tax payment as paid.

        Raises:
            NotFoundError: If the payment does not exist
        """
        if self.db.get_income_tax_payment(user_id, payment_id) is None:
            raise NotFoundError(payment_not_found("Income tax", payment_id))
        self.db.update_income_tax_payment_status(
            user_id, payment_id, PaymentStatus.PAID, payment_date or date.today()
        )
