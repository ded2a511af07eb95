"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the calculation engines never
see ORM rows or database-specific types.
"""

from decimal import Decimal
from typing import Optional

from microcompta.domain import entities as domain
from microcompta.database.models import (
    BusinessAccount as ORMBusinessAccount,
    Expense as ORMExpense,
    IncomeTaxPayment as ORMIncomeTaxPayment,
    Invoice as ORMInvoice,
    TaxBracket as ORMTaxBracket,
    TaxPayment as ORMTaxPayment,
    UrssafPayment as ORMUrssafPayment,
    UserSettings as ORMUserSettings,
    YearlySettings as ORMYearlySettings,
)


def _dec(value) -> Optional[Decimal]:
    # SQLite returns floats for Numeric columns on some drivers
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def invoice_to_domain(orm_invoice: ORMInvoice) -> domain.Invoice:
    """Convert SQLAlchemy Invoice model to domain Invoice entity."""
    return domain.Invoice(
        id=orm_invoice.id,
        client=orm_invoice.client,
        invoice_date=orm_invoice.invoice_date,
        amount_ht=_dec(orm_invoice.amount_ht),
        tax_rate=_dec(orm_invoice.tax_rate),
        amount_ttc=_dec(orm_invoice.amount_ttc),
        payment_date=orm_invoice.payment_date,
        is_canceled=orm_invoice.is_canceled,
        description=orm_invoice.description,
        invoice_number=orm_invoice.invoice_number,
        note=orm_invoice.note,
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity."""
    period = orm_expense.recurrence_period
    return domain.Expense(
        id=orm_expense.id,
        description=orm_expense.description,
        date=orm_expense.date,
        amount_ht=_dec(orm_expense.amount_ht),
        tax_amount=_dec(orm_expense.tax_amount) or Decimal("0"),
        tax_recovery_rate=_dec(orm_expense.tax_recovery_rate),
        category=domain.ExpenseCategory(orm_expense.category),
        is_intra_eu=orm_expense.is_intra_eu,
        is_recurring=orm_expense.is_recurring,
        recurrence_period=domain.RecurrencePeriod(period) if period else None,
        start_month=orm_expense.start_month,
        end_month=orm_expense.end_month,
        payment_day=orm_expense.payment_day,
        note=orm_expense.note,
    )


def tax_payment_to_domain(orm_payment: ORMTaxPayment) -> domain.TaxPayment:
    """Convert SQLAlchemy TaxPayment model to domain TaxPayment entity."""
    return domain.TaxPayment(
        id=orm_payment.id,
        period_month=orm_payment.period_month,
        amount=_dec(orm_payment.amount),
        status=domain.PaymentStatus(orm_payment.status),
        payment_date=orm_payment.payment_date,
        reference=orm_payment.reference,
        note=orm_payment.note,
    )


def urssaf_payment_to_domain(orm_payment: ORMUrssafPayment) -> domain.UrssafPayment:
    """Convert SQLAlchemy UrssafPayment model to domain UrssafPayment entity."""
    return domain.UrssafPayment(
        id=orm_payment.id,
        year=orm_payment.year,
        trimester=orm_payment.trimester,
        revenue=_dec(orm_payment.revenue),
        amount=_dec(orm_payment.amount),
        status=domain.PaymentStatus(orm_payment.status),
        payment_date=orm_payment.payment_date,
        reference=orm_payment.reference,
        note=orm_payment.note,
    )


def income_tax_payment_to_domain(orm_payment: ORMIncomeTaxPayment) -> domain.IncomeTaxPayment:
    """Convert SQLAlchemy IncomeTaxPayment model to domain IncomeTaxPayment entity."""
    return domain.IncomeTaxPayment(
        id=orm_payment.id,
        year=orm_payment.year,
        amount=_dec(orm_payment.amount),
        status=domain.PaymentStatus(orm_payment.status),
        payment_date=orm_payment.payment_date,
        reference=orm_payment.reference,
        note=orm_payment.note,
    )


def settings_to_domain(orm_settings: ORMUserSettings) -> domain.Settings:
    """Convert SQLAlchemy UserSettings model to domain Settings entity."""
    return domain.Settings(
        urssaf_rate=_dec(orm_settings.urssaf_rate),
        estimated_tax_rate=_dec(orm_settings.estimated_tax_rate),
        revenue_deduction_rate=_dec(orm_settings.revenue_deduction_rate),
        monthly_salary=_dec(orm_settings.monthly_salary),
        additional_taxable_income=_dec(orm_settings.additional_taxable_income) or Decimal("0"),
    )


def yearly_rates_to_domain(orm_rates: ORMYearlySettings) -> domain.YearlyRates:
    """Convert SQLAlchemy YearlySettings model to domain YearlyRates entity."""
    return domain.YearlyRates(
        year=orm_rates.year,
        urssaf_rate=_dec(orm_rates.urssaf_rate),
        estimated_tax_rate=_dec(orm_rates.estimated_tax_rate),
    )


def tax_bracket_to_domain(orm_bracket: ORMTaxBracket) -> domain.TaxBracket:
    """Convert SQLAlchemy TaxBracket model to domain TaxBracket entity."""
    return domain.TaxBracket(
        year=orm_bracket.year,
        min_income=_dec(orm_bracket.min_income),
        max_income=_dec(orm_bracket.max_income),
        rate=_dec(orm_bracket.rate),
        user_id=orm_bracket.user_id,
    )


def account_balance_to_domain(orm_account: ORMBusinessAccount) -> domain.AccountBalance:
    """Convert SQLAlchemy BusinessAccount model to domain AccountBalance entity."""
    return domain.AccountBalance(
        balance=_dec(orm_account.balance),
        updated_at=orm_account.updated_at,
    )
