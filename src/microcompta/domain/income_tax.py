"""Income tax estimate with progressive brackets."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from microcompta.database.base import Database
from microcompta.domain.entities import (
    IncomeTaxPayment,
    Invoice,
    PaymentStatus,
    TaxBracket,
)
from microcompta.domain.errors import MissingTaxBracketsError
from microcompta.domain.reports import BracketTax, IncomeTaxSummary, ProgressiveTax
from microcompta.domain.settings import SettingsService
from microcompta.domain.vat import revenue_ht
from microcompta.utils.money import HUNDRED, apply_rate, to_decimal

logger = logging.getLogger(__name__)


def taxable_income(
    annual_revenue: Decimal, deduction_rate: Decimal, additional_income: Decimal = Decimal("0")
) -> Decimal:
    """Revenue after the flat micro-entreprise abatement, plus other taxable income."""
    revenue = to_decimal(annual_revenue)
    return revenue * (1 - to_decimal(deduction_rate) / HUNDRED) + to_decimal(additional_income)


def progressive_tax(income: Decimal, brackets: Sequence[TaxBracket]) -> ProgressiveTax:
    """Apply brackets (ascending ``min_income``) to a taxable income.

    Stops at the first bracket the income does not exceed. Brackets are not
    re-sorted or checked for contiguity here.

    Raises:
        MissingTaxBracketsError: If ``brackets`` is empty
    """
    if not brackets:
        raise MissingTaxBracketsError()

    total = Decimal("0")
    breakdown = []
    for bracket in brackets:
        if income <= bracket.min_income:
            break
        upper = income if bracket.max_income is None else min(income, bracket.max_income)
        in_bracket = upper - bracket.min_income
        if in_bracket <= 0:
            continue
        tax = apply_rate(in_bracket, bracket.rate)
        total += tax
        breakdown.append(
            BracketTax(
                min_income=bracket.min_income,
                max_income=bracket.max_income,
                rate=bracket.rate,
                taxable_amount=in_bracket,
                tax_amount=tax,
            )
        )
    return ProgressiveTax(total=total, breakdown=tuple(breakdown))


def annual_revenue(invoices: Sequence[Invoice], year: int) -> Decimal:
    """Revenue HT of invoices paid during ``year``."""
    return revenue_ht(invoices, date(year, 1, 1), date(year, 12, 31))


def split_payments(payments: Sequence[IncomeTaxPayment]) -> tuple[Decimal, Decimal]:
    """Return ``(paid, pending)`` totals."""
    paid = Decimal("0")
    pending = Decimal("0")
    for payment in payments:
        if payment.status == PaymentStatus.PAID:
            paid += payment.amount
        else:
            pending += payment.amount
    return paid, pending


class IncomeTaxService:
    """Service estimating annual income tax from the ledger."""

    def __init__(self, db: Database, settings: Optional[SettingsService] = None):
        """Initialize income tax service.

        Args:
            db: Database instance
            settings: Settings service (bracket and rate resolution)
        """
        self.db = db
        self.settings = settings or SettingsService(db)

    def _compute(self, user_id: str, year: int, invoices: Sequence[Invoice]):
        rates = self.settings.effective_settings(user_id, year)
        revenue = annual_revenue(invoices, year)
        income = taxable_income(
            revenue, rates.revenue_deduction_rate, rates.additional_taxable_income
        )
        source, brackets = self.settings.resolve_brackets(user_id, year)
        logger.debug("Income tax %s for %s uses %s brackets", year, user_id, source)
        return rates, revenue, income, progressive_tax(income, brackets), source

    def estimate(self, user_id: str, year: int, until: Optional[date] = None) -> Decimal:
        """Estimated tax on revenue paid from January 1st of ``year`` to ``until``.

        Raises:
            MissingTaxBracketsError: If no bracket tier is configured
        """
        end = until or date(year, 12, 31)
        invoices = self.db.list_invoices(user_id, paid_from=date(year, 1, 1), paid_to=end)
        return self._compute(user_id, year, invoices)[3].total

    def summary(self, user_id: str, year: int) -> IncomeTaxSummary:
        """Get the annual income tax summary.

        Raises:
            MissingTaxBracketsError: If no bracket tier is configured
        """
        invoices = self.db.list_invoices(
            user_id, paid_from=date(year, 1, 1), paid_to=date(year, 12, 31)
        )
        rates, revenue, income, result, source = self._compute(user_id, year, invoices)
        paid, pending = split_payments(self.db.list_income_tax_payments(user_id, year=year))
        return IncomeTaxSummary(
            year=year,
            total_revenue=revenue,
            deduction_rate=rates.revenue_deduction_rate,
            additional_taxable_income=rates.additional_taxable_income,
            taxable_income=income,
            estimated_tax=result.total,
            total_paid=paid,
            total_pending=pending,
            brackets=result.breakdown,
            bracket_source=source,
        )
