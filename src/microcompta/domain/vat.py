"""VAT (TVA) computations.

Revenue-side VAT is recognised on invoice payment date. Recoverable VAT
comes from non-recurring expenses dated in the period plus recurring
expenses expanded month by month. Nothing is rounded before output, except
that declaration cases are rounded to whole euros from unrounded sums.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from microcompta.database.base import Database
from microcompta.domain.entities import Expense, Invoice, PaymentStatus, TaxPayment
from microcompta.domain.recurrence import contribution, expand_month
from microcompta.domain.reports import MonthlyVat, VatDeclaration, VatPeriodSummary
from microcompta.utils.date_parser import (
    iter_months,
    month_end,
    month_key,
    month_start,
    parse_month,
    vat_due_date,
)

logger = logging.getLogger(__name__)

IMMOBILISATION_THRESHOLD = Decimal("500")


def revenue_ht(invoices: Iterable[Invoice], start: date, end: date) -> Decimal:
    """Sum of amounts excluding tax of invoices paid in [start, end]."""
    return sum(
        (inv.amount_ht for inv in invoices if inv.is_revenue_between(start, end)),
        Decimal("0"),
    )


def collected_vat(invoices: Iterable[Invoice], start: date, end: date) -> Decimal:
    """VAT collected on invoices paid in [start, end]."""
    return sum(
        (inv.tax_collected for inv in invoices if inv.is_revenue_between(start, end)),
        Decimal("0"),
    )


def recoverable_vat(expenses: Iterable[Expense], start: date, end: date) -> Decimal:
    """Recoverable VAT over [start, end].

    Non-recurring expenses count when their date is inside the range.
    Recurring expenses count once for every month of the range they apply to.
    """
    months = list(iter_months(start, end))
    total = Decimal("0")
    for exp in expenses:
        if not exp.is_recurring:
            if start <= exp.date <= end:
                total += exp.recoverable_tax
            continue
        for month in months:
            total += contribution(exp, month).recoverable_tax
    return total


def sum_payments(
    payments: Iterable[TaxPayment], status: PaymentStatus
) -> Decimal:
    return sum((p.amount for p in payments if p.status == status), Decimal("0"))


def period_summary(
    invoices: Sequence[Invoice],
    expenses: Sequence[Expense],
    payments: Sequence[TaxPayment],
    start: date,
    end: date,
) -> VatPeriodSummary:
    """Net VAT for an arbitrary date range, with declared payments of its months."""
    start_key, end_key = month_key(start), month_key(end)
    in_range = [p for p in payments if start_key <= p.period_month <= end_key]
    return VatPeriodSummary(
        start_date=start,
        end_date=end,
        collected=collected_vat(invoices, start, end),
        recoverable=recoverable_vat(expenses, start, end),
        total_paid=sum_payments(in_range, PaymentStatus.PAID),
        total_pending=sum_payments(in_range, PaymentStatus.PENDING),
    )


def monthly_net(
    invoices: Sequence[Invoice], expenses: Sequence[Expense], month: date
) -> Decimal:
    """Net VAT (collected - recoverable) for the month containing ``month``."""
    start, end = month_start(month), month_end(month)
    return collected_vat(invoices, start, end) - recoverable_vat(expenses, start, end)


def payment_status(
    net: Decimal,
    paid: Decimal,
    pending: Decimal,
    month: date,
    due_date: date,
    today: date,
) -> str:
    """Status of a month's VAT return.

    ``paid`` when anything was paid, ``pending`` when a payment is declared,
    ``not_due`` while the month is running or nothing is owed, then
    ``upcoming`` until the due date and ``overdue`` after it.
    """
    if paid > 0:
        return "paid"
    if pending > 0:
        return "pending"
    if today <= month_end(month):
        return "not_due"
    if net <= 0:
        return "not_due"
    if today > due_date:
        return "overdue"
    return "upcoming"


def monthly_breakdown(
    invoices: Sequence[Invoice],
    expenses: Sequence[Expense],
    payments: Sequence[TaxPayment],
    year: int,
    today: date,
) -> tuple[MonthlyVat, ...]:
    """Collected/recoverable/net VAT and payment status for the 12 months of a year."""
    by_month: dict[str, list[TaxPayment]] = {}
    for payment in payments:
        by_month.setdefault(payment.period_month, []).append(payment)

    months = []
    for month in iter_months(date(year, 1, 1), date(year, 12, 1)):
        start, end = month, month_end(month)
        collected = collected_vat(invoices, start, end)
        recoverable = recoverable_vat(expenses, start, end)
        month_payments = by_month.get(month_key(month), [])
        paid = sum_payments(month_payments, PaymentStatus.PAID)
        pending = sum_payments(month_payments, PaymentStatus.PENDING)
        due = vat_due_date(month)
        months.append(
            MonthlyVat(
                year=year,
                month=month.month,
                collected=collected,
                recoverable=recoverable,
                paid_amount=paid,
                pending_amount=pending,
                due_date=due,
                payment_status=payment_status(
                    collected - recoverable, paid, pending, month, due, today
                ),
            )
        )
    return tuple(months)


def _sum_recoverable(expenses: Iterable[Expense]) -> Decimal:
    return sum((exp.recoverable_tax for exp in expenses), Decimal("0"))


def declaration(
    invoices: Sequence[Invoice], expenses: Sequence[Expense], month: date
) -> VatDeclaration:
    """Build the monthly VAT return for the month containing ``month``.

    - A1: amounts HT of invoices paid in the month
    - B2: amounts HT of intra-EU, non-recurring expenses of the month
    - 19: recoverable VAT on non-intra-EU expenses above 500 HT
    - 20: recoverable VAT on the other non-intra-EU expenses, plus case 17

    Recurring expenses applying to the month join the non-intra-EU sets;
    recurring intra-EU expenses are left out.
    """
    start, end = month_start(month), month_end(month)

    invoices_paid = sorted(
        (inv for inv in invoices if inv.is_revenue_between(start, end)),
        key=lambda inv: inv.payment_date,
    )
    one_off = sorted(
        (exp for exp in expenses if not exp.is_recurring and start <= exp.date <= end),
        key=lambda exp: exp.date,
    )
    intra_eu = [exp for exp in one_off if exp.is_intra_eu]
    with_tax = [exp for exp in one_off if not exp.is_intra_eu and exp.tax_amount > 0]

    recurring = sorted(expand_month(expenses, start), key=lambda exp: exp.description)
    with_tax += [exp for exp in recurring if not exp.is_intra_eu and exp.tax_amount > 0]

    over_threshold = [exp for exp in with_tax if exp.amount_ht > IMMOBILISATION_THRESHOLD]
    other = [exp for exp in with_tax if exp.amount_ht <= IMMOBILISATION_THRESHOLD]

    return VatDeclaration(
        month=month_key(start),
        a1_raw=sum((inv.amount_ht for inv in invoices_paid), Decimal("0")),
        b2_raw=sum((exp.amount_ht for exp in intra_eu), Decimal("0")),
        case19_raw=_sum_recoverable(over_threshold),
        other_deductible_raw=_sum_recoverable(other),
        invoices_paid=tuple(invoices_paid),
        expenses_intra_eu=tuple(intra_eu),
        expenses_over_500=tuple(over_threshold),
        expenses_with_tva=tuple(other),
    )


class VatService:
    """Service computing VAT summaries from the ledger."""

    def __init__(self, db: Database):
        """Initialize VAT service.

        Args:
            db: Database instance
        """
        self.db = db

    def _load(self, user_id: str, start: date, end: date):
        invoices = self.db.list_invoices(user_id, paid_from=start, paid_to=end)
        expenses = self.db.list_expenses(
            user_id, start_date=start, end_date=end, is_recurring=False
        )
        expenses += self.db.list_recurring_expenses(
            user_id, active_from=start, active_to=end
        )
        return invoices, expenses

    def period_summary(self, user_id: str, start: date, end: date) -> VatPeriodSummary:
        """Get collected/recoverable/net VAT between two dates (inclusive)."""
        invoices, expenses = self._load(user_id, start, end)
        payments = self.db.list_tax_payments(
            user_id, start_month=month_key(start), end_month=month_key(end)
        )
        return period_summary(invoices, expenses, payments, start, end)

    def monthly(self, user_id: str, year: int, today: Optional[date] = None) -> tuple[MonthlyVat, ...]:
        """Get the month-by-month VAT breakdown of a year."""
        start, end = date(year, 1, 1), date(year, 12, 31)
        invoices, expenses = self._load(user_id, start, end)
        payments = self.db.list_tax_payments(
            user_id, start_month=f"{year}-01", end_month=f"{year}-12"
        )
        return monthly_breakdown(invoices, expenses, payments, year, today or date.today())

    def declaration(self, user_id: str, month: str) -> VatDeclaration:
        """Get the VAT return for a "YYYY-MM" month.

        Raises:
            ValueError: If month is not a valid YYYY-MM string
        """
        first_day = parse_month(month)
        invoices, expenses = self._load(user_id, first_day, month_end(first_day))
        result = declaration(invoices, expenses, first_day)
        logger.debug("VAT declaration %s for %s: %s", month, user_id, result.cases)
        return result
