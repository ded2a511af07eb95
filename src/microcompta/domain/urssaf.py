"""Urssaf social contribution computations."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from microcompta.database.base import Database
from microcompta.domain.entities import Invoice, PaymentStatus, UrssafPayment
from microcompta.domain.reports import UrssafSummary, UrssafTrimester
from microcompta.domain.settings import SettingsService
from microcompta.domain.vat import revenue_ht
from microcompta.utils.date_parser import trimester_range
from microcompta.utils.money import apply_rate

logger = logging.getLogger(__name__)


def estimate(revenue: Decimal, urssaf_rate: Decimal) -> Decimal:
    """Contribution owed on ``revenue`` at ``urssaf_rate`` percent."""
    return apply_rate(revenue, urssaf_rate)


def trimester_revenue(
    invoices: Sequence[Invoice], year: int, trimester: int, until: Optional[date] = None
) -> Decimal:
    """Revenue HT paid during a trimester, optionally cut off at ``until``."""
    start, end = trimester_range(year, trimester)
    if until is not None and until < end:
        end = until
    return revenue_ht(invoices, start, end)


def find_declaration(
    payments: Sequence[UrssafPayment], year: int, trimester: int
) -> Optional[UrssafPayment]:
    """The declared payment for (year, trimester), if any."""
    for payment in payments:
        if payment.year == year and payment.trimester == trimester:
            return payment
    return None


def annual_summary(
    invoices: Sequence[Invoice],
    payments: Sequence[UrssafPayment],
    year: int,
    urssaf_rate: Decimal,
) -> UrssafSummary:
    """Revenue and estimate per trimester, plus totals of declared payments.

    Estimates of undeclared trimesters stay out of the totals.
    """
    trimesters = []
    total_revenue = Decimal("0")
    total_amount = Decimal("0")
    total_paid = Decimal("0")
    total_pending = Decimal("0")

    for trimester in range(1, 5):
        start, end = trimester_range(year, trimester)
        actual = revenue_ht(invoices, start, end)
        payment = find_declaration(payments, year, trimester)

        if payment is not None:
            total_revenue += payment.revenue
            total_amount += payment.amount
            if payment.status == PaymentStatus.PAID:
                total_paid += payment.amount
            else:
                total_pending += payment.amount

        trimesters.append(
            UrssafTrimester(
                trimester=trimester,
                start_date=start,
                end_date=end,
                actual_revenue=actual,
                estimated_amount=estimate(actual, urssaf_rate),
                payment=payment,
            )
        )

    return UrssafSummary(
        year=year,
        urssaf_rate=urssaf_rate,
        trimesters=tuple(trimesters),
        total_revenue=total_revenue,
        total_amount=total_amount,
        total_paid=total_paid,
        total_pending=total_pending,
    )


class UrssafService:
    """Service computing Urssaf summaries from the ledger."""

    def __init__(self, db: Database):
        """Initialize Urssaf service.

        Args:
            db: Database instance
        """
        self.db = db
        self.settings = SettingsService(db)

    def summary(self, user_id: str, year: int) -> UrssafSummary:
        """Get the annual Urssaf summary for a year."""
        rates = self.settings.effective_settings(user_id, year)
        invoices = self.db.list_invoices(
            user_id, paid_from=date(year, 1, 1), paid_to=date(year, 12, 31)
        )
        payments = self.db.list_urssaf_payments(user_id, year=year)
        return annual_summary(invoices, payments, year, rates.urssaf_rate)

    def calculate(self, user_id: str, revenue: Decimal, year: Optional[int] = None) -> Decimal:
        """Contribution owed on an arbitrary revenue at the user's rate."""
        rates = self.settings.effective_settings(user_id, year)
        return estimate(revenue, rates.urssaf_rate)
