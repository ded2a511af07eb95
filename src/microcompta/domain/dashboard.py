"""Dashboard aggregation over calendar months and years."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from microcompta.database.base import Database
from microcompta.domain.account import pending_total
from microcompta.domain.entities import (
    Expense,
    IncomeTaxPayment,
    Invoice,
    PaymentStatus,
    Settings,
    TaxPayment,
    UrssafPayment,
)
from microcompta.domain.recurrence import month_total
from microcompta.domain.reports import (
    DashboardMonth,
    DashboardYear,
    DashboardYearMonth,
    MonthFigures,
    UpcomingPayment,
)
from microcompta.domain.settings import SettingsService
from microcompta.domain.urssaf import find_declaration
from microcompta.domain.vat import collected_vat, revenue_ht
from microcompta.utils.date_parser import month_end, month_key, trimester_of
from microcompta.utils.money import apply_rate

logger = logging.getLogger(__name__)

UPCOMING_PER_KIND = 3
UPCOMING_LIMIT = 5


def month_figures(
    invoices: Sequence[Invoice], expenses: Sequence[Expense], year: int, month: int
) -> MonthFigures:
    """Revenue, expenses (recurring expanded) and VAT of one month."""
    start = date(year, month, 1)
    end = month_end(start)
    revenue = revenue_ht(invoices, start, end)
    collected = collected_vat(invoices, start, end)
    spent = month_total(expenses, start)
    return MonthFigures(
        year=year,
        month=month,
        revenue_ht=revenue,
        revenue_ttc=revenue + collected,
        expenses_ht=spent.amount_ht,
        tva_collected=collected,
        tva_recoverable=spent.recoverable_tax,
    )


def upcoming_payments(
    tax_payments: Sequence[TaxPayment], urssaf_payments: Sequence[UrssafPayment]
) -> tuple[UpcomingPayment, ...]:
    """Oldest pending VAT and Urssaf payments, merged.

    Takes the three oldest of each kind and keeps the first five. VAT
    entries sort by period month, ahead of Urssaf entries which sort by
    description.
    """
    pending_vat = sorted(
        (p for p in tax_payments if p.status == PaymentStatus.PENDING),
        key=lambda p: p.period_month,
    )[:UPCOMING_PER_KIND]
    pending_urssaf = sorted(
        (p for p in urssaf_payments if p.status == PaymentStatus.PENDING),
        key=lambda p: (p.year, p.trimester),
    )[:UPCOMING_PER_KIND]

    entries = [
        UpcomingPayment(
            kind="tva",
            amount=p.amount,
            description=f"TVA {p.period_month}",
            due_period=p.period_month,
        )
        for p in pending_vat
    ]
    entries += [
        UpcomingPayment(
            kind="urssaf",
            amount=p.amount,
            description=f"Urssaf T{p.trimester} {p.year}",
        )
        for p in pending_urssaf
    ]
    entries.sort(key=lambda e: e.due_period or e.description)
    return tuple(entries[:UPCOMING_LIMIT])


def month_dashboard(
    invoices: Sequence[Invoice],
    expenses: Sequence[Expense],
    tax_payments: Sequence[TaxPayment],
    urssaf_payments: Sequence[UrssafPayment],
    settings: Settings,
    year: int,
    month: int,
) -> DashboardMonth:
    """Monthly dashboard with flat-rate Urssaf and income tax estimates.

    Pending totals and upcoming payments cover every period, not only the
    requested month.
    """
    figures = month_figures(invoices, expenses, year, month)
    return DashboardMonth(
        figures=figures,
        urssaf_estimate=apply_rate(figures.revenue_ht, settings.urssaf_rate),
        income_tax_estimate=apply_rate(figures.revenue_ht, settings.estimated_tax_rate),
        pending_tva=pending_total(tax_payments),
        pending_urssaf=pending_total(urssaf_payments),
        upcoming_payments=upcoming_payments(tax_payments, urssaf_payments),
    )


def year_dashboard(
    invoices: Sequence[Invoice],
    expenses: Sequence[Expense],
    tax_payments: Sequence[TaxPayment],
    urssaf_payments: Sequence[UrssafPayment],
    income_tax_payments: Sequence[IncomeTaxPayment],
    settings: Settings,
    year: int,
    today: date,
) -> DashboardYear:
    """Month-by-month view of a year with KPIs.

    For the current year only months up to the current one are listed.
    A month's VAT shows the paid payment amount when one exists, else the
    net VAT.
    """
    is_current = year == today.year
    last_month = today.month if is_current else 12

    paid_vat = {
        p.period_month: p for p in tax_payments if p.status == PaymentStatus.PAID
    }

    totals = {
        "revenue": Decimal("0"),
        "urssaf_paid": Decimal("0"),
        "urssaf_estimated": Decimal("0"),
        "income_tax_estimated": Decimal("0"),
        "tva_paid": Decimal("0"),
        "tva_estimated": Decimal("0"),
        "remaining": Decimal("0"),
    }
    rows = []
    for month in range(1, last_month + 1):
        figures = month_figures(invoices, expenses, year, month)
        urssaf = apply_rate(figures.revenue_ht, settings.urssaf_rate)
        income_tax = apply_rate(figures.revenue_ht, settings.estimated_tax_rate)

        declaration = find_declaration(urssaf_payments, year, trimester_of(month))
        urssaf_is_paid = declaration is not None and declaration.status == PaymentStatus.PAID

        vat_payment = paid_vat.get(month_key(date(year, month, 1)))
        tva = vat_payment.amount if vat_payment is not None else figures.net_tva

        row = DashboardYearMonth(
            month=month,
            revenue=figures.revenue_ht,
            expenses_ht=figures.expenses_ht,
            urssaf=urssaf,
            urssaf_is_paid=urssaf_is_paid,
            income_tax=income_tax,
            tva=tva,
            tva_is_paid=vat_payment is not None,
        )
        rows.append(row)

        totals["revenue"] += figures.revenue_ht
        totals["urssaf_paid" if urssaf_is_paid else "urssaf_estimated"] += urssaf
        totals["income_tax_estimated"] += income_tax
        if vat_payment is not None:
            totals["tva_paid"] += tva
        else:
            totals["tva_estimated"] += figures.net_tva
        totals["remaining"] += row.remaining

    income_tax_paid = sum(
        (p.amount for p in income_tax_payments if p.status == PaymentStatus.PAID),
        Decimal("0"),
    )

    kpis = {
        "totalRevenue": totals["revenue"],
        "totalUrssafPaid": totals["urssaf_paid"],
        "totalUrssafEstimated": totals["urssaf_estimated"],
        "totalUrssaf": totals["urssaf_paid"] + totals["urssaf_estimated"],
        "totalIncomeTaxPaid": income_tax_paid,
        "totalIncomeTaxEstimated": totals["income_tax_estimated"],
        "totalTvaPaid": totals["tva_paid"],
        "totalTvaEstimated": totals["tva_estimated"],
        "totalRemaining": totals["remaining"],
    }

    return DashboardYear(
        year=year,
        current_month=today.month if is_current else None,
        months=tuple(rows),
        income_tax_paid=income_tax_paid,
        kpis=kpis,
    )


class DashboardService:
    """Service building dashboard views from the ledger."""

    def __init__(self, db: Database):
        """Initialize dashboard service.

        Args:
            db: Database instance
        """
        self.db = db
        self.settings = SettingsService(db)

    def _load(self, user_id: str, start: date, end: date):
        invoices = self.db.list_invoices(user_id, paid_from=start, paid_to=end)
        expenses = self.db.list_expenses(
            user_id, start_date=start, end_date=end, is_recurring=False
        )
        expenses += self.db.list_recurring_expenses(user_id, active_from=start, active_to=end)
        return invoices, expenses

    def month_summary(self, user_id: str, year: int, month: int) -> DashboardMonth:
        """Get the dashboard of one month.

        Raises:
            ValueError: If month is not between 1 and 12
        """
        start = date(year, month, 1)
        invoices, expenses = self._load(user_id, start, month_end(start))
        return month_dashboard(
            invoices,
            expenses,
            self.db.list_tax_payments(user_id),
            self.db.list_urssaf_payments(user_id),
            self.settings.effective_settings(user_id, year),
            year,
            month,
        )

    def year_summary(self, user_id: str, year: int, today: Optional[date] = None) -> DashboardYear:
        """Get the yearly dashboard with KPIs."""
        today = today or date.today()
        invoices, expenses = self._load(user_id, date(year, 1, 1), date(year, 12, 31))
        result = year_dashboard(
            invoices,
            expenses,
            self.db.list_tax_payments(user_id, start_month=f"{year}-01", end_month=f"{year}-12"),
            self.db.list_urssaf_payments(user_id, year=year),
            self.db.list_income_tax_payments(user_id, year=year),
            self.settings.effective_settings(user_id, year),
            year,
            today,
        )
        logger.debug("Yearly dashboard %s for %s: %d months", year, user_id, len(result.months))
        return result
