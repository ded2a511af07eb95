"""Business account balance and available-funds projection."""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from microcompta.database.base import Database
from microcompta.domain.entities import (
    AccountBalance,
    Expense,
    Invoice,
    PaymentStatus,
    TaxPayment,
    UrssafPayment,
)
from microcompta.domain.errors import ValidationError, negative_amount
from microcompta.domain.income_tax import IncomeTaxService
from microcompta.domain.reports import AccountSummary
from microcompta.domain.settings import SettingsService
from microcompta.domain.urssaf import estimate, trimester_revenue
from microcompta.domain.vat import monthly_net
from microcompta.utils.date_parser import iter_months, month_end, month_key, trimester_of
from microcompta.utils.money import to_decimal

logger = logging.getLogger(__name__)


def pending_total(payments: Iterable) -> Decimal:
    """Sum of amounts of payments still pending (declared but unpaid)."""
    return sum(
        (p.amount for p in payments if p.status == PaymentStatus.PENDING), Decimal("0")
    )


def estimate_unfiled_vat(
    invoices: Sequence[Invoice],
    expenses: Sequence[Expense],
    payments: Sequence[TaxPayment],
    today: date,
) -> Decimal:
    """Positive net VAT of months without any declared payment.

    Covers every month of the previous year and of the current year up to
    the current month. A month in credit counts as zero.
    """
    declared = {p.period_month for p in payments}
    total = Decimal("0")
    for month in iter_months(date(today.year - 1, 1, 1), today):
        if month_key(month) in declared:
            continue
        net = monthly_net(invoices, expenses, month)
        if net > 0:
            total += net
    return total


def estimate_unfiled_urssaf(
    invoices: Sequence[Invoice],
    payments: Sequence[UrssafPayment],
    rate_for_year: Callable[[int], Decimal],
    today: date,
) -> Decimal:
    """Estimated contributions of trimesters without a declaration.

    Covers the four trimesters of the previous year and the current year's
    trimesters up to the running one, whose revenue window stops at the end
    of the current month.
    """
    declared = {(p.year, p.trimester) for p in payments}
    current_trimester = trimester_of(today.month)
    total = Decimal("0")
    for year in (today.year - 1, today.year):
        last = 4 if year < today.year else current_trimester
        for trimester in range(1, last + 1):
            if (year, trimester) in declared:
                continue
            until = None
            if year == today.year and trimester == current_trimester:
                until = month_end(today)
            revenue = trimester_revenue(invoices, year, trimester, until=until)
            total += estimate(revenue, rate_for_year(year))
    return total


def project_available_funds(
    current_balance: Decimal,
    pending_vat: Decimal,
    estimated_vat: Decimal,
    pending_urssaf: Decimal,
    estimated_urssaf: Decimal,
    pending_income_tax: Decimal,
    estimated_income_tax: Decimal,
    monthly_salary: Decimal,
) -> AccountSummary:
    """Balance minus every obligation and the reserved salary.

    Declared pending income tax and the income tax estimate are both
    counted.
    """
    return AccountSummary(
        current_balance=to_decimal(current_balance),
        pending_vat=to_decimal(pending_vat),
        estimated_vat=to_decimal(estimated_vat),
        pending_urssaf=to_decimal(pending_urssaf),
        estimated_urssaf=to_decimal(estimated_urssaf),
        pending_income_tax=to_decimal(pending_income_tax),
        estimated_income_tax=to_decimal(estimated_income_tax),
        monthly_salary=to_decimal(monthly_salary),
    )


class AccountService:
    """Service for the business account balance and available funds."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db
        self.settings = SettingsService(db)
        self.income_tax = IncomeTaxService(db, self.settings)

    def get_balance(self, user_id: str) -> AccountBalance:
        """Get the current balance (zero if never set)."""
        balance = self.db.get_account_balance(user_id)
        if balance is None:
            return AccountBalance(balance=Decimal("0.00"))
        return balance

    def set_balance(self, user_id: str, balance) -> AccountBalance:
        """Set the current balance.

        Raises:
            ValidationError: If balance is negative
        """
        amount = to_decimal(balance)
        if amount < 0:
            raise ValidationError(negative_amount("Balance", balance))
        record = AccountBalance(balance=amount, updated_at=datetime.now(UTC))
        self.db.save_account_balance(user_id, record)
        logger.info("Updated account balance for %s", user_id)
        return record

    def summary(self, user_id: str, today: Optional[date] = None) -> AccountSummary:
        """Get available funds after all pending and estimated obligations.

        Raises:
            MissingTaxBracketsError: If no bracket tier is configured
        """
        today = today or date.today()
        window_start = date(today.year - 1, 1, 1)
        window_end = month_end(today)

        invoices = self.db.list_invoices(user_id, paid_from=window_start, paid_to=window_end)
        expenses = self.db.list_expenses(
            user_id, start_date=window_start, end_date=window_end, is_recurring=False
        )
        expenses += self.db.list_recurring_expenses(
            user_id, active_from=window_start, active_to=window_end
        )
        tax_payments = self.db.list_tax_payments(user_id)
        urssaf_payments = self.db.list_urssaf_payments(user_id)
        income_tax_payments = self.db.list_income_tax_payments(
            user_id, status=PaymentStatus.PENDING
        )

        def urssaf_rate(year: int) -> Decimal:
            return self.settings.effective_settings(user_id, year).urssaf_rate

        result = project_available_funds(
            current_balance=self.get_balance(user_id).balance,
            pending_vat=pending_total(tax_payments),
            estimated_vat=estimate_unfiled_vat(invoices, expenses, tax_payments, today),
            pending_urssaf=pending_total(urssaf_payments),
            estimated_urssaf=estimate_unfiled_urssaf(
                invoices, urssaf_payments, urssaf_rate, today
            ),
            pending_income_tax=pending_total(income_tax_payments),
            estimated_income_tax=self.income_tax.estimate(user_id, today.year),
            monthly_salary=self.settings.effective_settings(user_id, today.year).monthly_salary,
        )
        logger.debug("Available funds for %s: %s", user_id, result.available_funds)
        return result
