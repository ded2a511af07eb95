"""Recurrence expansion of expenses onto calendar months.

Quarterly and yearly schedules match on month-of-year only: an expense
started in month M is active in month M of every later year, and a
quarterly one in every third month counted from M, regardless of how many
years have elapsed since the start.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from microcompta.domain.entities import Expense, RecurrencePeriod
from microcompta.domain.reports import ExpenseContribution
from microcompta.utils.date_parser import month_start, same_month

logger = logging.getLogger(__name__)

NO_CONTRIBUTION = ExpenseContribution(
    amount_ht=Decimal("0"), tax_amount=Decimal("0"), recoverable_tax=Decimal("0")
)


def is_active(expense: Expense, target_month: date) -> bool:
    """True if ``target_month`` lies within the recurring expense's start/end months."""
    target = month_start(target_month)
    if expense.start_month is None or month_start(expense.start_month) > target:
        return False
    if expense.end_month is not None and month_start(expense.end_month) < target:
        return False
    return True


def matches_schedule(period: RecurrencePeriod, start_month: date, target_month: date) -> bool:
    """Month-of-year schedule check for a recurrence period."""
    start_index = start_month.month - 1
    target_index = target_month.month - 1
    if period == RecurrencePeriod.MONTHLY:
        return True
    if period == RecurrencePeriod.QUARTERLY:
        return (target_index - start_index + 12) % 3 == 0
    if period == RecurrencePeriod.YEARLY:
        return target_index == start_index
    return False


def applies(expense: Expense, target_month: date) -> bool:
    """Decide whether an expense contributes in the month of ``target_month``.

    Non-recurring expenses apply only in the month of their own date.
    Recurring expenses missing a period, start month or payment day never
    apply.
    """
    if not expense.is_recurring:
        return same_month(expense.date, target_month)

    if not expense.has_recurrence:
        logger.debug(
            "Skipping recurring expense %s: incomplete recurrence fields", expense.id
        )
        return False

    if not is_active(expense, target_month):
        return False

    return matches_schedule(expense.recurrence_period, expense.start_month, target_month)


def contribution(expense: Expense, target_month: date) -> ExpenseContribution:
    """Amounts the expense contributes in ``target_month`` (zero if it does not apply)."""
    if not applies(expense, target_month):
        return NO_CONTRIBUTION
    return ExpenseContribution(
        amount_ht=expense.amount_ht,
        tax_amount=expense.tax_amount,
        recoverable_tax=expense.recoverable_tax,
    )


def expand_month(expenses: Iterable[Expense], target_month: date) -> list[Expense]:
    """Recurring expenses from ``expenses`` that apply in ``target_month``."""
    return [exp for exp in expenses if exp.is_recurring and applies(exp, target_month)]


def month_total(expenses: Iterable[Expense], target_month: date) -> ExpenseContribution:
    """Sum of contributions of all expenses (recurring or not) in a month."""
    amount_ht = Decimal("0")
    tax_amount = Decimal("0")
    recoverable = Decimal("0")
    for exp in expenses:
        part = contribution(exp, target_month)
        amount_ht += part.amount_ht
        tax_amount += part.tax_amount
        recoverable += part.recoverable_tax
    return ExpenseContribution(
        amount_ht=amount_ht, tax_amount=tax_amount, recoverable_tax=recoverable
    )
