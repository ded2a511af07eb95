"""Domain model entities for microcompta.

These are pure data classes representing ledger rows, independent of the
database schema. The calculation engines only ever see these types.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

from microcompta.utils.money import apply_rate


class RecurrencePeriod(str, Enum):
    """How often a recurring expense repeats."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class PaymentStatus(str, Enum):
    """Status of a declared tax payment."""

    PENDING = "pending"
    PAID = "paid"


class ExpenseCategory(str, Enum):
    """Expense categories."""

    FIXED = "fixed"
    ONE_TIME = "one-time"
    RECURRING = "recurring"
    PROFESSIONAL = "professional"
    OTHER = "other"


@dataclass(frozen=True)
class Invoice:
    """Invoice issued to a client.

    ``amount_ttc`` is stored as written, never recomputed on read.
    Revenue is recognised on ``payment_date`` (cash basis).
    """

    id: int
    client: str
    invoice_date: date
    amount_ht: Decimal
    tax_rate: Decimal
    amount_ttc: Decimal
    payment_date: Optional[date] = None
    is_canceled: bool = False
    description: Optional[str] = None
    invoice_number: Optional[str] = None
    note: Optional[str] = None

    @property
    def tax_collected(self) -> Decimal:
        return self.amount_ttc - self.amount_ht

    def is_revenue_between(self, start: date, end: date) -> bool:
        """True if this invoice counts as revenue in [start, end]."""
        if self.is_canceled or self.payment_date is None:
            return False
        return start <= self.payment_date <= end


@dataclass(frozen=True)
class Expense:
    """Business expense, optionally recurring."""

    id: int
    description: str
    date: date
    amount_ht: Decimal
    tax_amount: Decimal = Decimal("0")
    tax_recovery_rate: Decimal = Decimal("100")
    category: ExpenseCategory = ExpenseCategory.OTHER
    is_intra_eu: bool = False
    is_recurring: bool = False
    recurrence_period: Optional[RecurrencePeriod] = None
    start_month: Optional[date] = None
    end_month: Optional[date] = None
    payment_day: Optional[int] = None
    note: Optional[str] = None

    @property
    def recoverable_tax(self) -> Decimal:
        """Share of the tax amount that can actually be reclaimed."""
        return apply_rate(self.tax_amount, self.tax_recovery_rate)

    @property
    def has_recurrence(self) -> bool:
        """True when all fields a recurring expense needs are present."""
        return (
            self.recurrence_period is not None
            and self.start_month is not None
            and self.payment_day is not None
        )


@dataclass(frozen=True)
class TaxPayment:
    """Declared VAT payment for one month (``period_month`` is "YYYY-MM")."""

    id: int
    period_month: str
    amount: Decimal
    status: PaymentStatus = PaymentStatus.PENDING
    payment_date: Optional[date] = None
    reference: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class UrssafPayment:
    """Declared Urssaf contribution for a trimester."""

    id: int
    year: int
    trimester: int
    revenue: Decimal
    amount: Decimal
    status: PaymentStatus = PaymentStatus.PENDING
    payment_date: Optional[date] = None
    reference: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class IncomeTaxPayment:
    """Declared income tax payment for a year."""

    id: int
    year: int
    amount: Decimal
    status: PaymentStatus = PaymentStatus.PENDING
    payment_date: Optional[date] = None
    reference: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    """Effective per-user rates and amounts."""

    urssaf_rate: Decimal
    estimated_tax_rate: Decimal
    revenue_deduction_rate: Decimal
    monthly_salary: Decimal
    additional_taxable_income: Decimal = Decimal("0")


@dataclass(frozen=True)
class YearlyRates:
    """Per-year override of the Urssaf and estimated tax rates."""

    year: int
    urssaf_rate: Decimal
    estimated_tax_rate: Decimal


@dataclass(frozen=True)
class TaxBracket:
    """Income tax bracket; ``max_income`` of None means unbounded."""

    year: int
    min_income: Decimal
    max_income: Optional[Decimal]
    rate: Decimal
    user_id: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        return self.user_id is not None


@dataclass(frozen=True)
class AccountBalance:
    """Current business bank account balance."""

    balance: Decimal
    updated_at: Optional[datetime] = None
