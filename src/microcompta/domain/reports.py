"""Computed summaries returned by the calculation engines.

Amounts are kept as unrounded Decimals. ``to_dict()`` is the presentation
boundary: currency becomes fixed 2-decimal strings, VAT declaration cases
stay whole integers.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from microcompta.domain.entities import Expense, Invoice, UrssafPayment
from microcompta.utils.money import format_amount, round_whole

# Declarations assume every sale and intra-EU purchase is at the normal rate
STANDARD_VAT_RATE = Decimal("0.20")


def _payment_dict(payment: Optional[UrssafPayment]) -> Optional[dict[str, Any]]:
    if payment is None:
        return None
    return {
        "id": payment.id,
        "year": payment.year,
        "trimester": payment.trimester,
        "revenue": format_amount(payment.revenue),
        "amount": format_amount(payment.amount),
        "status": payment.status.value,
        "paymentDate": payment.payment_date.isoformat() if payment.payment_date else None,
        "reference": payment.reference,
    }


@dataclass(frozen=True)
class ExpenseContribution:
    """What one expense contributes to a given month."""

    amount_ht: Decimal
    tax_amount: Decimal
    recoverable_tax: Decimal


@dataclass(frozen=True)
class VatPeriodSummary:
    """Collected, recoverable and net VAT over a date range."""

    start_date: date
    end_date: date
    collected: Decimal
    recoverable: Decimal
    total_paid: Decimal = Decimal("0")
    total_pending: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.collected - self.recoverable

    @property
    def balance(self) -> Decimal:
        return self.net - self.total_paid

    def to_dict(self) -> dict[str, Any]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "tvaCollected": format_amount(self.collected),
            "tvaRecoverable": format_amount(self.recoverable),
            "netTva": format_amount(self.net),
            "totalPaid": format_amount(self.total_paid),
            "totalPending": format_amount(self.total_pending),
            "balance": format_amount(self.balance),
        }


@dataclass(frozen=True)
class MonthlyVat:
    """One month of the yearly VAT breakdown."""

    year: int
    month: int
    collected: Decimal
    recoverable: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    due_date: date
    payment_status: str

    @property
    def net(self) -> Decimal:
        return self.collected - self.recoverable

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "tvaCollected": format_amount(self.collected),
            "tvaRecoverable": format_amount(self.recoverable),
            "netTva": format_amount(self.net),
            "paidAmount": format_amount(self.paid_amount),
            "pendingAmount": format_amount(self.pending_amount),
            "dueDate": self.due_date.isoformat(),
            "paymentStatus": self.payment_status,
        }


@dataclass(frozen=True)
class VatDeclaration:
    """Monthly VAT return broken down into declaration cases.

    The ``*_raw`` values are unrounded; the integer properties are what
    goes on the form.
    """

    month: str
    a1_raw: Decimal
    b2_raw: Decimal
    case19_raw: Decimal
    other_deductible_raw: Decimal
    invoices_paid: tuple[Invoice, ...] = ()
    expenses_intra_eu: tuple[Expense, ...] = ()
    expenses_over_500: tuple[Expense, ...] = ()
    expenses_with_tva: tuple[Expense, ...] = ()

    @property
    def case08_raw(self) -> Decimal:
        return self.a1_raw + self.b2_raw

    @property
    def case17_raw(self) -> Decimal:
        return self.b2_raw * STANDARD_VAT_RATE

    @property
    def case20_raw(self) -> Decimal:
        return self.other_deductible_raw + self.case17_raw

    @property
    def tva_collected_raw(self) -> Decimal:
        return self.case08_raw * STANDARD_VAT_RATE

    @property
    def tva_deductible_raw(self) -> Decimal:
        return self.case19_raw + self.case20_raw

    @property
    def tva_net_raw(self) -> Decimal:
        return self.tva_collected_raw - self.tva_deductible_raw

    @property
    def cases(self) -> dict[str, int]:
        return {
            "A1": round_whole(self.a1_raw),
            "B2": round_whole(self.b2_raw),
            "case08": round_whole(self.case08_raw),
            "case17": round_whole(self.case17_raw),
            "case19": round_whole(self.case19_raw),
            "case20": round_whole(self.case20_raw),
        }

    @property
    def summary(self) -> dict[str, int]:
        return {
            "tvaCollected": round_whole(self.tva_collected_raw),
            "tvaDeductible": round_whole(self.tva_deductible_raw),
            "tvaNet": round_whole(self.tva_net_raw),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "cases": self.cases,
            "details": {
                "invoicesPaid": [inv.id for inv in self.invoices_paid],
                "expensesIntraEu": [exp.id for exp in self.expenses_intra_eu],
                "expensesOver500": [exp.id for exp in self.expenses_over_500],
                "expensesWithTva": [exp.id for exp in self.expenses_with_tva],
            },
            "summary": self.summary,
        }


@dataclass(frozen=True)
class UrssafTrimester:
    """Revenue and estimate for one trimester, with its declaration if any."""

    trimester: int
    start_date: date
    end_date: date
    actual_revenue: Decimal
    estimated_amount: Decimal
    payment: Optional[UrssafPayment] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "trimester": self.trimester,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "actualRevenue": format_amount(self.actual_revenue),
            "estimatedAmount": format_amount(self.estimated_amount),
            "payment": _payment_dict(self.payment),
        }


@dataclass(frozen=True)
class UrssafSummary:
    """Annual Urssaf summary. Totals only cover declared trimesters."""

    year: int
    urssaf_rate: Decimal
    trimesters: tuple[UrssafTrimester, ...]
    total_revenue: Decimal
    total_amount: Decimal
    total_paid: Decimal
    total_pending: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "urssafRate": format_amount(self.urssaf_rate),
            "trimesters": [t.to_dict() for t in self.trimesters],
            "totals": {
                "totalRevenue": format_amount(self.total_revenue),
                "totalAmount": format_amount(self.total_amount),
                "totalPaid": format_amount(self.total_paid),
                "totalPending": format_amount(self.total_pending),
            },
        }


@dataclass(frozen=True)
class BracketTax:
    """Tax computed inside one contributing bracket."""

    min_income: Decimal
    max_income: Optional[Decimal]
    rate: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "minIncome": format_amount(self.min_income),
            "maxIncome": format_amount(self.max_income) if self.max_income is not None else None,
            "rate": format_amount(self.rate),
            "taxableAmount": format_amount(self.taxable_amount),
            "taxAmount": format_amount(self.tax_amount),
        }


@dataclass(frozen=True)
class ProgressiveTax:
    total: Decimal
    breakdown: tuple[BracketTax, ...]


@dataclass(frozen=True)
class IncomeTaxSummary:
    """Annual income tax estimate against declared payments."""

    year: int
    total_revenue: Decimal
    deduction_rate: Decimal
    additional_taxable_income: Decimal
    taxable_income: Decimal
    estimated_tax: Decimal
    total_paid: Decimal
    total_pending: Decimal
    brackets: tuple[BracketTax, ...]
    bracket_source: str

    @property
    def remaining(self) -> Decimal:
        return max(Decimal("0"), self.estimated_tax - self.total_paid - self.total_pending)

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "estimatedTax": format_amount(self.estimated_tax),
            "taxableIncome": format_amount(self.taxable_income),
            "totalRevenue": format_amount(self.total_revenue),
            "deductionRate": format_amount(self.deduction_rate),
            "additionalTaxableIncome": format_amount(self.additional_taxable_income),
            "totalPaid": format_amount(self.total_paid),
            "totalPending": format_amount(self.total_pending),
            "remaining": format_amount(self.remaining),
            "bracketSource": self.bracket_source,
            "brackets": [b.to_dict() for b in self.brackets],
        }


@dataclass(frozen=True)
class AccountSummary:
    """Bank balance against every pending and estimated obligation."""

    current_balance: Decimal
    pending_vat: Decimal
    estimated_vat: Decimal
    pending_urssaf: Decimal
    estimated_urssaf: Decimal
    pending_income_tax: Decimal
    estimated_income_tax: Decimal
    monthly_salary: Decimal

    @property
    def total_obligations(self) -> Decimal:
        return (
            self.pending_vat
            + self.estimated_vat
            + self.pending_urssaf
            + self.estimated_urssaf
            + self.pending_income_tax
            + self.estimated_income_tax
        )

    @property
    def available_funds(self) -> Decimal:
        return self.current_balance - self.total_obligations - self.monthly_salary

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentBalance": format_amount(self.current_balance),
            "pendingTva": format_amount(self.pending_vat),
            "estimatedTva": format_amount(self.estimated_vat),
            "pendingUrssaf": format_amount(self.pending_urssaf),
            "estimatedUrssaf": format_amount(self.estimated_urssaf),
            "pendingIncomeTax": format_amount(self.pending_income_tax),
            "estimatedIncomeTax": format_amount(self.estimated_income_tax),
            "totalObligations": format_amount(self.total_obligations),
            "nextMonthSalary": format_amount(self.monthly_salary),
            "availableFunds": format_amount(self.available_funds),
        }


@dataclass(frozen=True)
class UpcomingPayment:
    kind: str
    amount: Decimal
    description: str
    due_period: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "amount": format_amount(self.amount),
            "dueDate": self.due_period,
            "description": self.description,
        }


@dataclass(frozen=True)
class MonthFigures:
    """Revenue, expenses and VAT for one calendar month."""

    year: int
    month: int
    revenue_ht: Decimal
    revenue_ttc: Decimal
    expenses_ht: Decimal
    tva_collected: Decimal
    tva_recoverable: Decimal

    @property
    def net_tva(self) -> Decimal:
        return self.tva_collected - self.tva_recoverable


@dataclass(frozen=True)
class DashboardMonth:
    """Monthly dashboard: figures plus flat-rate estimates and pending totals."""

    figures: MonthFigures
    urssaf_estimate: Decimal
    income_tax_estimate: Decimal
    pending_tva: Decimal
    pending_urssaf: Decimal
    upcoming_payments: tuple[UpcomingPayment, ...] = ()

    @property
    def net_remaining(self) -> Decimal:
        return (
            self.figures.revenue_ht
            - self.urssaf_estimate
            - self.income_tax_estimate
            - self.figures.expenses_ht
        )

    def to_dict(self) -> dict[str, Any]:
        f = self.figures
        return {
            "month": f.month,
            "year": f.year,
            "revenueHt": format_amount(f.revenue_ht),
            "revenueTtc": format_amount(f.revenue_ttc),
            "tvaCollected": format_amount(f.tva_collected),
            "tvaRecoverable": format_amount(f.tva_recoverable),
            "netTva": format_amount(f.net_tva),
            "urssafEstimate": format_amount(self.urssaf_estimate),
            "incomeTaxEstimate": format_amount(self.income_tax_estimate),
            "expensesHt": format_amount(f.expenses_ht),
            "netRemaining": format_amount(self.net_remaining),
            "pendingTva": format_amount(self.pending_tva),
            "pendingUrssaf": format_amount(self.pending_urssaf),
            "upcomingPayments": [p.to_dict() for p in self.upcoming_payments],
        }


@dataclass(frozen=True)
class DashboardYearMonth:
    """One row of the yearly dashboard."""

    month: int
    revenue: Decimal
    expenses_ht: Decimal
    urssaf: Decimal
    urssaf_is_paid: bool
    income_tax: Decimal
    tva: Decimal
    tva_is_paid: bool

    @property
    def remaining(self) -> Decimal:
        # VAT is a pass-through and is not subtracted
        return self.revenue - self.expenses_ht - self.urssaf - self.income_tax

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "revenue": format_amount(self.revenue),
            "expensesHt": format_amount(self.expenses_ht),
            "urssaf": format_amount(self.urssaf),
            "urssafIsPaid": self.urssaf_is_paid,
            "incomeTax": format_amount(self.income_tax),
            "tva": format_amount(self.tva),
            "tvaIsPaid": self.tva_is_paid,
            "remaining": format_amount(self.remaining),
        }


@dataclass(frozen=True)
class DashboardYear:
    """Yearly dashboard with KPIs."""

    year: int
    current_month: Optional[int]
    months: tuple[DashboardYearMonth, ...]
    income_tax_paid: Decimal
    kpis: dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "currentMonth": self.current_month,
            "kpis": {name: format_amount(value) for name, value in self.kpis.items()},
            "months": [m.to_dict() for m in self.months],
        }
