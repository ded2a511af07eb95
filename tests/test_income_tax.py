"""Tests for the progressive income tax estimate and bracket resolution."""

from datetime import date
from decimal import Decimal

import pytest

from microcompta.domain.entities import PaymentStatus, TaxBracket
from microcompta.domain.errors import MissingTaxBracketsError
from microcompta.domain.income_tax import IncomeTaxService, progressive_tax, taxable_income
from microcompta.domain.settings import DEFAULT_TAX_BRACKETS_2025, SettingsService


def _brackets(year, *rows, user_id=None):
    return [
        TaxBracket(year=year, min_income=Decimal(lo), max_income=Decimal(hi) if hi else None, rate=Decimal(rate), user_id=user_id)
        for lo, hi, rate in rows
    ]


class TestTaxableIncome:
    def test_applies_abatement(self):
        assert taxable_income(Decimal("100000"), Decimal("34")) == Decimal("66000")

    def test_adds_other_income(self):
        assert taxable_income(Decimal("100000"), Decimal("34"), Decimal("5000")) == Decimal("71000")


class TestProgressiveTax:
    def test_default_brackets(self):
        result = progressive_tax(Decimal("30000"), DEFAULT_TAX_BRACKETS_2025)
        assert result.total == Decimal("2165.48")
        assert [b.rate for b in result.breakdown] == [Decimal("0"), Decimal("11"), Decimal("30")]
        assert result.breakdown[1].taxable_amount == Decimal("17818")
        assert result.breakdown[2].tax_amount == Decimal("205.50")

    def test_top_bracket_is_unbounded(self):
        result = progressive_tax(Decimal("200000"), DEFAULT_TAX_BRACKETS_2025)
        top = result.breakdown[-1]
        assert top.max_income is None
        assert top.taxable_amount == Decimal("19706")

    def test_no_income(self):
        result = progressive_tax(Decimal("0"), DEFAULT_TAX_BRACKETS_2025)
        assert result.total == Decimal("0")
        assert result.breakdown == ()

    def test_empty_brackets(self):
        with pytest.raises(MissingTaxBracketsError):
            progressive_tax(Decimal("1000"), [])


class TestBracketFallback:
    def test_builtin_when_nothing_stored(self, user_id, settings_service):
        source, brackets = settings_service.resolve_brackets(user_id, 2031)
        assert source == "builtin"
        assert len(brackets) == 5

    def test_official_before_builtin(self, temp_db, user_id, settings_service):
        temp_db.replace_tax_brackets(None, 2026, _brackets(2026, ("0", "12000", "0"), ("12000", None, "20")))
        source, brackets = settings_service.resolve_brackets(user_id, 2026)
        assert source == "official"
        assert brackets[1].rate == Decimal("20")

    def test_custom_before_official(self, temp_db, user_id, settings_service):
        temp_db.replace_tax_brackets(None, 2026, _brackets(2026, ("0", None, "20")))
        settings_service.set_custom_brackets(user_id, 2026, [(Decimal("0"), None, Decimal("10"))])
        source, brackets = settings_service.resolve_brackets(user_id, 2026)
        assert source == "custom"
        assert brackets[0].rate == Decimal("10")

    def test_custom_brackets_are_per_user(self, user_id, settings_service):
        settings_service.set_custom_brackets(user_id, 2026, [(Decimal("0"), None, Decimal("10"))])
        source, _ = settings_service.resolve_brackets("bob", 2026)
        assert source == "builtin"

    def test_all_tiers_empty(self, temp_db, user_id):
        settings = SettingsService(temp_db, builtin_brackets=())
        with pytest.raises(MissingTaxBracketsError) as excinfo:
            settings.resolve_brackets(user_id, 2026)
        assert excinfo.value.year == 2026
        assert "2026" in str(excinfo.value)


class TestIncomeTaxService:
    @pytest.fixture
    def revenue_30000(self, user_id, invoice_service, settings_service):
        settings_service.update_settings(user_id, revenue_deduction_rate=Decimal("0"))
        invoice_service.create_invoice(
            user_id,
            client="ACME",
            invoice_date=date(2025, 4, 1),
            amount_ht=Decimal("30000"),
            payment_date=date(2025, 5, 1),
        )

    def test_estimate(self, user_id, income_tax_service, revenue_30000):
        assert income_tax_service.estimate(user_id, 2025) == Decimal("2165.48")

    def test_estimate_until(self, user_id, income_tax_service, revenue_30000):
        assert income_tax_service.estimate(user_id, 2025, until=date(2025, 4, 30)) == Decimal("0")

    def test_summary(self, user_id, income_tax_service, payment_service, revenue_30000):
        payment_service.declare_income_tax_payment(
            user_id, 2025, Decimal("500"), status=PaymentStatus.PAID, payment_date=date(2025, 9, 1)
        )
        payment_service.declare_income_tax_payment(user_id, 2025, Decimal("300"))

        summary = income_tax_service.summary(user_id, 2025)

        assert summary.total_revenue == Decimal("30000")
        assert summary.taxable_income == Decimal("30000")
        assert summary.estimated_tax == Decimal("2165.48")
        assert summary.total_paid == Decimal("500")
        assert summary.total_pending == Decimal("300")
        assert summary.remaining == Decimal("1365.48")
        assert summary.bracket_source == "builtin"
        assert summary.to_dict()["estimatedTax"] == "2165.48"

    def test_remaining_never_negative(self, user_id, income_tax_service, payment_service):
        payment_service.declare_income_tax_payment(user_id, 2025, Decimal("500"))
        assert income_tax_service.summary(user_id, 2025).remaining == Decimal("0")

    def test_missing_brackets_propagate(self, temp_db, user_id):
        service = IncomeTaxService(temp_db, SettingsService(temp_db, builtin_brackets=()))
        with pytest.raises(MissingTaxBracketsError):
            service.estimate(user_id, 2025)
