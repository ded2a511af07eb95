"""Tests for settings resolution and provider chains."""

from decimal import Decimal

import pytest

from microcompta.domain.errors import ValidationError
from microcompta.domain.fallback import FallbackChain
from microcompta.domain.settings import DEFAULT_SETTINGS


class TestFallbackChain:
    def test_first_non_empty_wins(self):
        chain = FallbackChain([("a", lambda: None), ("b", lambda: []), ("c", lambda: [1]), ("d", lambda: [2])])
        assert chain.resolve() == ("c", [1])

    def test_all_empty(self):
        assert FallbackChain([("a", lambda: None), ("b", lambda: ())]).resolve() is None

    def test_later_providers_are_not_called(self):
        def boom():
            raise AssertionError("should not be called")

        assert FallbackChain([("a", lambda: "x"), ("b", boom)]).resolve() == ("a", "x")


class TestSettingsService:
    def test_defaults(self, user_id, settings_service):
        assert settings_service.get_settings(user_id) == DEFAULT_SETTINGS
        assert settings_service.effective_settings(user_id, 2025) == DEFAULT_SETTINGS

    def test_partial_update_keeps_other_fields(self, user_id, settings_service):
        settings_service.update_settings(user_id, monthly_salary=Decimal("2500"))
        settings_service.update_settings(user_id, urssaf_rate=Decimal("21.2"))

        current = settings_service.get_settings(user_id)

        assert current.monthly_salary == Decimal("2500")
        assert current.urssaf_rate == Decimal("21.2")
        assert current.estimated_tax_rate == DEFAULT_SETTINGS.estimated_tax_rate

    def test_settings_are_per_user(self, user_id, settings_service):
        settings_service.update_settings(user_id, monthly_salary=Decimal("1000"))
        assert settings_service.get_settings("bob").monthly_salary == DEFAULT_SETTINGS.monthly_salary

    @pytest.mark.parametrize(
        "field, value",
        [
            ("urssaf_rate", Decimal("101")),
            ("estimated_tax_rate", Decimal("-1")),
            ("revenue_deduction_rate", Decimal("150")),
            ("monthly_salary", Decimal("-10")),
            ("additional_taxable_income", Decimal("-0.01")),
        ],
    )
    def test_invalid_values(self, user_id, settings_service, field, value):
        with pytest.raises(ValidationError):
            settings_service.update_settings(user_id, **{field: value})

    def test_yearly_override(self, user_id, settings_service):
        settings_service.update_settings(user_id, monthly_salary=Decimal("2000"))
        settings_service.set_yearly_rates(user_id, 2025, Decimal("24.6"), Decimal("5"))

        in_2025 = settings_service.effective_settings(user_id, 2025)
        in_2026 = settings_service.effective_settings(user_id, 2026)

        assert in_2025.urssaf_rate == Decimal("24.6")
        assert in_2025.estimated_tax_rate == Decimal("5")
        assert in_2025.monthly_salary == Decimal("2000")
        assert in_2026.urssaf_rate == DEFAULT_SETTINGS.urssaf_rate
        assert settings_service.effective_settings(user_id).urssaf_rate == DEFAULT_SETTINGS.urssaf_rate

    def test_get_yearly_rates_flags_custom(self, user_id, settings_service):
        rates, is_custom = settings_service.get_yearly_rates(user_id, 2025)
        assert not is_custom
        assert rates.urssaf_rate == DEFAULT_SETTINGS.urssaf_rate

        settings_service.set_yearly_rates(user_id, 2025, Decimal("20"), Decimal("8"))
        rates, is_custom = settings_service.get_yearly_rates(user_id, 2025)
        assert is_custom
        assert rates.urssaf_rate == Decimal("20")

    def test_set_yearly_rates_replaces(self, user_id, settings_service):
        settings_service.set_yearly_rates(user_id, 2025, Decimal("20"), Decimal("8"))
        settings_service.set_yearly_rates(user_id, 2025, Decimal("21"), Decimal("9"))
        assert settings_service.effective_settings(user_id, 2025).urssaf_rate == Decimal("21")

    def test_delete_yearly_rates(self, user_id, settings_service):
        settings_service.set_yearly_rates(user_id, 2025, Decimal("20"), Decimal("8"))
        assert settings_service.delete_yearly_rates(user_id, 2025) is True
        assert settings_service.delete_yearly_rates(user_id, 2025) is False

    def test_invalid_yearly_rate(self, user_id, settings_service):
        with pytest.raises(ValidationError):
            settings_service.set_yearly_rates(user_id, 2025, Decimal("120"), Decimal("8"))


class TestCustomBrackets:
    def test_set_sorts_and_stores(self, user_id, settings_service):
        stored = settings_service.set_custom_brackets(
            user_id,
            2026,
            [(Decimal("10000"), None, Decimal("20")), (Decimal("0"), Decimal("10000"), Decimal("0"))],
        )
        assert [b.min_income for b in stored] == [Decimal("0"), Decimal("10000")]
        assert all(b.is_custom for b in stored)

        source, brackets = settings_service.resolve_brackets(user_id, 2026)
        assert source == "custom"
        assert brackets[1].max_income is None

    def test_set_replaces_previous(self, user_id, settings_service):
        settings_service.set_custom_brackets(user_id, 2026, [(Decimal("0"), None, Decimal("10"))])
        settings_service.set_custom_brackets(user_id, 2026, [(Decimal("0"), None, Decimal("15"))])
        _, brackets = settings_service.resolve_brackets(user_id, 2026)
        assert len(brackets) == 1
        assert brackets[0].rate == Decimal("15")

    def test_empty_is_rejected(self, user_id, settings_service):
        with pytest.raises(ValidationError):
            settings_service.set_custom_brackets(user_id, 2026, [])

    def test_invalid_rate_is_rejected(self, user_id, settings_service):
        with pytest.raises(ValidationError):
            settings_service.set_custom_brackets(user_id, 2026, [(Decimal("0"), None, Decimal("200"))])

    def test_reset(self, user_id, settings_service):
        settings_service.set_custom_brackets(user_id, 2025, [(Decimal("0"), None, Decimal("10"))])
        settings_service.set_custom_brackets(
            user_id, 2026, [(Decimal("0"), Decimal("100"), Decimal("0")), (Decimal("100"), None, Decimal("10"))]
        )

        assert settings_service.reset_custom_brackets(user_id, 2026) == 2
        assert settings_service.resolve_brackets(user_id, 2025)[0] == "custom"
        assert settings_service.reset_custom_brackets(user_id) == 1
        assert settings_service.resolve_brackets(user_id, 2025)[0] == "builtin"
