"""Settings and tax bracket domain service.

Effective values are resolved through ordered provider chains:

- rates for a year: yearly override, then user settings, then defaults
- tax brackets for a year: user's custom brackets, then global official
  brackets, then the built-in 2025 table
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Sequence

from microcompta.database.base import Database
from microcompta.domain.entities import Settings, TaxBracket, YearlyRates
from microcompta.domain.errors import (
    MissingTaxBracketsError,
    ValidationError,
    invalid_rate,
    negative_amount,
)
from microcompta.domain.fallback import FallbackChain
from microcompta.utils.money import to_decimal

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = Settings(
    urssaf_rate=Decimal("22.00"),
    estimated_tax_rate=Decimal("11.00"),
    revenue_deduction_rate=Decimal("34.00"),
    monthly_salary=Decimal("3000.00"),
    additional_taxable_income=Decimal("0.00"),
)

# French income tax brackets for 2025 (revenus 2024)
# Source: https://www.service-public.gouv.fr/particuliers/vosdroits/F1419
DEFAULT_TAX_BRACKETS_2025 = (
    TaxBracket(year=2025, min_income=Decimal("0"), max_income=Decimal("11497"), rate=Decimal("0")),
    TaxBracket(year=2025, min_income=Decimal("11497"), max_income=Decimal("29315"), rate=Decimal("11")),
    TaxBracket(year=2025, min_income=Decimal("29315"), max_income=Decimal("83823"), rate=Decimal("30")),
    TaxBracket(year=2025, min_income=Decimal("83823"), max_income=Decimal("180294"), rate=Decimal("41")),
    TaxBracket(year=2025, min_income=Decimal("180294"), max_income=None, rate=Decimal("45")),
)

SOURCE_CUSTOM = "custom"
SOURCE_OFFICIAL = "official"
SOURCE_BUILTIN = "builtin"


def _check_rate(name: str, value) -> Decimal:
    rate = to_decimal(value)
    if rate < 0 or rate > 100:
        raise ValidationError(invalid_rate(name, value))
    return rate


def _check_amount(name: str, value) -> Decimal:
    amount = to_decimal(value)
    if amount < 0:
        raise ValidationError(negative_amount(name, value))
    return amount


class SettingsService:
    """Service for reading and updating user settings and tax brackets."""

    def __init__(self, db: Database, builtin_brackets: Sequence[TaxBracket] = DEFAULT_TAX_BRACKETS_2025):
        """Initialize settings service.

        Args:
            db: Database instance
            builtin_brackets: Last-resort bracket table
        """
        self.db = db
        self.builtin_brackets = tuple(builtin_brackets)

    def get_settings(self, user_id: str) -> Settings:
        """Get stored settings, or the defaults when the user has none."""
        stored = self.db.get_settings(user_id)
        return stored if stored is not None else DEFAULT_SETTINGS

    def update_settings(
        self,
        user_id: str,
        urssaf_rate=None,
        estimated_tax_rate=None,
        revenue_deduction_rate=None,
        monthly_salary=None,
        additional_taxable_income=None,
    ) -> Settings:
        """Update some settings fields, leaving the others untouched.

        Raises:
            ValidationError: If a rate is outside 0-100 or an amount negative
        """
        changes = {}
        if urssaf_rate is not None:
            changes["urssaf_rate"] = _check_rate("Urssaf rate", urssaf_rate)
        if estimated_tax_rate is not None:
            changes["estimated_tax_rate"] = _check_rate("Estimated tax rate", estimated_tax_rate)
        if revenue_deduction_rate is not None:
            changes["revenue_deduction_rate"] = _check_rate(
                "Revenue deduction rate", revenue_deduction_rate
            )
        if monthly_salary is not None:
            changes["monthly_salary"] = _check_amount("Monthly salary", monthly_salary)
        if additional_taxable_income is not None:
            changes["additional_taxable_income"] = _check_amount(
                "Additional taxable income", additional_taxable_income
            )

        updated = replace(self.get_settings(user_id), **changes)
        self.db.save_settings(user_id, updated)
        logger.info("Updated settings for %s: %s", user_id, sorted(changes))
        return updated

    def effective_settings(self, user_id: str, year: Optional[int] = None) -> Settings:
        """Settings with the year's rate override applied, if one exists."""
        chain: FallbackChain[Settings] = FallbackChain(
            [
                ("yearly", lambda: self._with_yearly_rates(user_id, year)),
                ("user", lambda: self.db.get_settings(user_id)),
                ("default", lambda: DEFAULT_SETTINGS),
            ]
        )
        _, settings = chain.resolve()
        return settings

    def _with_yearly_rates(self, user_id: str, year: Optional[int]) -> Optional[Settings]:
        if year is None:
            return None
        rates = self.db.get_yearly_rates(user_id, year)
        if rates is None:
            return None
        return replace(
            self.get_settings(user_id),
            urssaf_rate=rates.urssaf_rate,
            estimated_tax_rate=rates.estimated_tax_rate,
        )

    # Yearly rate overrides
    def get_yearly_rates(self, user_id: str, year: int) -> tuple[YearlyRates, bool]:
        """Get rates for a year and whether they are a custom override."""
        rates = self.db.get_yearly_rates(user_id, year)
        if rates is not None:
            return rates, True
        base = self.get_settings(user_id)
        return (
            YearlyRates(
                year=year,
                urssaf_rate=base.urssaf_rate,
                estimated_tax_rate=base.estimated_tax_rate,
            ),
            False,
        )

    def set_yearly_rates(self, user_id: str, year: int, urssaf_rate, estimated_tax_rate) -> YearlyRates:
        """Create or replace the rate override of a year."""
        rates = YearlyRates(
            year=year,
            urssaf_rate=_check_rate("Urssaf rate", urssaf_rate),
            estimated_tax_rate=_check_rate("Estimated tax rate", estimated_tax_rate),
        )
        self.db.save_yearly_rates(user_id, rates)
        logger.info("Set yearly rates for %s in %s", user_id, year)
        return rates

    def delete_yearly_rates(self, user_id: str, year: int) -> bool:
        """Remove a year's override. Returns False if there was none."""
        return self.db.delete_yearly_rates(user_id, year)

    # Tax brackets
    def resolve_brackets(self, user_id: str, year: int) -> tuple[str, list[TaxBracket]]:
        """Get the brackets used for a year and the tier they came from.

        Raises:
            MissingTaxBracketsError: If every tier is empty
        """
        chain: FallbackChain[list[TaxBracket]] = FallbackChain(
            [
                (SOURCE_CUSTOM, lambda: self.db.list_tax_brackets(user_id, year)),
                (SOURCE_OFFICIAL, lambda: self.db.list_tax_brackets(None, year)),
                (SOURCE_BUILTIN, lambda: list(self.builtin_brackets)),
            ]
        )
        resolved = chain.resolve()
        if resolved is None:
            raise MissingTaxBracketsError(user_id, year)
        source, brackets = resolved
        if source == SOURCE_BUILTIN:
            logger.debug("No stored brackets for %s, using built-in table", year)
        return source, sorted(brackets, key=lambda b: b.min_income)

    def set_custom_brackets(
        self,
        user_id: str,
        year: int,
        brackets: Sequence[tuple[Decimal, Optional[Decimal], Decimal]],
    ) -> list[TaxBracket]:
        """Replace the user's custom brackets for a year.

        Args:
            brackets: ``(min_income, max_income, rate)`` triples

        Raises:
            ValidationError: If no brackets are given or a value is invalid
        """
        if not brackets:
            raise ValidationError("At least one tax bracket is required")
        entities = []
        for min_income, max_income, rate in brackets:
            entities.append(
                TaxBracket(
                    year=year,
                    min_income=_check_amount("Bracket minimum", min_income),
                    max_income=to_decimal(max_income) if max_income is not None else None,
                    rate=_check_rate("Bracket rate", rate),
                    user_id=user_id,
                )
            )
        entities.sort(key=lambda b: b.min_income)
        self.db.replace_tax_brackets(user_id, year, entities)
        logger.info("Stored %d custom brackets for %s in %s", len(entities), user_id, year)
        return entities

    def reset_custom_brackets(self, user_id: str, year: Optional[int] = None) -> int:
        """Drop custom brackets (for one year or all). Returns the count removed."""
        return self.db.delete_tax_brackets(user_id, year)
