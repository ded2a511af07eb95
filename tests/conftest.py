"""Shared pytest fixtures for microcompta tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal

import pytest

from microcompta.database.factories import create_sqlite_database
from microcompta.domain.account import AccountService
from microcompta.domain.dashboard import DashboardService
from microcompta.domain.entities import Expense, Invoice, RecurrencePeriod
from microcompta.domain.income_tax import IncomeTaxService
from microcompta.domain.ledger import ExpenseService, InvoiceService, PaymentService
from microcompta.domain.settings import SettingsService
from microcompta.domain.urssaf import UrssafService
from microcompta.domain.vat import VatService

USER = "alice"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_id():
    return USER


@pytest.fixture
def invoice_service(temp_db):
    return InvoiceService(temp_db)


@pytest.fixture
def expense_service(temp_db):
    return ExpenseService(temp_db)


@pytest.fixture
def payment_service(temp_db):
    return PaymentService(temp_db)


@pytest.fixture
def settings_service(temp_db):
    return SettingsService(temp_db)


@pytest.fixture
def vat_service(temp_db):
    return VatService(temp_db)


@pytest.fixture
def urssaf_service(temp_db):
    return UrssafService(temp_db)


@pytest.fixture
def income_tax_service(temp_db):
    return IncomeTaxService(temp_db)


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def dashboard_service(temp_db):
    return DashboardService(temp_db)


@pytest.fixture
def make_invoice():
    """Build an in-memory Invoice with 20% VAT unless told otherwise."""
    counter = iter(range(1, 10_000))

    def _make(amount_ht, payment_date=None, tax_rate="20", is_canceled=False, invoice_date=None):
        ht = Decimal(str(amount_ht))
        rate = Decimal(tax_rate)
        return Invoice(
            id=next(counter),
            client="ACME",
            invoice_date=invoice_date or payment_date or date(2025, 1, 1),
            amount_ht=ht,
            tax_rate=rate,
            amount_ttc=ht + ht * rate / 100,
            payment_date=payment_date,
            is_canceled=is_canceled,
        )

    return _make


@pytest.fixture
def make_expense():
    """Build an in-memory Expense; pass ``period`` to make it recurring."""
    counter = iter(range(1, 10_000))

    def _make(
        amount_ht,
        tax_amount="0",
        expense_date=date(2025, 1, 1),
        period=None,
        start_month=None,
        end_month=None,
        payment_day=1,
        is_intra_eu=False,
        tax_recovery_rate="100",
        description="Expense",
    ):
        recurring = period is not None
        return Expense(
            id=next(counter),
            description=description,
            date=expense_date,
            amount_ht=Decimal(str(amount_ht)),
            tax_amount=Decimal(str(tax_amount)),
            tax_recovery_rate=Decimal(tax_recovery_rate),
            is_intra_eu=is_intra_eu,
            is_recurring=recurring,
            recurrence_period=RecurrencePeriod(period) if recurring else None,
            start_month=start_month,
            end_month=end_month,
            payment_day=payment_day if recurring else None,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
