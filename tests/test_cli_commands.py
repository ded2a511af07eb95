"""Tests for CLI commands."""

import json

import pytest

from microcompta.cli.main import cli


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def _run(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return _run


def test_help_does_not_open_database(cli_runner, tmp_path):
    db_path = tmp_path / "never.db"
    result = cli_runner.invoke(cli, ["--db-path", str(db_path), "--help"])
    assert result.exit_code == 0
    assert "invoice" in result.output
    assert not db_path.exists()


class TestInvoiceCommands:
    def test_add_and_list(self, run):
        result = run("invoice", "add", "ACME", "1 000,00", "--date", "2025-03-01", "--paid", "2025-03-10")
        assert result.exit_code == 0
        assert "Created invoice 1: ACME 1000.00 HT / 1200.00 TTC" in result.output

        result = run("invoice", "list", "--month", "2025-03")
        assert result.exit_code == 0
        assert "ACME" in result.output
        assert "2025-03-10" in result.output

    def test_list_empty(self, run):
        result = run("invoice", "list")
        assert result.exit_code == 0
        assert "No invoices found." in result.output

    def test_invalid_amount(self, run):
        result = run("invoice", "add", "ACME", "abc")
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_pay_unknown_invoice(self, run):
        result = run("invoice", "pay", "99")
        assert result.exit_code == 1
        assert "Invoice 99 not found" in result.output

    def test_update_cancel_delete(self, run):
        run("invoice", "add", "ACME", "1000", "--date", "2025-03-01")

        result = run("invoice", "update", "1", "--tax-rate", "10")
        assert result.exit_code == 0
        assert "1100.00 TTC" in result.output

        result = run("invoice", "cancel", "1")
        assert result.exit_code == 0
        assert "canceled" in result.output

        result = run("invoice", "delete", "1", "--yes")
        assert result.exit_code == 0
        assert "Deleted invoice 1" in result.output


class TestExpenseCommands:
    def test_add_recurring(self, run):
        result = run(
            "expense", "add", "Hosting", "20", "--tax", "4",
            "--recurring", "monthly", "--start-month", "2025-01", "--payment-day", "5",
        )
        assert result.exit_code == 0
        assert "Created expense 1" in result.output

        result = run("expense", "list", "--recurring")
        assert "monthly from 2025-01" in result.output

    def test_recurring_requires_start_month(self, run):
        result = run("expense", "add", "Hosting", "20", "--recurring", "monthly", "--payment-day", "5")
        assert result.exit_code == 1
        assert "start month" in result.output

    def test_end(self, run):
        run(
            "expense", "add", "Hosting", "20",
            "--recurring", "monthly", "--start-month", "2025-01", "--payment-day", "5",
        )
        result = run("expense", "end", "1", "2025-06")
        assert result.exit_code == 0
        assert "ends after 2025-06" in result.output


class TestTvaCommands:
    def test_declaration_json(self, run):
        run("invoice", "add", "ACME", "1000", "--date", "2025-03-01", "--paid", "2025-03-10")

        result = run("tva", "declaration", "2025-03", "--json")

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["cases"]["A1"] == 1000
        assert payload["summary"]["tvaNet"] == 200

    def test_declaration_bad_month(self, run):
        result = run("tva", "declaration", "03-2025")
        assert result.exit_code == 1
        assert "Invalid month" in result.output

    def test_summary_with_dates(self, run):
        run("invoice", "add", "ACME", "1000", "--date", "2025-03-01", "--paid", "2025-03-10")

        result = run("tva", "summary", "--start-date", "2025-03-01", "--end-date", "2025-03-31", "--json")

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["tvaCollected"] == "200.00"
        assert payload["netTva"] == "200.00"

    def test_payments(self, run):
        result = run("tva", "pay-add", "2025-03", "200")
        assert result.exit_code == 0

        result = run("tva", "pay-mark", "1", "--date", "2025-04-19")
        assert result.exit_code == 0

        result = run("tva", "pay-list", "--year", "2025")
        assert "2025-03" in result.output
        assert "paid" in result.output

    def test_monthly_json(self, run):
        result = run("tva", "monthly", "--year", "2025", "--json")
        assert result.exit_code == 0
        assert len(json.loads(result.output)["months"]) == 12


class TestUrssafCommands:
    def test_declare_defaults_to_estimate(self, run):
        run("invoice", "add", "ACME", "1000", "--date", "2025-01-05", "--paid", "2025-02-10")

        result = run("urssaf", "declare", "2025", "1")

        assert result.exit_code == 0
        assert "220.00 on 1000.00" in result.output

    def test_declare_twice(self, run):
        run("urssaf", "declare", "2025", "1", "--revenue", "0", "--amount", "0")
        result = run("urssaf", "declare", "2025", "1", "--revenue", "0", "--amount", "0")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_declare_bad_trimester(self, run):
        result = run("urssaf", "declare", "2025", "5")
        assert result.exit_code == 1
        assert "Trimester must be between 1 and 4" in result.output

    def test_summary_json(self, run):
        result = run("urssaf", "summary", "--year", "2025", "--json")
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["urssafRate"] == "22.00"
        assert len(payload["trimesters"]) == 4

    def test_calculate(self, run):
        result = run("urssaf", "calculate", "1000")
        assert result.exit_code == 0
        assert "220.00" in result.output


class TestIncomeTaxCommands:
    def test_summary_json(self, run):
        run("settings", "set", "--deduction-rate", "0")
        run("invoice", "add", "ACME", "30000", "--date", "2025-04-01", "--paid", "2025-05-01")

        result = run("income-tax", "summary", "--year", "2025", "--json")

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["estimatedTax"] == "2165.48"
        assert payload["bracketSource"] == "builtin"

    def test_declare_and_mark(self, run):
        result = run("income-tax", "declare", "2025", "500")
        assert result.exit_code == 0
        result = run("income-tax", "pay-mark", "1")
        assert result.exit_code == 0
        result = run("income-tax", "pay-mark", "2")
        assert result.exit_code == 1


class TestSettingsCommands:
    def test_show_defaults(self, run):
        result = run("settings", "show", "--json")
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["urssafRate"] == "22.00"
        assert payload["monthlySalary"] == "3000.00"

    def test_set_and_show(self, run):
        result = run("settings", "set", "--salary", "2500", "--urssaf-rate", "21,2")
        assert result.exit_code == 0

        payload = json.loads(run("settings", "show", "--json").output)
        assert payload["monthlySalary"] == "2500.00"
        assert payload["urssafRate"] == "21.20"

    def test_set_nothing(self, run):
        result = run("settings", "set")
        assert result.exit_code == 1

    def test_set_invalid_rate(self, run):
        result = run("settings", "set", "--tax-rate", "150")
        assert result.exit_code == 1
        assert "between 0 and 100" in result.output

    def test_yearly_rates(self, run):
        result = run("settings", "rates-set", "2025", "--urssaf-rate", "24.6", "--tax-rate", "5")
        assert result.exit_code == 0

        payload = json.loads(run("settings", "show", "--year", "2025", "--json").output)
        assert payload["urssafRate"] == "24.60"
        assert payload["isCustom"] is True

        result = run("settings", "rates-reset", "2025")
        assert "reset to defaults" in result.output
        result = run("settings", "rates-reset", "2025")
        assert "No custom rates" in result.output

    def test_brackets(self, run):
        result = run("settings", "brackets-set", "2026", "0:11600:0", "11600::11")
        assert result.exit_code == 0
        assert "Stored 2 custom brackets" in result.output

        payload = json.loads(run("settings", "brackets", "--year", "2026", "--json").output)
        assert payload["source"] == "custom"
        assert payload["brackets"][1]["maxIncome"] is None

        result = run("settings", "brackets-reset", "--year", "2026")
        assert "Removed 2 custom brackets" in result.output

        payload = json.loads(run("settings", "brackets", "--year", "2026", "--json").output)
        assert payload["source"] == "builtin"

    def test_bad_bracket(self, run):
        result = run("settings", "brackets-set", "2026", "0-100-5")
        assert result.exit_code == 1
        assert "MIN:MAX:RATE" in result.output


class TestAccountCommands:
    def test_balance(self, run):
        result = run("account", "balance")
        assert result.exit_code == 0
        assert "0.00" in result.output

        result = run("account", "set-balance", "10000")
        assert result.exit_code == 0
        assert "Balance set to 10000.00" in result.output

    def test_summary_json(self, run):
        run("account", "set-balance", "10000")
        run("settings", "set", "--salary", "3000")

        result = run("account", "summary", "--json")

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["currentBalance"] == "10000.00"
        assert payload["availableFunds"] == "7000.00"


class TestDashboardCommands:
    def test_month_json(self, run):
        run("invoice", "add", "ACME", "1000", "--date", "2025-03-01", "--paid", "2025-03-10")

        result = run("dashboard", "month", "--year", "2025", "--month", "3", "--json")

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["revenueHt"] == "1000.00"
        assert payload["netRemaining"] == "670.00"

    def test_year_json(self, run):
        result = run("dashboard", "year", "--year", "2024", "--json")
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert len(payload["months"]) == 12
        assert payload["currentMonth"] is None

    def test_month_out_of_range(self, run):
        result = run("dashboard", "month", "--month", "13")
        assert result.exit_code == 2


def test_user_option_isolates_ledgers(run):
    run("--user", "bob", "invoice", "add", "Globex", "500")
    result = run("invoice", "list")
    assert "No invoices found." in result.output
    result = run("--user", "bob", "invoice", "list")
    assert "Globex" in result.output
