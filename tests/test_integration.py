"""Integration tests for end-to-end workflows."""

import json

from microcompta.cli.main import cli


def test_full_quarter_workflow(cli_runner, temp_db):
    """Invoices and expenses -> TVA return -> Urssaf declaration -> yearly dashboard."""

    def run(*args):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])
        assert result.exit_code == 0, result.output
        return result

    run("settings", "set", "--urssaf-rate", "21.2", "--tax-rate", "2.2", "--salary", "2000")

    # Step 1: Q1 invoices, one paid late in April
    run("invoice", "add", "ACME", "2000", "--date", "2025-01-10", "--paid", "2025-01-31")
    run("invoice", "add", "Globex", "1500", "--date", "2025-02-03", "--paid", "2025-03-01")
    run("invoice", "add", "Initech", "800", "--date", "2025-03-20", "--paid", "2025-04-02")

    # Step 2: expenses
    run("expense", "add", "Laptop", "1500", "--tax", "300", "--date", "2025-03-05", "--category", "professional")
    run("expense", "add", "Cloud EU", "100", "--date", "2025-03-07", "--intra-eu")
    run(
        "expense", "add", "Hosting", "25", "--tax", "5",
        "--recurring", "monthly", "--start-month", "2025-01", "--payment-day", "1",
    )

    # Step 3: March TVA return
    result = run("tva", "declaration", "2025-03", "--json")
    payload = json.loads(result.output)
    assert payload["cases"] == {
        "A1": 1500,
        "B2": 100,
        "case08": 1600,
        "case17": 20,
        "case19": 300,
        "case20": 25,
    }
    assert payload["summary"] == {"tvaCollected": 320, "tvaDeductible": 325, "tvaNet": -5}

    # Step 4: Q1 Urssaf declaration uses revenue paid in the trimester only
    result = run("urssaf", "declare", "2025", "1", "--paid", "--date", "2025-04-30")
    assert "742.00 on 3500.00" in result.output

    result = run("urssaf", "summary", "--year", "2025", "--json")
    payload = json.loads(result.output)
    assert payload["totals"]["totalPaid"] == "742.00"
    assert payload["trimesters"][1]["actualRevenue"] == "800.00"

    # Step 5: yearly dashboard for a past year shows every month
    result = run("dashboard", "year", "--year", "2025", "--json")
    payload = json.loads(result.output)
    months = {m["month"]: m for m in payload["months"]}
    assert months[1]["urssafIsPaid"] is True
    assert months[4]["urssafIsPaid"] is False
    assert months[3]["expensesHt"] == "1625.00"
    assert payload["kpis"]["totalRevenue"] == "4300.00"
