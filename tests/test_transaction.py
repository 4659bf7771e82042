"""Tests for transaction commands."""

import json
from datetime import date, timedelta

import pytest

from finvesta.cli.main import cli


@pytest.fixture
def setup(sample_account, sample_categories):
    """Account and categories for the CLI user."""
    return sample_account, sample_categories


def test_transaction_add(cli_runner, cli_args, setup):
    """Test adding a transaction by account and category name."""
    result = cli_runner.invoke(
        cli,
        cli_args
        + ["transaction", "add", "--account", "Main Checking", "--category", "groceries", "--amount", "€42.50",
           "--description", "Weekly shop", "--date", "yesterday"],
    )

    assert result.exit_code == 0
    assert "Added transaction" in result.output

    listing = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--json"])
    payload = json.loads(listing.output)
    assert len(payload) == 1
    assert payload[0]["amount"] == "42.50"
    assert payload[0]["transactionType"] == "expense"
    assert payload[0]["transactionDate"] == (date.today() - timedelta(days=1)).isoformat()


def test_transaction_add_type_mismatch(cli_runner, cli_args, setup):
    """Test that the category type must match the transaction type."""
    result = cli_runner.invoke(
        cli,
        cli_args
        + ["transaction", "add", "--account", "Main Checking", "--category", "Salary", "--amount", "10",
           "--description", "Oops"],
    )

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_transaction_add_future_date(cli_runner, cli_args, setup):
    """Test that future dates are rejected."""
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    result = cli_runner.invoke(
        cli,
        cli_args
        + ["transaction", "add", "--account", "Main Checking", "--category", "Groceries", "--amount", "10",
           "--description", "Later", "--date", tomorrow],
    )

    assert result.exit_code == 1
    assert "cannot be in the future" in result.output


def test_transaction_add_unknown_account(cli_runner, cli_args, setup):
    """Test adding a transaction to a missing account."""
    result = cli_runner.invoke(
        cli,
        cli_args
        + ["transaction", "add", "--account", "Nope", "--category", "Groceries", "--amount", "10",
           "--description", "Coffee"],
    )

    assert result.exit_code == 1
    assert "Account 'Nope' not found" in result.output


def test_transaction_add_invalid_amount(cli_runner, cli_args, setup):
    """Test that unparseable amounts are reported."""
    result = cli_runner.invoke(
        cli,
        cli_args
        + ["transaction", "add", "--account", "Main Checking", "--category", "Groceries", "--amount", "abc",
           "--description", "Coffee"],
    )

    assert result.exit_code == 1
    assert "Could not parse amount" in result.output


def test_transaction_list_empty(cli_runner, cli_args):
    """Test listing when there are no transactions."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "list"])

    assert result.exit_code == 0
    assert "No transactions found." in result.output


def test_transaction_list(cli_runner, cli_args, sample_transactions):
    """Test listing all transactions."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "list"])

    assert result.exit_code == 0
    assert "Found 3 transaction(s):" in result.output
    assert "Weekly shop" in result.output
    assert "Main Checking" in result.output
    assert "Groceries" in result.output


def test_transaction_list_filters(cli_runner, cli_args, sample_transactions):
    """Test filtering by type, category and limit."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--type", "expense"])
    assert "Found 2 transaction(s):" in result.output

    result = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--category", "Salary"])
    assert "Found 1 transaction(s):" in result.output

    result = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--limit", "1"])
    assert "Found 1 transaction(s):" in result.output
    assert "Bakery" in result.output


def test_transaction_list_date_range(cli_runner, cli_args, sample_transactions):
    """Test filtering by explicit dates."""
    result = cli_runner.invoke(
        cli, cli_args + ["transaction", "list", "--start-date", "yesterday", "--end-date", "today"]
    )

    assert result.exit_code == 0
    assert "Found 2 transaction(s):" in result.output
    assert "Monthly salary" not in result.output


def test_transaction_list_period_conflict(cli_runner, cli_args):
    """Test that --period cannot be combined with explicit dates."""
    result = cli_runner.invoke(
        cli, cli_args + ["transaction", "list", "--period", "this-month", "--start-date", "2024-01-01"]
    )

    assert result.exit_code == 1
    assert "--period cannot be combined" in result.output


def test_transaction_update(cli_runner, cli_args, sample_transactions):
    """Test updating the amount of a transaction."""
    txn = sample_transactions[1]
    result = cli_runner.invoke(cli, cli_args + ["transaction", "update", txn.id, "--amount", "60"])

    assert result.exit_code == 0
    assert f"Updated transaction {txn.id}" in result.output

    listing = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--json"])
    amounts = {row["id"]: row["amount"] for row in json.loads(listing.output)}
    assert amounts[txn.id] == "60.00"


def test_transaction_update_other_user(cli_runner, temp_db, sample_transactions, other_user_id):
    """Test that other users cannot update the transaction."""
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "--user", other_user_id, "transaction", "update",
         sample_transactions[0].id, "--amount", "1"],
    )

    assert result.exit_code == 1
    assert "Transaction not found" in result.output


def test_transaction_reconcile_and_delete(cli_runner, cli_args, sample_transactions):
    """Test that reconciled transactions cannot be deleted until unreconciled."""
    txn_id = sample_transactions[2].id

    result = cli_runner.invoke(cli, cli_args + ["transaction", "reconcile", txn_id])
    assert result.exit_code == 0
    assert "marked as reconciled" in result.output

    result = cli_runner.invoke(cli, cli_args + ["transaction", "delete", txn_id, "--yes"])
    assert result.exit_code == 1
    assert "Cannot delete reconciled transaction" in result.output

    result = cli_runner.invoke(cli, cli_args + ["transaction", "reconcile", txn_id, "--undo"])
    assert "marked as unreconciled" in result.output

    result = cli_runner.invoke(cli, cli_args + ["transaction", "delete", txn_id, "--yes"])
    assert result.exit_code == 0
    assert f"Deleted transaction {txn_id}" in result.output


def test_transaction_delete_cancelled(cli_runner, cli_args, sample_transactions):
    """Test declining the confirmation prompt."""
    result = cli_runner.invoke(
        cli, cli_args + ["transaction", "delete", sample_transactions[0].id], input="n\n"
    )

    assert result.exit_code == 0
    assert "Deletion cancelled." in result.output


def test_transaction_stats(cli_runner, cli_args, sample_transactions):
    """Test the totals over all transactions."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "stats"])

    assert result.exit_code == 0
    assert "Transactions: 3" in result.output
    assert "3,000.00" in result.output
    assert "66.70" in result.output
    assert "2,933.30" in result.output


def test_transaction_monthly(cli_runner, cli_args, sample_transactions):
    """Test the per-month table."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "monthly", "--year", "2020"])

    assert result.exit_code == 0
    assert "January" in result.output
    assert "December" in result.output
    assert "3,000.00" not in result.output


def test_transaction_monthly_year_out_of_range(cli_runner, cli_args):
    """Test that an unsupported year is reported as an error."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "monthly", "--year", "10000"])

    assert result.exit_code == 1
    assert "Error: Year must be between 1 and 9999" in result.output


def test_transaction_add_asks_about_similar_transaction(cli_runner, cli_args, sample_transactions):
    """Test that a likely duplicate needs confirmation unless --force is given."""
    args = cli_args + [
        "transaction", "add", "--account", "Main Checking", "--category", "Groceries", "--amount", "54.20",
        "--description", "Weekly shop", "--date", "today",
    ]

    result = cli_runner.invoke(cli, args, input="n\n")
    assert result.exit_code == 0
    assert "Found 1 similar transaction(s):" in result.output
    assert "Transaction not added." in result.output

    result = cli_runner.invoke(cli, args + ["--force"])
    assert result.exit_code == 0
    assert "similar" not in result.output
    assert "Added transaction" in result.output


def test_transaction_list_page(cli_runner, cli_args, sample_transactions):
    """Test paging through all transactions."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--page", "2", "--limit", "2"])

    assert result.exit_code == 0
    assert "Page 2 of 2 (3 transaction(s) in total):" in result.output
    assert "Monthly salary" in result.output
    assert "Bakery" not in result.output


def test_transaction_list_page_rejects_filters(cli_runner, cli_args):
    """Test that --page only pages through the unfiltered list."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--page", "1", "--type", "income"])

    assert result.exit_code == 1
    assert "--page cannot be combined with filters" in result.output


def test_transaction_list_invalid_page(cli_runner, cli_args):
    """Test that page numbers start at 1."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--page", "0"])

    assert result.exit_code == 1
    assert "Error: Page and page size must be at least 1" in result.output


def test_transaction_search(cli_runner, cli_args, sample_transactions):
    """Test searching descriptions without regard to case."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "search", "SHOP"])

    assert result.exit_code == 0
    assert "Found 1 transaction(s) matching 'SHOP':" in result.output
    assert "Weekly shop" in result.output

    result = cli_runner.invoke(cli, cli_args + ["transaction", "search", "rent"])
    assert "No transactions matching 'rent'." in result.output


def test_transaction_summary(cli_runner, cli_args, sample_transactions):
    """Test the summary of a single day."""
    today = date.today().isoformat()
    result = cli_runner.invoke(cli, cli_args + ["transaction", "summary", "--period", "day"])

    assert result.exit_code == 0
    assert f"Day: {today} to {today}" in result.output
    assert "Transactions: 1" in result.output
    assert "Top categories:" in result.output
    assert "Groceries" in result.output
    assert "Main Checking" in result.output


def test_transaction_summary_invalid_date(cli_runner, cli_args):
    """Test that an unreadable anchor date is reported."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "summary", "--date", "gibberish"])

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_transaction_totals(cli_runner, cli_args, sample_transactions):
    """Test totals for an account and for a category."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "totals", "--account", "Main Checking"])
    assert result.exit_code == 0
    assert "Main Checking: 3,066.70 across 3 transaction(s)" in result.output

    result = cli_runner.invoke(cli, cli_args + ["transaction", "totals", "--category", "groceries"])
    assert "groceries: 66.70 across 2 transaction(s)" in result.output


def test_transaction_totals_needs_one_target(cli_runner, cli_args):
    """Test that exactly one of --account and --category is required."""
    result = cli_runner.invoke(cli, cli_args + ["transaction", "totals"])

    assert result.exit_code == 2


def test_transaction_import(cli_runner, cli_args, setup, tmp_path):
    """Test importing a CSV file."""
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    csv_file = tmp_path / "march.csv"
    csv_file.write_text(
        "date,account,category,type,amount,description\n"
        f"{yesterday},Main Checking,Groceries,expense,23.40,Farmers market\n"
        f"{yesterday},Main Checking,Salary,income,\"1,200.00\",Bonus\n"
    )

    result = cli_runner.invoke(cli, cli_args + ["transaction", "import", str(csv_file)])

    assert result.exit_code == 0
    assert "Imported 2 transaction(s)" in result.output

    listing = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--json"])
    assert sorted(row["amount"] for row in json.loads(listing.output)) == ["1200.00", "23.40"]


def test_transaction_import_is_all_or_nothing(cli_runner, cli_args, setup, tmp_path):
    """Test that one bad row stops the whole import."""
    csv_file = tmp_path / "bad.csv"
    csv_file.write_text(
        "date,account,category,type,amount,description\n"
        "today,Main Checking,Groceries,expense,10,Coffee\n"
        "today,Nope,Groceries,expense,10,Tea\n"
    )

    result = cli_runner.invoke(cli, cli_args + ["transaction", "import", str(csv_file)])

    assert result.exit_code == 1
    assert "Line 3: Account 'Nope' not found" in result.output
    listing = cli_runner.invoke(cli, cli_args + ["transaction", "list"])
    assert "No transactions found." in listing.output


def test_transaction_import_missing_columns(cli_runner, cli_args, tmp_path):
    """Test that the required columns are checked first."""
    csv_file = tmp_path / "short.csv"
    csv_file.write_text("date,amount\ntoday,10\n")

    result = cli_runner.invoke(cli, cli_args + ["transaction", "import", str(csv_file)])

    assert result.exit_code == 1
    assert "Missing column(s): account, category, type, description" in result.output
