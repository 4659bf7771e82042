"""Tests for DashboardService."""

from datetime import date, timedelta
from decimal import Decimal


def add(transaction_service, user_id, account, category, amount, kind, when, description="Entry"):
    return transaction_service.create_transaction(
        user_id=user_id,
        account_id=account.id,
        category_id=category.id,
        amount=amount,
        description=description,
        transaction_type=kind,
        transaction_date=when,
    )


def test_empty_dashboard(dashboard_service, user_id):
    summary = dashboard_service.get_summary(user_id)

    assert summary.total_balance == Decimal("0.00")
    assert summary.active_accounts == 0
    assert summary.month_net == Decimal("0.00")
    assert summary.recent_transactions == ()


def test_summary_covers_current_month(
    dashboard_service, account_service, transaction_service, sample_account, sample_categories, user_id
):
    today = date.today()
    closed = account_service.create_account(user_id, "Old Savings", "savings", 700, "EUR")
    account_service.deactivate_account(closed.id, user_id)

    add(transaction_service, user_id, sample_account, sample_categories["income"], 2500, "income", today)
    add(transaction_service, user_id, sample_account, sample_categories["expense"], 80.25, "expense", today)
    add(transaction_service, user_id, sample_account, sample_categories["investment"], 300, "investment", today)
    # 40 days back is always in an earlier month
    add(
        transaction_service,
        user_id,
        sample_account,
        sample_categories["expense"],
        999,
        "expense",
        today - timedelta(days=40),
    )

    summary = dashboard_service.get_summary(user_id)

    assert summary.total_balance == Decimal("1500.00")
    assert summary.active_accounts == 1
    assert summary.month_income == Decimal("2500.00")
    assert summary.month_expense == Decimal("80.25")
    assert summary.month_net == Decimal("2419.75")
    assert len(summary.recent_transactions) == 4


def test_recent_limit(dashboard_service, sample_transactions, user_id):
    summary = dashboard_service.get_summary(user_id, recent_limit=1)

    assert [txn.description.value for txn in summary.recent_transactions] == ["Bakery"]


def test_other_users_data_is_excluded(dashboard_service, sample_transactions, other_user_id):
    summary = dashboard_service.get_summary(other_user_id)

    assert summary.active_accounts == 0
    assert summary.recent_transactions == ()
