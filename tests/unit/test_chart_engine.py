"""
Unit Tests for ChartEngine

✅ Balance distribution sorted by client name
✅ Cumulative money in / out, one point per day up to today
"""

from datetime import datetime
from decimal import Decimal

from banksim.domain.models import ClientAccount, Transaction, TransactionType
from banksim.domain.services.chart_engine import ChartEngine

NOW = datetime(2026, 1, 1, 12, 0, 0)


def tx(kind, amount, day, client_id=1):
    return Transaction(1, client_id, kind, Decimal(amount), day, NOW)


def test_distribution_is_sorted_by_name():
    clients = [
        ClientAccount(id=1, slot_id=1, name="Zoe", checking_balance=Decimal("10.00")),
        ClientAccount(id=2, slot_id=1, name="Abe", checking_balance=Decimal("250.50")),
    ]

    items = ChartEngine.balance_distribution(clients)

    assert [(i.name, i.balance) for i in items] == [
        ("Abe", Decimal("250.50")),
        ("Zoe", Decimal("10.00")),
    ]


def test_activity_accumulates_by_day():
    transactions = [
        tx(TransactionType.DEPOSIT, "100.00", 0),
        tx(TransactionType.WITHDRAWAL, "30.00", 2),
        tx(TransactionType.PAYROLL_DEPOSIT, "50.00", 2),
        tx(TransactionType.RENT_PAYMENT, "10.00", 3, client_id=2),
    ]

    chart = ChartEngine.activity(transactions, 3.7)

    assert chart.days == [0, 1, 2, 3]
    assert chart.cumulative_deposits == [Decimal("100.00"), Decimal("100.00"), Decimal("150.00"), Decimal("150.00")]
    assert chart.cumulative_withdrawals == [Decimal("0.00"), Decimal("0.00"), Decimal("30.00"), Decimal("40.00")]


def test_activity_ignores_entries_after_today():
    chart = ChartEngine.activity([tx(TransactionType.DEPOSIT, "5.00", 9)], 1.2)

    assert chart.days == [0, 1]
    assert chart.cumulative_deposits == [Decimal("0.00"), Decimal("0.00")]


def test_fresh_slot_has_a_single_empty_point():
    chart = ChartEngine.activity([], 0.0)

    assert chart.days == [0]
    assert chart.cumulative_withdrawals == [Decimal("0.00")]
