"""
Unit Tests for SimulationAdvancer

✅ Year events fire once per year boundary, growth before dividend
✅ Repeated / earlier observations are no-ops
✅ Payroll, rent and spending run once per crossed day, in that order
✅ daily_withdrawn reset once per pass
"""

import random
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from banksim.domain.models import (
    ClientAccount,
    InvestmentEventType,
    JobAssignment,
    JobDefinition,
    SlotState,
    SpendingCategory,
    TransactionType,
)
from banksim.domain.services.catalog_engine import Catalog
from banksim.domain.services.game_clock import GameClock
from banksim.domain.services.investment_engine import InvestmentEngine
from banksim.domain.services.payroll_engine import PayrollEngine
from banksim.domain.services.rent_engine import RentEngine
from banksim.domain.services.simulation_advancer import SimulationAdvancer, SlotSnapshot
from banksim.domain.services.spending_engine import SpendingEngine

START = datetime(2026, 1, 1, 12, 0, 0)


class AlwaysRandom(random.Random):
    """Every draw is 0.0: every category fires at its minimum share"""

    def random(self):
        return 0.0


CATALOG = Catalog(
    jobs=[
        JobDefinition("TEACHER", "Teacher", "School", Decimal("58000"), 14),
        JobDefinition("ENGINEER", "Engineer", "ALKIcorp", Decimal("112000"), 30),
    ],
    spending_categories=[
        SpendingCategory("TRANSIT", "Transit", Decimal("0.05"), Decimal("0.05"), Decimal("0")),
    ],
    mortgage_rate=Decimal("0.0525"),
    asset_name="S&P 500",
    initial_asset_price=Decimal("4750.00"),
)


def make_advancer(spending_engine=None):
    return SimulationAdvancer(
        clock=GameClock(60_000),
        catalog=CATALOG,
        investment_engine=InvestmentEngine(Decimal("0.07"), Decimal("0.02"), 12),
        payroll_engine=PayrollEngine(),
        rent_engine=RentEngine(30),
        spending_engine=spending_engine,
    )


def make_state(game_day=0.0, invested="10000.00", liquid="90000.00", markers=11):
    return SlotState(
        slot_id=1,
        liquid_cash=Decimal(liquid),
        invested_amount=Decimal(invested),
        asset_price=Decimal("4750.00"),
        game_day=game_day,
        next_growth_day=markers,
        next_dividend_day=markers,
        mortgage_rate=Decimal("0.0525"),
        last_observed_at=START,
    )


def make_client(client_id=1, balance="0.00", **caches):
    return ClientAccount(
        id=client_id,
        slot_id=1,
        name=f"Client {client_id}",
        checking_balance=Decimal(balance),
        **caches,
    )


def at_day(day: float) -> datetime:
    return START + timedelta(minutes=day)


# -------------------------------------------------------------------
# Clock bookkeeping
# -------------------------------------------------------------------

def test_game_day_tracks_elapsed_real_time():
    state = make_state()
    result = make_advancer().advance(SlotSnapshot(state=state), START + timedelta(seconds=150))

    assert state.game_day == pytest.approx(2.5)
    assert result.boundaries == [1, 2]
    assert state.last_observed_at == START + timedelta(seconds=150)


def test_first_observation_without_timestamp_is_zero_elapsed():
    state = make_state()
    state.last_observed_at = None

    result = make_advancer().advance(SlotSnapshot(state=state), at_day(5))

    assert state.game_day == 0.0
    assert not result.crossed
    assert state.last_observed_at == at_day(5)


# -------------------------------------------------------------------
# Year boundary
# -------------------------------------------------------------------

def test_one_year_fires_growth_then_dividend_once():
    state = make_state()
    result = make_advancer().advance(SlotSnapshot(state=state), at_day(12))

    kinds = [e.kind for e in result.investment_events]
    assert kinds == [InvestmentEventType.GROWTH, InvestmentEventType.DIVIDEND]
    assert [e.amount for e in result.investment_events] == [Decimal("700.00"), Decimal("214.00")]
    assert all(e.game_day == 11 for e in result.investment_events)
    assert state.invested_amount == Decimal("10700.00")
    assert state.liquid_cash == Decimal("90214.00")
    assert state.next_growth_day == 23
    assert state.next_dividend_day == 23


def test_same_or_earlier_now_is_a_no_op():
    state = make_state()
    advancer = make_advancer()
    advancer.advance(SlotSnapshot(state=state), at_day(12))

    again = advancer.advance(SlotSnapshot(state=state), at_day(12))
    earlier = advancer.advance(SlotSnapshot(state=state), at_day(3))

    assert again.investment_events == [] and earlier.investment_events == []
    assert state.game_day == pytest.approx(12.0)
    assert state.invested_amount == Decimal("10700.00")
    assert state.last_observed_at == at_day(12)


def test_two_years_in_one_pass_fire_twice():
    state = make_state()
    result = make_advancer().advance(SlotSnapshot(state=state), at_day(24))

    growth = [e for e in result.investment_events if e.kind == InvestmentEventType.GROWTH]
    assert [e.game_day for e in growth] == [11, 23]
    assert state.next_growth_day == 35


def test_markers_ahead_of_the_day_do_not_refire():
    # Year 11 already processed in an earlier pass that was not saved past day 10.5
    state = make_state(game_day=10.5, markers=23)
    result = make_advancer().advance(SlotSnapshot(state=state), at_day(1))

    assert result.boundaries == [11]
    assert result.investment_events == []


# -------------------------------------------------------------------
# Client cascade
# -------------------------------------------------------------------

def test_payroll_pays_once_per_elapsed_cycle():
    client = make_client()
    assignment = JobAssignment(id=1, slot_id=1, client_id=1, job_code="TEACHER", next_payday=14.0)
    snapshot = SlotSnapshot(state=make_state(invested="0.00"), clients=[client], assignments=[assignment])

    result = make_advancer().advance(snapshot, at_day(60))

    paydays = [t.game_day for t in result.transactions if t.kind == TransactionType.PAYROLL_DEPOSIT]
    assert paydays == [14, 28, 42, 56]
    assert client.checking_balance == Decimal("2224.66") * 4
    assert assignment.next_payday == 70.0
    assert result.touched_assignments == [assignment]


def test_payroll_lands_before_rent_on_the_same_day():
    client = make_client(monthly_rent_cache=Decimal("1200.00"))
    assignment = JobAssignment(id=1, slot_id=1, client_id=1, job_code="ENGINEER", next_payday=30.0)
    snapshot = SlotSnapshot(state=make_state(game_day=29.5), clients=[client], assignments=[assignment])

    result = make_advancer().advance(snapshot, at_day(1))

    kinds = [t.kind for t in result.transactions]
    assert kinds == [TransactionType.PAYROLL_DEPOSIT, TransactionType.RENT_PAYMENT]
    assert client.checking_balance == Decimal("9205.48") - Decimal("1200.00")


def test_rent_shortfall_during_catch_up():
    client = make_client(balance="300.00", monthly_rent_cache=Decimal("1200.00"))
    snapshot = SlotSnapshot(state=make_state(game_day=29.0), clients=[client])

    result = make_advancer().advance(snapshot, at_day(1))

    assert [(t.kind, t.amount) for t in result.transactions] == [
        (TransactionType.PAYMENT_FAILED, Decimal("300.00"))
    ]
    assert client.checking_balance == Decimal("0.00")


def test_rent_skips_clients_already_charged_that_day():
    client = make_client(balance="3000.00", monthly_rent_cache=Decimal("1200.00"))
    snapshot = SlotSnapshot(state=make_state(game_day=29.0), clients=[client], rent_days={(1, 30)})

    result = make_advancer().advance(snapshot, at_day(1))

    assert result.transactions == []
    assert client.checking_balance == Decimal("3000.00")


def test_spending_skips_days_already_spent():
    client = make_client(
        balance="5000.00",
        monthly_income_cache=Decimal("3000.00"),
        monthly_mandatory_cache=Decimal("1000.00"),
    )
    snapshot = SlotSnapshot(state=make_state(), clients=[client], spent_days={(1, 1)})

    result = make_advancer(SpendingEngine(AlwaysRandom())).advance(snapshot, at_day(2))

    spending = [t for t in result.transactions if t.kind == TransactionType.SPENDING]
    assert [(t.game_day, t.amount) for t in spending] == [(2, Decimal("100.00"))]
    assert (1, 2) in snapshot.spent_days


def test_daily_withdrawn_reset_once_when_a_day_is_crossed():
    client = make_client(balance="100.00", daily_withdrawn=Decimal("500.00"))
    snapshot = SlotSnapshot(state=make_state(game_day=0.2), clients=[client])

    result = make_advancer().advance(snapshot, at_day(0.9))

    assert client.daily_withdrawn == Decimal("0.00")
    assert result.touched_clients == {1: client}


def test_daily_withdrawn_kept_within_the_same_day():
    client = make_client(balance="100.00", daily_withdrawn=Decimal("500.00"))
    snapshot = SlotSnapshot(state=make_state(game_day=0.2), clients=[client])

    result = make_advancer().advance(snapshot, at_day(0.5))

    assert client.daily_withdrawn == Decimal("500.00")
    assert result.touched_clients == {}
