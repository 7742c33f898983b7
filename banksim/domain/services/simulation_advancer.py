"""
SIMULATION ADVANCER (catch-up engine)
(PriorState, Now) -> (NewState, [Events])

RESPONSIBILITIES:
- Ask the GameClock which whole days were crossed since the last observation
- Replay every crossed day in ascending order:
    1. year boundary: growth, then dividend
    2. payroll
    3. rent
    4. discretionary spending, client by client
- Reset each client's daily withdrawal counter once per pass

RULES:
❌ No persistence, no I/O
❌ No wall-clock reads ("now" is an argument)
✅ Each boundary processed exactly once
✅ Year events gated by next_growth_day / next_dividend_day checkpoints
"""

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import List, Optional, Set, Tuple

from banksim.domain.models import (
    AdvanceResult,
    ClientAccount,
    JobAssignment,
    SlotState,
)
from banksim.domain.money import ZERO
from banksim.domain.services.catalog_engine import Catalog
from banksim.domain.services.game_clock import GameClock
from banksim.domain.services.investment_engine import InvestmentEngine
from banksim.domain.services.payroll_engine import PayrollEngine
from banksim.domain.services.rent_engine import RentEngine
from banksim.domain.services.spending_engine import SpendingEngine

logger = logging.getLogger(__name__)


@dataclass
class SlotSnapshot:
    """Everything the cascade reads and mutates for one slot"""
    state: SlotState
    clients: List[ClientAccount] = field(default_factory=list)
    assignments: List[JobAssignment] = field(default_factory=list)
    spent_days: Set[Tuple[int, int]] = field(default_factory=set)
    rent_days: Set[Tuple[int, int]] = field(default_factory=set)


class SimulationAdvancer:
    """Pull-based simulation: advance a slot to "now" on access"""

    def __init__(
        self,
        clock: GameClock,
        catalog: Catalog,
        investment_engine: InvestmentEngine,
        payroll_engine: PayrollEngine,
        rent_engine: RentEngine,
        spending_engine: Optional[SpendingEngine] = None,
    ):
        self.clock = clock
        self.catalog = catalog
        self.investment_engine = investment_engine
        self.payroll_engine = payroll_engine
        self.rent_engine = rent_engine
        self.spending_engine = spending_engine

    def advance(self, snapshot: SlotSnapshot, now: datetime) -> AdvanceResult:
        """
        Catch the slot up to "now"

        Mutates the snapshot's state, clients and assignments in place and
        returns what changed so the caller can persist it.
        """
        state = snapshot.state
        tick = self.clock.tick(state.game_day, state.last_observed_at, now)

        state.game_day = tick.new_day
        state.last_observed_at = tick.observed_at

        result = AdvanceResult(state=state, boundaries=list(tick.boundaries))
        if not tick.boundaries:
            return result

        logger.info(
            "⏩ Slot %s catching up %s day(s): %.3f -> %.3f",
            state.slot_id,
            len(tick.boundaries),
            tick.previous_day,
            tick.new_day,
        )

        clients = sorted(snapshot.clients, key=lambda c: c.id or 0)
        clients_by_id = {client.id: client for client in clients}
        jobs = self.catalog.jobs_by_code
        categories = self.catalog.spending_categories
        paydays = [a.next_payday for a in snapshot.assignments]

        for day in tick.boundaries:
            self._process_year_boundary(state, day, tick.observed_at, result)

            payroll = self.payroll_engine.run_payroll(
                snapshot.assignments, clients_by_id, jobs, day, tick.observed_at
            )
            self._collect(result, payroll, clients_by_id)

            charged = {cid for cid, charged_day in snapshot.rent_days if charged_day == day}
            rent = self.rent_engine.charge_rent(
                clients, day, tick.observed_at, already_charged=charged
            )
            self._collect(result, rent, clients_by_id)

            if self.spending_engine is not None:
                for client in clients:
                    key = (client.id, day)
                    spent = self.spending_engine.generate_spending(
                        client,
                        categories,
                        day,
                        tick.observed_at,
                        already_spent=key in snapshot.spent_days,
                    )
                    if spent:
                        snapshot.spent_days.add(key)
                    self._collect(result, spent, clients_by_id)

        for client in clients:
            client.daily_withdrawn = ZERO
            result.touched_clients[client.id] = client

        result.touched_assignments = [
            assignment
            for assignment, payday in zip(snapshot.assignments, paydays)
            if assignment.next_payday != payday
        ]

        return result

    def _process_year_boundary(
        self, state: SlotState, day: int, created_at: datetime, result: AdvanceResult
    ) -> None:
        if not self.investment_engine.is_year_boundary(day):
            return
        if day >= state.next_growth_day:
            event = self.investment_engine.process_growth(state, day, created_at)
            if event is not None:
                result.investment_events.append(event)
        if day >= state.next_dividend_day:
            event = self.investment_engine.process_dividend(state, day, created_at)
            if event is not None:
                result.investment_events.append(event)

    @staticmethod
    def _collect(result: AdvanceResult, transactions, clients_by_id) -> None:
        for tx in transactions:
            result.transactions.append(tx)
            result.touched_clients[tx.client_id] = clients_by_id[tx.client_id]
