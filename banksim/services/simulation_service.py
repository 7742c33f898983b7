"""
SERVICE: SLOT SIMULATION (ORM)

• Every read or write of a slot first catches the slot up to "now"
• One slot lock + one database transaction per operation
• Engines stay pure; this layer loads, runs them, persists
"""

from contextlib import asynccontextmanager
from decimal import Decimal
import logging
import math
import random
from typing import AsyncIterator, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from banksim.config import Settings, settings as default_settings
from banksim.domain.exceptions import NotFound, ValidationError
from banksim.domain.models import (
    AdvanceResult,
    InvestmentEvent,
    SlotState,
    SlotSummary,
    Transaction,
    TransactionType,
)
from banksim.domain.money import ZERO, money
from banksim.domain.services.catalog_engine import Catalog
from banksim.domain.services.game_clock import Clock, GameClock, SystemClock
from banksim.domain.services.investment_engine import InvestmentEngine
from banksim.domain.services.payroll_engine import PayrollEngine
from banksim.domain.services.rent_engine import RentEngine
from banksim.domain.services.simulation_advancer import SimulationAdvancer, SlotSnapshot
from banksim.domain.services.spending_engine import SpendingEngine
from banksim.infrastructure.db.repositories.client_repository import (
    ClientRepository,
    JobAssignmentRepository,
)
from banksim.infrastructure.db.repositories.ledger_repository import (
    InvestmentEventRepository,
    TransactionRepository,
)
from banksim.infrastructure.db.repositories.mortgage_repository import (
    MortgageRepository,
    PropertyRepository,
)
from banksim.infrastructure.db.repositories.slot_state_repository import SlotStateRepository
from banksim.services.slot_locks import SlotLocks

logger = logging.getLogger(__name__)


class SimulationService:
    """Slot lifecycle, catch-up and bank-level money movements"""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        catalog: Catalog,
        settings: Settings = default_settings,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        locks: Optional[SlotLocks] = None,
    ):
        self.session_factory = session_factory
        self.catalog = catalog
        self.settings = settings
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random(settings.SPENDING_SEED)
        self.locks = locks or SlotLocks()

        self.game_clock = GameClock(settings.REAL_MS_PER_GAME_DAY)
        self.investment_engine = InvestmentEngine(
            annual_growth_rate=settings.ANNUAL_GROWTH_RATE,
            annual_dividend_rate=settings.ANNUAL_DIVIDEND_RATE,
            days_per_year=settings.DAYS_PER_YEAR,
            asset_name=catalog.asset_name,
        )
        self.payroll_engine = PayrollEngine()
        self.rent_engine = RentEngine(days_per_month=settings.DAYS_PER_MONTH)
        self.spending_engine = SpendingEngine(self.rng)
        self.advancer = SimulationAdvancer(
            clock=self.game_clock,
            catalog=catalog,
            investment_engine=self.investment_engine,
            payroll_engine=self.payroll_engine,
            rent_engine=self.rent_engine,
            spending_engine=self.spending_engine,
        )

    # ------------------------------------------------------------
    # Transaction scope
    # ------------------------------------------------------------

    @asynccontextmanager
    async def slot_transaction(self, slot_id: int) -> AsyncIterator[AsyncSession]:
        """Hold the slot lock and one database transaction"""
        async with self.locks.hold(slot_id):
            async with self.session_factory() as session:
                async with session.begin():
                    yield session

    # ------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------

    async def advance(self, slot_id: int) -> SlotState:
        """Idempotent catch-up read of a slot"""
        async with self.slot_transaction(slot_id) as session:
            return await self.advance_in_session(session, slot_id)

    async def reset_slot(self, slot_id: int) -> SlotState:
        """Wipe the slot and start over"""
        async with self.slot_transaction(slot_id) as session:
            return await self.reset_in_session(session, slot_id)

    async def list_slots(self, slot_ids: Optional[List[int]] = None) -> List[SlotSummary]:
        """Advance and summarize each slot"""
        summaries = []
        for slot_id in slot_ids or self.settings.SLOT_IDS:
            async with self.slot_transaction(slot_id) as session:
                state = await self.advance_in_session(session, slot_id)
                client_count = await ClientRepository(session).count_for_slot(slot_id)
            summaries.append(
                SlotSummary(
                    slot_id=slot_id,
                    client_count=client_count,
                    game_day=state.game_day,
                    liquid_cash=state.liquid_cash,
                )
            )
        return summaries

    async def invest(self, slot_id: int, amount) -> SlotState:
        """Move bank liquid cash into the index fund"""
        async with self.slot_transaction(slot_id) as session:
            state = await self.advance_in_session(session, slot_id)
            event = self.investment_engine.invest(state, amount, self.clock.now())
            await InvestmentEventRepository(session).add_all([event])
            return await SlotStateRepository(session).save(state)

    async def divest(self, slot_id: int, amount) -> SlotState:
        """Move index fund holdings back to liquid cash"""
        async with self.slot_transaction(slot_id) as session:
            state = await self.advance_in_session(session, slot_id)
            event = self.investment_engine.divest(state, amount, self.clock.now())
            await InvestmentEventRepository(session).add_all([event])
            return await SlotStateRepository(session).save(state)

    async def list_investment_events(self, slot_id: int) -> List[InvestmentEvent]:
        async with self.slot_transaction(slot_id) as session:
            await self.advance_in_session(session, slot_id)
            return await InvestmentEventRepository(session).list_for_slot(slot_id)

    async def run_payroll(self, slot_id: int, game_day: Optional[float] = None) -> List[Transaction]:
        """Pay every assignment due on or before game_day (default: now)"""
        async with self.slot_transaction(slot_id) as session:
            state = await self.advance_in_session(session, slot_id)
            day = self._resolve_day(state, game_day)

            clients = {c.id: c for c in await ClientRepository(session).list_for_slot(slot_id)}
            assignments = await JobAssignmentRepository(session).list_for_slot(slot_id)
            paid = self.payroll_engine.run_payroll(
                assignments, clients, self.catalog.jobs_by_code, day, self.clock.now()
            )
            return await self._persist_client_effects(session, paid, clients, assignments)

    async def charge_rent(self, slot_id: int, game_day: Optional[float] = None) -> List[Transaction]:
        """Collect rent if game_day (default: now) is the first day of a month"""
        async with self.slot_transaction(slot_id) as session:
            state = await self.advance_in_session(session, slot_id)
            day = math.floor(self._resolve_day(state, game_day))

            clients = await ClientRepository(session).list_for_slot(slot_id)
            already = {
                cid for cid, _ in await TransactionRepository(session).rent_days(slot_id, day, day)
            }
            charged = self.rent_engine.charge_rent(
                clients, day, self.clock.now(), already_charged=already
            )
            return await self._persist_client_effects(
                session, charged, {c.id: c for c in clients}
            )

    async def generate_spending(
        self, slot_id: int, client_id: int, game_day: Optional[float] = None
    ) -> List[Transaction]:
        """Discretionary spending for one client on one day (default: today)"""
        async with self.slot_transaction(slot_id) as session:
            state = await self.advance_in_session(session, slot_id)
            day = math.floor(self._resolve_day(state, game_day))

            client = await ClientRepository(session).get(slot_id, client_id)
            if client is None:
                raise NotFound("Client not found")

            tx_repo = TransactionRepository(session)
            already = await tx_repo.exists_for_day(client_id, TransactionType.SPENDING, day)
            spent = self.spending_engine.generate_spending(
                client,
                self.catalog.spending_categories,
                day,
                self.clock.now(),
                already_spent=already,
            )
            return await self._persist_client_effects(session, spent, {client.id: client})

    @staticmethod
    def _resolve_day(state: SlotState, game_day: Optional[float]) -> float:
        """Explicit runs may target today or a past day, never the future"""
        if game_day is None:
            return state.game_day
        if game_day < 0 or game_day > state.game_day:
            raise ValidationError(
                f"Game day must be between 0 and the current day ({state.game_day:.2f})."
            )
        return game_day

    # ------------------------------------------------------------
    # Building blocks (caller holds the slot transaction)
    # ------------------------------------------------------------

    def initial_state(self, slot_id: int) -> SlotState:
        return SlotState(
            slot_id=slot_id,
            liquid_cash=money(self.settings.STARTING_CASH),
            invested_amount=ZERO,
            asset_price=money(self.catalog.initial_asset_price),
            game_day=0.0,
            next_growth_day=self.settings.DAYS_PER_YEAR - 1,
            next_dividend_day=self.settings.DAYS_PER_YEAR - 1,
            mortgage_rate=Decimal(str(self.catalog.mortgage_rate)),
            last_observed_at=self.clock.now(),
        )

    async def reset_in_session(self, session: AsyncSession, slot_id: int) -> SlotState:
        logger.info("🔄 Resetting slot %s", slot_id)

        await TransactionRepository(session).delete_for_slot(slot_id)
        await JobAssignmentRepository(session).delete_for_slot(slot_id)
        await MortgageRepository(session).delete_for_slot(slot_id)
        await PropertyRepository(session).delete_for_slot(slot_id)
        await InvestmentEventRepository(session).delete_for_slot(slot_id)
        await ClientRepository(session).delete_for_slot(slot_id)

        return await SlotStateRepository(session).save(self.initial_state(slot_id))

    async def advance_in_session(self, session: AsyncSession, slot_id: int) -> SlotState:
        """Load, catch up, persist; creates the slot on first access"""
        state_repo = SlotStateRepository(session)
        state = await state_repo.get(slot_id)
        if state is None:
            return await self.reset_in_session(session, slot_id)

        now = self.clock.now()
        boundaries = self.game_clock.tick(state.game_day, state.last_observed_at, now).boundaries

        snapshot = SlotSnapshot(state=state)
        if boundaries:
            snapshot.clients = await ClientRepository(session).list_for_slot(slot_id)
            snapshot.assignments = await JobAssignmentRepository(session).list_for_slot(slot_id)
            tx_repo = TransactionRepository(session)
            snapshot.spent_days = await tx_repo.spending_days(slot_id, boundaries[0], boundaries[-1])
            snapshot.rent_days = await tx_repo.rent_days(slot_id, boundaries[0], boundaries[-1])

        result = self.advancer.advance(snapshot, now)
        await self._persist_advance(session, result)
        return await state_repo.save(result.state)

    async def _persist_advance(self, session: AsyncSession, result: AdvanceResult) -> None:
        if not result.crossed:
            return
        await ClientRepository(session).save_all(result.touched_clients.values())
        await JobAssignmentRepository(session).save_all(result.touched_assignments)
        await TransactionRepository(session).add_all(result.transactions)
        await InvestmentEventRepository(session).add_all(result.investment_events)

        if result.investment_events or result.transactions:
            logger.info(
                "Slot %s: %s investment event(s), %s transaction(s) over %s day(s)",
                result.state.slot_id,
                len(result.investment_events),
                len(result.transactions),
                len(result.boundaries),
            )

    async def _persist_client_effects(
        self, session: AsyncSession, transactions, clients, assignments=None
    ) -> List[Transaction]:
        touched = {tx.client_id for tx in transactions}
        await ClientRepository(session).save_all(c for cid, c in clients.items() if cid in touched)
        if assignments:
            await JobAssignmentRepository(session).save_all(assignments)
        return await TransactionRepository(session).add_all(transactions)
