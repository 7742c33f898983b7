"""
SERVICE: CLIENT ACCOUNTS (ORM)

RESPONSIBILITIES:
• Open accounts, move checking money, assign jobs, set rent
• Keep income / mandatory caches in step with jobs, rent and mortgages

RULES:
❌ No catch-up logic here (SimulationService owns it)
✅ Every call runs on a caught-up slot inside one slot transaction
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from banksim.domain.exceptions import NotFound, ValidationError
from banksim.domain.models import (
    ClientAccount,
    JobAssignment,
    Transaction,
    TransactionType,
)
from banksim.domain.money import ZERO, parse_amount
from banksim.domain.services.account_engine import AccountEngine
from banksim.infrastructure.db.repositories.client_repository import (
    ClientRepository,
    JobAssignmentRepository,
)
from banksim.infrastructure.db.repositories.ledger_repository import TransactionRepository
from banksim.infrastructure.db.repositories.mortgage_repository import MortgageRepository
from banksim.services.simulation_service import SimulationService

logger = logging.getLogger(__name__)


class ClientService:
    """Client account operations for one bank slot"""

    def __init__(self, simulation: SimulationService):
        self.simulation = simulation
        self.catalog = simulation.catalog
        self.account_engine = AccountEngine(simulation.settings.DAILY_WITHDRAWAL_LIMIT)

    async def create_client(self, slot_id: int, name: str, opening_deposit=ZERO) -> ClientAccount:
        """
        Open a checking account

        Args:
            slot_id: Owning slot
            name: Client display name
            opening_deposit: Optional first deposit (logged as DEPOSIT)
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Client name is required.")
        opening = parse_amount(opening_deposit)
        if opening < ZERO:
            raise ValidationError("Invalid amount.")

        async with self.simulation.slot_transaction(slot_id) as session:
            state = await self.simulation.advance_in_session(session, slot_id)
            now = self.simulation.clock.now()
            client = await ClientRepository(session).create(
                ClientAccount(
                    id=None,
                    slot_id=slot_id,
                    name=name,
                    monthly_income_cache=ZERO,
                    monthly_mandatory_cache=ZERO,
                    monthly_rent_cache=ZERO,
                    created_at=now,
                )
            )
            if opening > ZERO:
                tx = self.account_engine.deposit(client, opening, state.game_day, now)
                await ClientRepository(session).save(client)
                await TransactionRepository(session).add(tx)

            logger.info("👤 Client %s (%s) opened in slot %s", client.id, name, slot_id)
            return client

    async def get_client(self, slot_id: int, client_id: int) -> ClientAccount:
        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            return await self._require_client(session, slot_id, client_id)

    async def list_clients(self, slot_id: int) -> List[ClientAccount]:
        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            return await ClientRepository(session).list_for_slot(slot_id)

    async def deposit(self, slot_id: int, client_id: int, amount) -> Transaction:
        async with self.simulation.slot_transaction(slot_id) as session:
            state = await self.simulation.advance_in_session(session, slot_id)
            client = await self._require_client(session, slot_id, client_id)

            tx = self.account_engine.deposit(client, amount, state.game_day, self.simulation.clock.now())
            await ClientRepository(session).save(client)
            return await TransactionRepository(session).add(tx)

    async def withdraw(self, slot_id: int, client_id: int, amount) -> Transaction:
        async with self.simulation.slot_transaction(slot_id) as session:
            state = await self.simulation.advance_in_session(session, slot_id)
            client = await self._require_client(session, slot_id, client_id)

            tx = self.account_engine.withdraw(client, amount, state.game_day, self.simulation.clock.now())
            await ClientRepository(session).save(client)
            return await TransactionRepository(session).add(tx)

    async def assign_job(
        self, slot_id: int, client_id: int, job_code: str, primary: bool = False
    ) -> JobAssignment:
        """
        Give a client a catalog job

        The first payday is one pay cycle after the current game day. A new
        primary assignment demotes any earlier primary.

        Raises:
            NotFound: unknown client or job code
        """
        job = self.catalog.get_job(job_code)

        async with self.simulation.slot_transaction(slot_id) as session:
            state = await self.simulation.advance_in_session(session, slot_id)
            client = await self._require_client(session, slot_id, client_id)

            job_repo = JobAssignmentRepository(session)
            if primary:
                await job_repo.demote_primaries(client.id)

            assignment = await job_repo.create(
                JobAssignment(
                    id=None,
                    slot_id=slot_id,
                    client_id=client.id,
                    job_code=job.code,
                    next_payday=state.game_day + job.pay_cycle_days,
                    is_primary=primary,
                    created_at=self.simulation.clock.now(),
                )
            )
            await self._refresh_caches(session, client)

            logger.info(
                "💼 Client %s hired as %s (primary=%s), first payday %.2f",
                client.id,
                job.code,
                primary,
                assignment.next_payday,
            )
            return assignment

    async def list_jobs(self, slot_id: int, client_id: int) -> List[JobAssignment]:
        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            client = await self._require_client(session, slot_id, client_id)
            return await JobAssignmentRepository(session).list_for_client(client.id)

    async def set_rent(self, slot_id: int, client_id: int, amount) -> ClientAccount:
        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            client = await self._require_client(session, slot_id, client_id)

            self.account_engine.set_rent(client, amount)
            return await self._refresh_caches(session, client)

    async def list_transactions(
        self, slot_id: int, client_id: int, kind: Optional[TransactionType] = None
    ) -> List[Transaction]:
        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            client = await self._require_client(session, slot_id, client_id)
            return await TransactionRepository(session).list_for_client(client.id, kind)

    # ------------------------------------------------------------
    # Helpers (caller holds the slot transaction)
    # ------------------------------------------------------------

    async def _require_client(self, session: AsyncSession, slot_id: int, client_id: int) -> ClientAccount:
        client = await ClientRepository(session).get(slot_id, client_id)
        if client is None:
            raise NotFound("Client not found")
        return client

    async def _refresh_caches(self, session: AsyncSession, client: ClientAccount) -> ClientAccount:
        assignments = await JobAssignmentRepository(session).list_for_client(client.id)
        mortgages = await MortgageRepository(session).list_for_client(client.id)
        self.account_engine.refresh_caches(client, assignments, self.catalog.jobs_by_code, mortgages)
        return await ClientRepository(session).save(client)

