"""
SERVICE: PROPERTY MARKET & MORTGAGES (ORM)

RESPONSIBILITIES:
• List properties on a slot's market
• Open, accept/reject and track mortgages
• Refresh the buyer's mandatory-obligation cache on every status change

RULES:
❌ No repayment debits (nothing drives them yet)
✅ Status changes go through MortgageLifecycle only
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from banksim.domain.exceptions import NotFound, ValidationError
from banksim.domain.models import (
    MortgagePosition,
    MortgageStatus,
    PropertyListing,
    PropertyStatus,
    RepaymentStatus,
)
from banksim.domain.money import require_positive
from banksim.domain.services.account_engine import AccountEngine
from banksim.domain.services.mortgage_lifecycle import MortgageLifecycle
from banksim.infrastructure.db.repositories.client_repository import (
    ClientRepository,
    JobAssignmentRepository,
)
from banksim.infrastructure.db.repositories.ledger_repository import TransactionRepository
from banksim.infrastructure.db.repositories.mortgage_repository import (
    MortgageRepository,
    PropertyRepository,
)
from banksim.services.simulation_service import SimulationService

logger = logging.getLogger(__name__)


class MortgageService:
    """Property purchase financing for one bank slot"""

    def __init__(self, simulation: SimulationService):
        self.simulation = simulation
        self.catalog = simulation.catalog
        self.lifecycle = MortgageLifecycle(simulation.settings.REPAYMENT_PERIOD_DAYS)
        self.account_engine = AccountEngine(simulation.settings.DAILY_WITHDRAWAL_LIMIT)

    async def create_property(self, slot_id: int, name: str, price) -> PropertyListing:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Property name is required.")
        value = require_positive(price)

        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            listing = await PropertyRepository(session).create(
                PropertyListing(id=None, slot_id=slot_id, name=name, price=value)
            )
            logger.info("🏡 Property %s listed in slot %s at %s", listing.id, slot_id, value)
            return listing

    async def list_properties(
        self, slot_id: int, status: Optional[PropertyStatus] = None
    ) -> List[PropertyListing]:
        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            return await PropertyRepository(session).list_for_slot(slot_id, status)

    async def create_mortgage(
        self, slot_id: int, client_id: int, property_id: int, down_payment, term_years
    ) -> MortgagePosition:
        """
        Apply for a mortgage at the slot's current rate

        Raises:
            NotFound: unknown client or property
            ValidationError: bad term or down payment
            Unavailable: property already sold or removed
        """
        async with self.simulation.slot_transaction(slot_id) as session:
            state = await self.simulation.advance_in_session(session, slot_id)
            client = await ClientRepository(session).get(slot_id, client_id)
            if client is None:
                raise NotFound("Client not found")
            listing = await self._require_property(session, slot_id, property_id)

            mortgage = self.lifecycle.create_mortgage(
                state, client, listing, down_payment, term_years, self.simulation.clock.now()
            )
            stored = await MortgageRepository(session).create(mortgage)
            logger.info(
                "📝 Mortgage %s requested: client %s, property %s, loan %s over %s years",
                stored.id,
                client.id,
                listing.id,
                stored.loan_amount,
                stored.term_years,
            )
            return stored

    async def update_mortgage_status(
        self, slot_id: int, mortgage_id: int, status: MortgageStatus
    ) -> MortgagePosition:
        """
        Accept or reject a PENDING mortgage

        Raises:
            NotFound: unknown mortgage
            AlreadyProcessed: mortgage no longer PENDING
            Unavailable: property sold meanwhile (accept only)
            InsufficientFunds: down payment above checking balance (accept only)
        """
        async with self.simulation.slot_transaction(slot_id) as session:
            state = await self.simulation.advance_in_session(session, slot_id)
            mortgage = await self._require_mortgage(session, slot_id, mortgage_id)
            client = await ClientRepository(session).get(slot_id, mortgage.client_id)
            if client is None:
                raise NotFound("Client not found")
            listing = await PropertyRepository(session).get(slot_id, mortgage.property_id)
            if listing is None and MortgageStatus(status) == MortgageStatus.ACCEPTED:
                raise NotFound("Property not found")

            now = self.simulation.clock.now()
            mortgage, tx = self.lifecycle.apply_status(
                mortgage, status, client, listing, state.game_day, now
            )

            if listing is not None:
                await PropertyRepository(session).save(listing)
            await MortgageRepository(session).save(mortgage)
            if tx is not None:
                await TransactionRepository(session).add(tx)
            await self._refresh_caches(session, client)
            return mortgage

    async def update_repayment_status(
        self, slot_id: int, mortgage_id: int, status: RepaymentStatus
    ) -> MortgagePosition:
        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            mortgage = await self._require_mortgage(session, slot_id, mortgage_id)

            previous = mortgage.repayment_status
            self.lifecycle.transition_repayment(mortgage, status, self.simulation.clock.now())
            await MortgageRepository(session).save(mortgage)

            client = await ClientRepository(session).get(slot_id, mortgage.client_id)
            if client is not None:
                await self._refresh_caches(session, client)

            logger.info(
                "Mortgage %s repayment %s -> %s",
                mortgage.id,
                previous.value if previous else None,
                mortgage.repayment_status.value,
            )
            return mortgage

    async def list_mortgages(
        self, slot_id: int, client_id: Optional[int] = None
    ) -> List[MortgagePosition]:
        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            repo = MortgageRepository(session)
            if client_id is None:
                return await repo.list_for_slot(slot_id)
            return [m for m in await repo.list_for_client(client_id) if m.slot_id == slot_id]

    # ------------------------------------------------------------
    # Helpers (caller holds the slot transaction)
    # ------------------------------------------------------------

    async def _require_property(self, session: AsyncSession, slot_id: int, property_id: int) -> PropertyListing:
        listing = await PropertyRepository(session).get(slot_id, property_id)
        if listing is None:
            raise NotFound("Property not found")
        return listing

    async def _require_mortgage(self, session: AsyncSession, slot_id: int, mortgage_id: int) -> MortgagePosition:
        mortgage = await MortgageRepository(session).get(slot_id, mortgage_id)
        if mortgage is None:
            raise NotFound("Mortgage not found")
        return mortgage

    async def _refresh_caches(self, session: AsyncSession, client) -> None:
        assignments = await JobAssignmentRepository(session).list_for_client(client.id)
        mortgages = await MortgageRepository(session).list_for_client(client.id)
        self.account_engine.refresh_caches(client, assignments, self.catalog.jobs_by_code, mortgages)
        await ClientRepository(session).save(client)
