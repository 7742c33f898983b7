"""
SERVICE: SLOT CHARTS (ORM)

• Balance distribution and cumulative activity for the dashboard
• Catches the slot up first so the charts end at "now"
"""

import logging
from typing import List

from banksim.domain.models import ActivityChart, ClientBalance
from banksim.domain.services.chart_engine import ChartEngine
from banksim.infrastructure.db.repositories.client_repository import ClientRepository
from banksim.infrastructure.db.repositories.ledger_repository import TransactionRepository
from banksim.services.simulation_service import SimulationService

logger = logging.getLogger(__name__)


class ChartService:
    """Read-side reports for one bank slot"""

    def __init__(self, simulation: SimulationService):
        self.simulation = simulation
        self.engine = ChartEngine()

    async def client_distribution(self, slot_id: int) -> List[ClientBalance]:
        async with self.simulation.slot_transaction(slot_id) as session:
            await self.simulation.advance_in_session(session, slot_id)
            clients = await ClientRepository(session).list_for_slot(slot_id)
        return self.engine.balance_distribution(clients)

    async def activity(self, slot_id: int) -> ActivityChart:
        """Cumulative deposits and withdrawals, day 0 through today"""
        async with self.simulation.slot_transaction(slot_id) as session:
            state = await self.simulation.advance_in_session(session, slot_id)
            transactions = await TransactionRepository(session).list_for_slot(slot_id)

        chart = self.engine.activity(transactions, state.game_day)
        logger.debug("Slot %s activity chart: %s day(s)", slot_id, len(chart.days))
        return chart
