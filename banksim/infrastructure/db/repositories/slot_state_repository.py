"""
Slot State Repository
Load/save per-slot bank state
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from banksim.infrastructure.db.models import SlotStateModel
from banksim.domain.models import SlotState


class SlotStateRepository:
    """Repository for SlotState"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def get(self, slot_id: int) -> Optional[SlotState]:
        """
        Get bank state for a slot

        Args:
            slot_id: Slot number

        Returns:
            SlotState or None
        """
        model = await self._get_model(slot_id)
        return self._to_domain(model) if model else None

    async def save(self, state: SlotState) -> SlotState:
        """
        Insert or update the slot's row

        The row's version counter is bumped on every update; a concurrent
        writer holding a stale version gets StaleDataError at flush.
        """
        model = await self._get_model(state.slot_id)
        if model is None:
            model = SlotStateModel(slot_id=state.slot_id)
            self.session.add(model)

        model.liquid_cash = state.liquid_cash
        model.invested_amount = state.invested_amount
        model.asset_price = state.asset_price
        model.mortgage_rate = state.mortgage_rate
        model.game_day = state.game_day
        model.next_growth_day = state.next_growth_day
        model.next_dividend_day = state.next_dividend_day
        model.last_observed_at = state.last_observed_at

        await self.session.flush()
        return self._to_domain(model)

    async def _get_model(self, slot_id: int) -> Optional[SlotStateModel]:
        result = await self.session.execute(
            select(SlotStateModel).where(SlotStateModel.slot_id == slot_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: SlotStateModel) -> SlotState:
        """Convert database model to domain entity"""
        return SlotState(
            slot_id=model.slot_id,
            liquid_cash=model.liquid_cash,
            invested_amount=model.invested_amount,
            asset_price=model.asset_price,
            game_day=float(model.game_day),
            next_growth_day=model.next_growth_day,
            next_dividend_day=model.next_dividend_day,
            mortgage_rate=model.mortgage_rate,
            last_observed_at=model.last_observed_at,
        )
