"""
INVESTMENT ENGINE
Index fund growth, dividends, invest and divest

RESPONSIBILITIES:
- Annual growth on the invested balance (year boundary)
- Annual dividend paid into liquid cash (year boundary)
- Synchronous transfers between liquid cash and the fund

RULES:
❌ No persistence
✅ Every amount rounded half-up to cents
✅ Year markers always advance, invested or not
✅ State untouched when validation fails
"""

from datetime import datetime
from decimal import Decimal
import logging
from typing import Optional

from banksim.domain.exceptions import InsufficientFunds, OverDivestment
from banksim.domain.models import InvestmentEvent, InvestmentEventType, SlotState
from banksim.domain.money import ZERO, money, require_positive

logger = logging.getLogger(__name__)


class InvestmentEngine:
    """Index fund engine for one slot's bank state"""

    def __init__(
        self,
        annual_growth_rate: Decimal,
        annual_dividend_rate: Decimal,
        days_per_year: int,
        asset_name: str = "S&P 500",
    ):
        if days_per_year <= 0:
            raise ValueError("days_per_year must be positive")
        self.annual_growth_rate = Decimal(str(annual_growth_rate))
        self.annual_dividend_rate = Decimal(str(annual_dividend_rate))
        self.days_per_year = days_per_year
        self.asset_name = asset_name

    def is_year_boundary(self, day: int) -> bool:
        return (day + 1) % self.days_per_year == 0

    def process_growth(
        self, state: SlotState, day: int, created_at: datetime
    ) -> Optional[InvestmentEvent]:
        """Grow the invested balance; reschedule growth one year out"""
        event = None
        if state.invested_amount > ZERO:
            growth = money(state.invested_amount * self.annual_growth_rate)
            state.invested_amount = state.invested_amount + growth
            event = self._event(state, InvestmentEventType.GROWTH, growth, day, created_at)
            logger.info("📈 Slot %s growth %s on day %s", state.slot_id, growth, day)
        state.next_growth_day = day + self.days_per_year
        return event

    def process_dividend(
        self, state: SlotState, day: int, created_at: datetime
    ) -> Optional[InvestmentEvent]:
        """Pay the dividend into liquid cash; reschedule one year out"""
        event = None
        if state.invested_amount > ZERO:
            dividend = money(state.invested_amount * self.annual_dividend_rate)
            state.liquid_cash = state.liquid_cash + dividend
            event = self._event(state, InvestmentEventType.DIVIDEND, dividend, day, created_at)
            logger.info("💵 Slot %s dividend %s on day %s", state.slot_id, dividend, day)
        state.next_dividend_day = day + self.days_per_year
        return event

    def invest(self, state: SlotState, amount, created_at: datetime) -> InvestmentEvent:
        """
        Move liquid cash into the fund

        Raises:
            ValidationError: amount not positive
            InsufficientFunds: amount above liquid cash
        """
        amount = require_positive(amount)
        if amount > state.liquid_cash:
            raise InsufficientFunds("Insufficient liquid cash.")
        state.liquid_cash = state.liquid_cash - amount
        state.invested_amount = state.invested_amount + amount
        return self._event(state, InvestmentEventType.INVEST, amount, state.whole_day, created_at)

    def divest(self, state: SlotState, amount, created_at: datetime) -> InvestmentEvent:
        """
        Move fund holdings back to liquid cash

        Raises:
            ValidationError: amount not positive
            OverDivestment: amount above invested balance
        """
        amount = require_positive(amount)
        if amount > state.invested_amount:
            raise OverDivestment("Cannot divest more than invested.")
        state.invested_amount = state.invested_amount - amount
        state.liquid_cash = state.liquid_cash + amount
        return self._event(state, InvestmentEventType.DIVEST, amount, state.whole_day, created_at)

    def _event(
        self,
        state: SlotState,
        kind: InvestmentEventType,
        amount: Decimal,
        day: int,
        created_at: datetime,
    ) -> InvestmentEvent:
        return InvestmentEvent(
            slot_id=state.slot_id,
            kind=kind,
            asset=self.asset_name,
            amount=money(amount),
            game_day=day,
            created_at=created_at,
        )
