"""
CHART ENGINE
Read-side views over a slot's clients and ledger

RESPONSIBILITIES:
- Client balance distribution, sorted by name
- Cumulative money in / money out for every whole day up to today

RULES:
❌ No persistence, no catch-up (callers pass a caught-up slot)
✅ Money in = DEPOSIT and PAYROLL_DEPOSIT, everything else is money out
✅ Days without activity carry the previous totals forward
"""

from collections import defaultdict
from decimal import Decimal
import math
from typing import Dict, Iterable, List

from banksim.domain.models import (
    ActivityChart,
    ClientAccount,
    ClientBalance,
    Transaction,
    TransactionType,
)
from banksim.domain.money import ZERO

CREDIT_KINDS = frozenset({TransactionType.DEPOSIT, TransactionType.PAYROLL_DEPOSIT})


class ChartEngine:

    @staticmethod
    def balance_distribution(clients: Iterable[ClientAccount]) -> List[ClientBalance]:
        ordered = sorted(clients, key=lambda c: (c.name, c.id or 0))
        return [ClientBalance(c.id, c.name, c.checking_balance) for c in ordered]

    @staticmethod
    def activity(transactions: Iterable[Transaction], game_day: float) -> ActivityChart:
        """
        Running totals of client money movements

        Args:
            transactions: Every ledger entry of the slot
            game_day: Current (fractional) game day; the chart ends at its floor

        Returns:
            One point per day from 0 to floor(game_day); entries dated after
            today are ignored
        """
        current_day = max(0, math.floor(game_day))

        credits: Dict[int, Decimal] = defaultdict(lambda: ZERO)
        debits: Dict[int, Decimal] = defaultdict(lambda: ZERO)
        for tx in transactions:
            target = credits if tx.kind in CREDIT_KINDS else debits
            target[tx.game_day] += tx.amount

        chart = ActivityChart()
        deposit_total = ZERO
        withdrawal_total = ZERO
        for day in range(current_day + 1):
            deposit_total += credits.get(day, ZERO)
            withdrawal_total += debits.get(day, ZERO)
            chart.days.append(day)
            chart.cumulative_deposits.append(deposit_total)
            chart.cumulative_withdrawals.append(withdrawal_total)
        return chart
