"""
SPENDING ENGINE
Randomized discretionary spending per client per simulated day

RESPONSIBILITIES:
- Decide which catalog categories fire on a given day
- Size each purchase from disposable income and variability
- Never spend more than the checking balance

RULES:
❌ No module-level random state (generator is injected, seedable)
❌ No recomputation of income/mandatory caches (inputs only)
✅ At most one spending pass per (client, day)
✅ Catalog order evaluation
"""

from datetime import datetime
from decimal import Decimal
import logging
import math
import random
from typing import Iterable, List

from banksim.domain.models import ClientAccount, SpendingCategory, Transaction, TransactionType
from banksim.domain.money import ZERO, money

logger = logging.getLogger(__name__)

# Each category fires on roughly one day in thirty
TRIGGER_CHANCE = 1.0 / 30.0


class SpendingEngine:
    """Discretionary spending generator"""

    def __init__(self, rng: random.Random, trigger_chance: float = TRIGGER_CHANCE):
        self.rng = rng
        self.trigger_chance = trigger_chance

    @staticmethod
    def disposable_income(client: ClientAccount) -> Decimal:
        """Monthly income minus mandatory obligations, floored at zero"""
        income = client.monthly_income_cache or ZERO
        mandatory = client.monthly_mandatory_cache or ZERO
        return max(ZERO, income - mandatory)

    def generate_spending(
        self,
        client: ClientAccount,
        categories: Iterable[SpendingCategory],
        game_day: int,
        created_at: datetime,
        already_spent: bool = False,
    ) -> List[Transaction]:
        """
        Generate the day's SPENDING transactions for one client

        Args:
            client: Account to debit (mutated in place)
            categories: Catalog categories in catalog order
            game_day: Whole game day the spending belongs to
            created_at: Real timestamp for the ledger rows
            already_spent: A SPENDING row already exists for this client/day

        Returns:
            New SPENDING transactions (empty when guarded or nothing fired)
        """
        if already_spent:
            return []

        disposable = self.disposable_income(client)
        transactions = []
        for category in categories:
            if not category.active:
                continue
            tx = self._spend_in_category(client, category, disposable, game_day, created_at)
            if tx is not None:
                transactions.append(tx)
        return transactions

    def _spend_in_category(
        self,
        client: ClientAccount,
        category: SpendingCategory,
        disposable: Decimal,
        game_day: int,
        created_at: datetime,
    ):
        if disposable <= ZERO:
            return None

        if self.rng.random() >= self.trigger_chance:
            return None

        min_pct = float(category.min_pct)
        max_pct = float(category.max_pct)
        pct = min_pct + self.rng.random() * (max_pct - min_pct)

        variability = float(category.variability)
        swing = self.rng.random() * 2 * variability - variability if variability > 0 else 0.0
        pct = max(0.0, pct * (1 + swing))

        target = disposable * Decimal(str(pct))
        amount = money(min(target, client.checking_balance))
        if amount <= ZERO:
            return None

        client.checking_balance = client.checking_balance - amount
        logger.debug(
            "Client %s spent %s on %s (day %s)", client.id, amount, category.code, game_day
        )
        return Transaction(
            slot_id=client.slot_id,
            client_id=client.id,
            kind=TransactionType.SPENDING,
            amount=amount,
            game_day=math.floor(game_day),
            created_at=created_at,
        )
