"""
RENT ENGINE
Debit cached monthly rent on the first day of each month
"""

from datetime import datetime
import logging
import math
from typing import Collection, Iterable, List

from banksim.domain.models import ClientAccount, Transaction, TransactionType
from banksim.domain.money import ZERO, money

logger = logging.getLogger(__name__)


class RentEngine:
    """Monthly rent collection over a slot's clients"""

    def __init__(self, days_per_month: int = 30):
        if days_per_month <= 0:
            raise ValueError("days_per_month must be positive")
        self.days_per_month = days_per_month

    def day_of_month(self, game_day: float) -> int:
        return (math.floor(game_day) % self.days_per_month) + 1

    def is_rent_day(self, game_day: float) -> bool:
        return self.day_of_month(game_day) == 1

    def charge_rent(
        self,
        clients: Iterable[ClientAccount],
        game_day: float,
        created_at: datetime,
        already_charged: Collection[int] = (),
    ) -> List[Transaction]:
        """
        Charge every client that owes rent, partially when short

        Clients whose ids are in already_charged were billed for this day
        and are skipped.

        Returns:
            RENT_PAYMENT for full payments, PAYMENT_FAILED carrying the
            partial amount actually debited otherwise
        """
        if not self.is_rent_day(game_day):
            return []

        transactions = []
        for client in clients:
            if client.id in already_charged:
                continue
            rent = client.monthly_rent_cache
            if rent is None or rent <= ZERO:
                continue

            paid = money(min(rent, client.checking_balance))
            client.checking_balance = client.checking_balance - paid

            if paid >= rent:
                kind = TransactionType.RENT_PAYMENT
            else:
                kind = TransactionType.PAYMENT_FAILED
                logger.warning(
                    "⚠️ Client %s short on rent: owed %s, paid %s",
                    client.id,
                    rent,
                    paid,
                )

            transactions.append(
                Transaction(
                    slot_id=client.slot_id,
                    client_id=client.id,
                    kind=kind,
                    amount=paid,
                    game_day=math.floor(game_day),
                    created_at=created_at,
                )
            )
        return transactions
