"""
PAYROLL ENGINE
Pay every due job assignment and schedule the next payday

pay = annual_salary * pay_cycle_days / 365, rounded half-up to cents.
One call pays each due assignment at most once, so catch-up over a long
absence relies on the caller invoking it once per crossed day.
"""

from datetime import datetime
from decimal import Decimal
import logging
import math
from typing import Dict, Iterable, List

from banksim.domain.models import (
    ClientAccount,
    JobAssignment,
    JobDefinition,
    Transaction,
    TransactionType,
)
from banksim.domain.money import money

logger = logging.getLogger(__name__)

DAYS_PER_SALARY_YEAR = 365


class PayrollEngine:
    """Payroll over one slot's job assignments"""

    @staticmethod
    def pay_for_cycle(job: JobDefinition) -> Decimal:
        return money(job.annual_salary * Decimal(job.pay_cycle_days) / Decimal(DAYS_PER_SALARY_YEAR))

    def run_payroll(
        self,
        assignments: Iterable[JobAssignment],
        clients: Dict[int, ClientAccount],
        jobs: Dict[str, JobDefinition],
        game_day: float,
        created_at: datetime,
    ) -> List[Transaction]:
        """
        Credit every assignment whose next payday has arrived

        Args:
            assignments: Job assignments of the slot
            clients: Client accounts of the slot by id
            jobs: Catalog job definitions by code
            game_day: Current (possibly fractional) game day
            created_at: Real timestamp for the ledger rows

        Returns:
            PAYROLL_DEPOSIT transactions, in assignment order
        """
        transactions = []
        for assignment in assignments:
            if assignment.next_payday is None or game_day < assignment.next_payday:
                continue

            client = clients.get(assignment.client_id)
            job = jobs.get(assignment.job_code)
            if client is None or job is None:
                logger.warning(
                    "Skipping payroll for assignment %s: client or job %s missing",
                    assignment.id,
                    assignment.job_code,
                )
                continue

            pay = self.pay_for_cycle(job)
            client.checking_balance = client.checking_balance + pay
            assignment.next_payday = game_day + job.pay_cycle_days

            logger.info(
                "Processing payroll for client %s: %s (Job: %s)",
                client.id,
                pay,
                job.title,
            )
            transactions.append(
                Transaction(
                    slot_id=client.slot_id,
                    client_id=client.id,
                    kind=TransactionType.PAYROLL_DEPOSIT,
                    amount=pay,
                    game_day=math.floor(game_day),
                    created_at=created_at,
                )
            )
        return transactions
