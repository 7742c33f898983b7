"""
ACCOUNT ENGINE
Client checking account movements and derived monthly budget caches

RULES:
❌ No persistence
❌ No overdraft, ever
✅ Withdrawals capped per game day
✅ Caches recomputed here, read-only everywhere else
"""

from datetime import datetime
from decimal import Decimal
import logging
import math
from typing import Dict, Iterable

from banksim.domain.exceptions import InsufficientFunds, ValidationError
from banksim.domain.models import (
    ClientAccount,
    JobAssignment,
    JobDefinition,
    MortgagePosition,
    MortgageStatus,
    RepaymentStatus,
    Transaction,
    TransactionType,
)
from banksim.domain.money import ZERO, money, parse_amount, require_positive

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12

# Repayment sub-states that still owe a monthly payment
SERVICED_REPAYMENT_STATES = {RepaymentStatus.CURRENT, RepaymentStatus.DELINQUENT}


class AccountEngine:
    """Deposits, withdrawals and budget caches"""

    def __init__(self, daily_withdrawal_limit: Decimal):
        self.daily_withdrawal_limit = money(daily_withdrawal_limit)

    def deposit(
        self, client: ClientAccount, amount, game_day: float, created_at: datetime
    ) -> Transaction:
        value = require_positive(amount)
        client.checking_balance = client.checking_balance + value
        return self._transaction(client, TransactionType.DEPOSIT, value, game_day, created_at)

    def withdraw(
        self, client: ClientAccount, amount, game_day: float, created_at: datetime
    ) -> Transaction:
        """
        Debit checking, bounded by balance and the remaining daily allowance

        Raises:
            ValidationError: non-positive amount or daily limit exceeded
            InsufficientFunds: amount above checking balance
        """
        value = require_positive(amount)
        if client.daily_withdrawn + value > self.daily_withdrawal_limit:
            remaining = max(ZERO, self.daily_withdrawal_limit - client.daily_withdrawn)
            raise ValidationError(f"Daily withdrawal limit reached. Remaining today: {remaining}")
        if value > client.checking_balance:
            raise InsufficientFunds("Insufficient funds.")

        client.checking_balance = client.checking_balance - value
        client.daily_withdrawn = client.daily_withdrawn + value
        return self._transaction(client, TransactionType.WITHDRAWAL, value, game_day, created_at)

    @staticmethod
    def set_rent(client: ClientAccount, amount) -> Decimal:
        rent = parse_amount(amount)
        if rent < ZERO:
            raise ValidationError("Rent cannot be negative.")
        client.monthly_rent_cache = rent
        return rent

    @staticmethod
    def monthly_income(
        assignments: Iterable[JobAssignment], jobs: Dict[str, JobDefinition]
    ) -> Decimal:
        """Sum of annual salary / 12 over every job the client holds"""
        total = ZERO
        for assignment in assignments:
            job = jobs.get(assignment.job_code)
            if job is None:
                continue
            total += job.annual_salary / MONTHS_PER_YEAR
        return money(total)

    @staticmethod
    def monthly_mandatory(client: ClientAccount, mortgages: Iterable[MortgagePosition]) -> Decimal:
        """Rent plus monthly payments still being serviced"""
        total = client.monthly_rent_cache or ZERO
        for mortgage in mortgages:
            if (
                mortgage.status == MortgageStatus.ACCEPTED
                and mortgage.repayment_status in SERVICED_REPAYMENT_STATES
                and mortgage.monthly_payment is not None
            ):
                total += mortgage.monthly_payment
        return money(total)

    def refresh_caches(
        self,
        client: ClientAccount,
        assignments: Iterable[JobAssignment],
        jobs: Dict[str, JobDefinition],
        mortgages: Iterable[MortgagePosition],
    ) -> ClientAccount:
        client.monthly_income_cache = self.monthly_income(assignments, jobs)
        client.monthly_mandatory_cache = self.monthly_mandatory(client, mortgages)
        logger.debug(
            "Client %s budget: income %s, mandatory %s",
            client.id,
            client.monthly_income_cache,
            client.monthly_mandatory_cache,
        )
        return client

    @staticmethod
    def _transaction(
        client: ClientAccount,
        kind: TransactionType,
        amount: Decimal,
        game_day: float,
        created_at: datetime,
    ) -> Transaction:
        return Transaction(
            slot_id=client.slot_id,
            client_id=client.id,
            kind=kind,
            amount=amount,
            game_day=math.floor(game_day),
            created_at=created_at,
        )
