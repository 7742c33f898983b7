"""
MORTGAGE LIFECYCLE
State machine for property-purchase financing

    PENDING ──accept──> ACCEPTED (repayment: CURRENT)
        └────reject──> REJECTED (terminal)

    Repayment sub-states of an ACCEPTED mortgage:
    CURRENT <-> DELINQUENT, both -> REPOSSESSED | PAID_OFF (terminal)

Nothing in the day-boundary cascade debits repayments yet; the repayment
sub-state only moves through explicit transition_repayment() calls.
"""

from datetime import datetime
from decimal import Decimal
import logging
import math
from typing import Optional, Tuple

from banksim.domain.exceptions import (
    AlreadyProcessed,
    InsufficientFunds,
    InvalidTransition,
    Unavailable,
    ValidationError,
)
from banksim.domain.models import (
    ClientAccount,
    MortgagePosition,
    MortgageStatus,
    PropertyListing,
    PropertyStatus,
    RepaymentStatus,
    SlotState,
    Transaction,
    TransactionType,
)
from banksim.domain.money import ZERO, money, parse_amount

logger = logging.getLogger(__name__)

MIN_TERM_YEARS = 5
MAX_TERM_YEARS = 30

REPAYMENT_TRANSITIONS = {
    RepaymentStatus.CURRENT: {
        RepaymentStatus.DELINQUENT,
        RepaymentStatus.REPOSSESSED,
        RepaymentStatus.PAID_OFF,
    },
    RepaymentStatus.DELINQUENT: {
        RepaymentStatus.CURRENT,
        RepaymentStatus.REPOSSESSED,
        RepaymentStatus.PAID_OFF,
    },
    RepaymentStatus.REPOSSESSED: set(),
    RepaymentStatus.PAID_OFF: set(),
}


class MortgageLifecycle:
    """Mortgage application processing"""

    def __init__(self, repayment_period_days: int = 30):
        self.repayment_period_days = repayment_period_days

    @staticmethod
    def validate_term(term_years) -> int:
        if term_years is None or isinstance(term_years, bool):
            raise ValidationError("Term must be between 5 and 30 years.")
        try:
            term = int(term_years)
        except (TypeError, ValueError):
            raise ValidationError("Term must be between 5 and 30 years.")
        if term != term_years or term < MIN_TERM_YEARS or term > MAX_TERM_YEARS:
            raise ValidationError("Term must be between 5 and 30 years.")
        return term

    @staticmethod
    def monthly_payment(loan_amount: Decimal, term_years: int) -> Decimal:
        months = term_years * 12
        if months <= 0:
            return money(loan_amount)
        return money(loan_amount / Decimal(months))

    def create_mortgage(
        self,
        state: SlotState,
        client: ClientAccount,
        listing: PropertyListing,
        down_payment,
        term_years,
        created_at: datetime,
    ) -> MortgagePosition:
        """
        Open a PENDING application at the slot's current mortgage rate

        Raises:
            ValidationError: term outside [5, 30], down payment negative or
                above the property price
            Unavailable: property not AVAILABLE
        """
        term = self.validate_term(term_years)
        down = parse_amount(down_payment)
        if down < ZERO:
            raise ValidationError("Down payment cannot be negative.")
        if listing.status != PropertyStatus.AVAILABLE:
            raise Unavailable("Property is no longer available.")
        if down > listing.price:
            raise ValidationError("Down payment cannot exceed the property price.")

        return MortgagePosition(
            id=None,
            slot_id=state.slot_id,
            client_id=client.id,
            property_id=listing.id,
            property_price=listing.price,
            down_payment=down,
            loan_amount=money(listing.price - down),
            interest_rate=state.mortgage_rate,
            term_years=term,
            status=MortgageStatus.PENDING,
            created_at=created_at,
            updated_at=created_at,
        )

    def accept(
        self,
        mortgage: MortgagePosition,
        client: ClientAccount,
        listing: PropertyListing,
        game_day: float,
        created_at: datetime,
    ) -> Optional[Transaction]:
        """
        Accept a PENDING mortgage: take the down payment, transfer the
        property and schedule repayments

        Returns:
            MORTGAGE_DOWN_PAYMENT transaction, or None for a zero down payment

        Raises:
            AlreadyProcessed: mortgage not PENDING
            Unavailable: property not AVAILABLE
            InsufficientFunds: down payment above checking balance
        """
        self._require_pending(mortgage)
        if listing.status != PropertyStatus.AVAILABLE:
            raise Unavailable("Property is no longer available.")

        tx = None
        down = mortgage.down_payment
        if down > ZERO:
            if down > client.checking_balance:
                raise InsufficientFunds("Not enough funds to purchase property.")
            client.checking_balance = client.checking_balance - down
            tx = Transaction(
                slot_id=mortgage.slot_id,
                client_id=client.id,
                kind=TransactionType.MORTGAGE_DOWN_PAYMENT,
                amount=money(down),
                game_day=math.floor(game_day),
                created_at=created_at,
            )

        listing.status = PropertyStatus.OWNED
        listing.owner_client_id = client.id

        if mortgage.monthly_payment is None:
            mortgage.monthly_payment = self.monthly_payment(mortgage.loan_amount, mortgage.term_years)
            mortgage.next_payment_day = math.floor(game_day) + self.repayment_period_days

        mortgage.status = MortgageStatus.ACCEPTED
        mortgage.repayment_status = RepaymentStatus.CURRENT
        mortgage.updated_at = created_at
        logger.info(
            "🏠 Mortgage %s accepted: client %s owns property %s, monthly %s",
            mortgage.id,
            client.id,
            listing.id,
            mortgage.monthly_payment,
        )
        return tx

    def reject(
        self,
        mortgage: MortgagePosition,
        listing: Optional[PropertyListing],
        updated_at: datetime,
    ) -> None:
        """Reject a PENDING mortgage; the property leaves the market either way"""
        self._require_pending(mortgage)
        if listing is not None and listing.status == PropertyStatus.AVAILABLE:
            listing.status = PropertyStatus.REMOVED
        mortgage.status = MortgageStatus.REJECTED
        mortgage.updated_at = updated_at
        logger.info("Mortgage %s rejected", mortgage.id)

    def apply_status(
        self,
        mortgage: MortgagePosition,
        status: MortgageStatus,
        client: ClientAccount,
        listing: PropertyListing,
        game_day: float,
        created_at: datetime,
    ) -> Tuple[MortgagePosition, Optional[Transaction]]:
        """Dispatch a requested status to accept/reject"""
        status = MortgageStatus(status)
        if status == MortgageStatus.ACCEPTED:
            return mortgage, self.accept(mortgage, client, listing, game_day, created_at)
        if status == MortgageStatus.REJECTED:
            self.reject(mortgage, listing, created_at)
            return mortgage, None
        raise ValidationError(f"Cannot move a mortgage to {status.value}.")

    def transition_repayment(
        self,
        mortgage: MortgagePosition,
        status: RepaymentStatus,
        updated_at: datetime,
    ) -> MortgagePosition:
        """
        Move an ACCEPTED mortgage between repayment sub-states

        Raises:
            InvalidTransition: mortgage not ACCEPTED or move not allowed
        """
        status = RepaymentStatus(status)
        if mortgage.status != MortgageStatus.ACCEPTED or mortgage.repayment_status is None:
            raise InvalidTransition("Only accepted mortgages have a repayment status.")

        allowed = REPAYMENT_TRANSITIONS[mortgage.repayment_status]
        if status not in allowed:
            raise InvalidTransition(
                f"Cannot move repayment from {mortgage.repayment_status.value} to {status.value}."
            )

        if status == RepaymentStatus.DELINQUENT:
            mortgage.missed_payments += 1
        if status in (RepaymentStatus.PAID_OFF, RepaymentStatus.REPOSSESSED):
            mortgage.next_payment_day = None

        mortgage.repayment_status = status
        mortgage.updated_at = updated_at
        return mortgage

    @staticmethod
    def _require_pending(mortgage: MortgagePosition) -> None:
        if mortgage.status != MortgageStatus.PENDING:
            raise AlreadyProcessed("Mortgage already processed.")
