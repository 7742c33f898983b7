"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
import math
from typing import List, Optional

from banksim.domain.money import ZERO


class InvestmentEventType(str, Enum):
    """Index fund ledger entry type"""
    GROWTH = "GROWTH"
    DIVIDEND = "DIVIDEND"
    INVEST = "INVEST"
    DIVEST = "DIVEST"


class TransactionType(str, Enum):
    """Client ledger entry type"""
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    PAYROLL_DEPOSIT = "PAYROLL_DEPOSIT"
    RENT_PAYMENT = "RENT_PAYMENT"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    SPENDING = "SPENDING"
    MORTGAGE_DOWN_PAYMENT = "MORTGAGE_DOWN_PAYMENT"


class PropertyStatus(str, Enum):
    """Property market status"""
    AVAILABLE = "AVAILABLE"
    OWNED = "OWNED"
    REMOVED = "REMOVED"


class MortgageStatus(str, Enum):
    """Mortgage application status"""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class RepaymentStatus(str, Enum):
    """Repayment sub-state of an ACCEPTED mortgage"""
    CURRENT = "CURRENT"
    DELINQUENT = "DELINQUENT"
    REPOSSESSED = "REPOSSESSED"
    PAID_OFF = "PAID_OFF"


@dataclass
class SlotState:
    """Bank state of one simulation slot"""
    slot_id: int
    liquid_cash: Decimal
    invested_amount: Decimal
    asset_price: Decimal
    game_day: float
    next_growth_day: int
    next_dividend_day: int
    mortgage_rate: Decimal
    last_observed_at: Optional[datetime] = None

    @property
    def whole_day(self) -> int:
        """Last whole day boundary reached"""
        return math.floor(self.game_day)

    @property
    def total_assets(self) -> Decimal:
        return self.liquid_cash + self.invested_amount


@dataclass
class ClientAccount:
    """Client checking account, owned by one slot"""
    id: Optional[int]
    slot_id: int
    name: str
    checking_balance: Decimal = ZERO
    daily_withdrawn: Decimal = ZERO
    monthly_income_cache: Optional[Decimal] = None
    monthly_mandatory_cache: Optional[Decimal] = None
    monthly_rent_cache: Optional[Decimal] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class JobDefinition:
    """Catalog job - Immutable"""
    code: str
    title: str
    employer: str
    annual_salary: Decimal
    pay_cycle_days: int

    def __post_init__(self):
        if not self.code:
            raise ValueError("Job code cannot be empty")
        if self.annual_salary <= 0:
            raise ValueError(f"Annual salary must be positive: {self.code}")
        if self.pay_cycle_days <= 0:
            raise ValueError(f"Pay cycle days must be positive: {self.code}")


@dataclass
class JobAssignment:
    """Client <-> job link with its payroll schedule"""
    id: Optional[int]
    slot_id: int
    client_id: int
    job_code: str
    next_payday: float
    is_primary: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SpendingCategory:
    """Catalog spending category - Immutable"""
    code: str
    name: str
    min_pct: Decimal
    max_pct: Decimal
    variability: Decimal
    active: bool = True

    def __post_init__(self):
        if self.min_pct < 0 or self.max_pct < self.min_pct:
            raise ValueError(f"Invalid percent range for category {self.code}")
        if self.variability < 0:
            raise ValueError(f"Variability cannot be negative: {self.code}")


@dataclass(frozen=True)
class InvestmentEvent:
    """Index fund ledger entry - AUDIT RECORD"""
    slot_id: int
    kind: InvestmentEventType
    asset: str
    amount: Decimal
    game_day: int
    created_at: datetime
    id: Optional[int] = None


@dataclass(frozen=True)
class Transaction:
    """Client ledger entry - AUDIT RECORD"""
    slot_id: int
    client_id: int
    kind: TransactionType
    amount: Decimal
    game_day: int
    created_at: datetime
    id: Optional[int] = None


@dataclass
class PropertyListing:
    """Property on (or formerly on) the slot's market"""
    id: Optional[int]
    slot_id: int
    name: str
    price: Decimal
    status: PropertyStatus = PropertyStatus.AVAILABLE
    owner_client_id: Optional[int] = None


@dataclass
class MortgagePosition:
    """Mortgage application and, once accepted, repayment tracking"""
    id: Optional[int]
    slot_id: int
    client_id: int
    property_id: int
    property_price: Decimal
    down_payment: Decimal
    loan_amount: Decimal
    interest_rate: Decimal
    term_years: int
    status: MortgageStatus = MortgageStatus.PENDING
    repayment_status: Optional[RepaymentStatus] = None
    monthly_payment: Optional[Decimal] = None
    next_payment_day: Optional[int] = None
    missed_payments: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class SlotSummary:
    """Slot picker row"""
    slot_id: int
    client_count: int
    game_day: float
    liquid_cash: Decimal

    @property
    def has_data(self) -> bool:
        return self.game_day > 0 or self.client_count > 0


@dataclass
class ClientBalance:
    """One bar of the client balance distribution"""
    client_id: int
    name: str
    balance: Decimal


@dataclass
class ActivityChart:
    """Cumulative money in / money out per whole game day, day 0 to today"""
    days: List[int] = field(default_factory=list)
    cumulative_deposits: List[Decimal] = field(default_factory=list)
    cumulative_withdrawals: List[Decimal] = field(default_factory=list)


@dataclass
class AdvanceResult:
    """Everything one catch-up pass changed"""
    state: SlotState
    boundaries: list = field(default_factory=list)
    investment_events: list = field(default_factory=list)
    transactions: list = field(default_factory=list)
    touched_clients: dict = field(default_factory=dict)
    touched_assignments: list = field(default_factory=list)

    @property
    def crossed(self) -> bool:
        return bool(self.boundaries)
