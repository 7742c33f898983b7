"""
Database Models (SQLAlchemy ORM)
Ledger tables (client_transaction, investment_event) are insert-only
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, DateTime, Float,
    Boolean, ForeignKey, Enum as SQLEnum, Index
)

from banksim.infrastructure.db.database import Base
from banksim.domain.models import (
    InvestmentEventType,
    MortgageStatus,
    PropertyStatus,
    RepaymentStatus,
    TransactionType,
)
from banksim.utils.time import now_utc_naive


# Tables

class SlotStateModel(Base):
    """Bank state per simulation slot"""
    __tablename__ = "bank_state"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_id = Column(Integer, nullable=False, unique=True, index=True)

    liquid_cash = Column(Numeric(19, 2), nullable=False)
    invested_amount = Column(Numeric(19, 2), nullable=False)
    asset_price = Column(Numeric(19, 2), nullable=False)
    mortgage_rate = Column(Numeric(6, 4), nullable=False)

    game_day = Column(Float, nullable=False, default=0.0)
    next_growth_day = Column(Integer, nullable=False)
    next_dividend_day = Column(Integer, nullable=False)
    last_observed_at = Column(DateTime, nullable=True)

    # Optimistic concurrency: racing writers on the same slot fail loudly
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class ClientModel(Base):
    """Client checking account"""
    __tablename__ = "client"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_id = Column(Integer, nullable=False, index=True)
    name = Column(String(120), nullable=False)

    checking_balance = Column(Numeric(19, 2), nullable=False)
    daily_withdrawn = Column(Numeric(19, 2), nullable=False)

    monthly_income_cache = Column(Numeric(19, 2), nullable=True)
    monthly_mandatory_cache = Column(Numeric(19, 2), nullable=True)
    monthly_rent_cache = Column(Numeric(19, 2), nullable=True)

    created_at = Column(DateTime, nullable=False, default=now_utc_naive)


class JobAssignmentModel(Base):
    """Client job assignment"""
    __tablename__ = "client_job"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_id = Column(Integer, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("client.id", ondelete="CASCADE"), nullable=False)
    job_code = Column(String(50), nullable=False)

    next_payday = Column(Float, nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=now_utc_naive)

    __table_args__ = (
        Index('ix_client_job_client', 'client_id'),
    )


class TransactionModel(Base):
    """Client ledger - AUDIT RECORD"""
    __tablename__ = "client_transaction"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_id = Column(Integer, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("client.id", ondelete="CASCADE"), nullable=False)

    type = Column(SQLEnum(TransactionType), nullable=False)
    amount = Column(Numeric(19, 2), nullable=False)
    game_day = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=now_utc_naive)

    __table_args__ = (
        Index('ix_client_transaction_day', 'client_id', 'type', 'game_day'),
    )


class InvestmentEventModel(Base):
    """Index fund ledger - AUDIT RECORD"""
    __tablename__ = "investment_event"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_id = Column(Integer, nullable=False, index=True)

    type = Column(SQLEnum(InvestmentEventType), nullable=False)
    asset = Column(String(50), nullable=False)
    amount = Column(Numeric(19, 2), nullable=False)
    game_day = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=now_utc_naive)


class PropertyModel(Base):
    """Property market listing"""
    __tablename__ = "property"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_id = Column(Integer, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    price = Column(Numeric(19, 2), nullable=False)
    status = Column(SQLEnum(PropertyStatus), nullable=False)
    owner_client_id = Column(Integer, ForeignKey("client.id", ondelete="SET NULL"), nullable=True)


class MortgageModel(Base):
    """Mortgage application and repayment tracking"""
    __tablename__ = "mortgage"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slot_id = Column(Integer, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("client.id", ondelete="CASCADE"), nullable=False)
    property_id = Column(Integer, ForeignKey("property.id", ondelete="CASCADE"), nullable=False)

    property_price = Column(Numeric(19, 2), nullable=False)
    down_payment = Column(Numeric(19, 2), nullable=False)
    loan_amount = Column(Numeric(19, 2), nullable=False)
    interest_rate = Column(Numeric(6, 4), nullable=False)
    term_years = Column(Integer, nullable=False)

    status = Column(SQLEnum(MortgageStatus), nullable=False)
    repayment_status = Column(SQLEnum(RepaymentStatus), nullable=True)
    monthly_payment = Column(Numeric(19, 2), nullable=True)
    next_payment_day = Column(Integer, nullable=True)
    missed_payments = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=now_utc_naive)
    updated_at = Column(DateTime, nullable=False, default=now_utc_naive)
