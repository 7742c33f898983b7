"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    InvestmentEventType,
    MortgageStatus,
    PropertyStatus,
    RepaymentStatus,
    TransactionType,

    # Entities
    ActivityChart,
    AdvanceResult,
    ClientAccount,
    ClientBalance,
    InvestmentEvent,
    JobAssignment,
    JobDefinition,
    MortgagePosition,
    PropertyListing,
    SlotState,
    SlotSummary,
    SpendingCategory,
    Transaction,
)

__all__ = [
    # Enums
    "InvestmentEventType",
    "MortgageStatus",
    "PropertyStatus",
    "RepaymentStatus",
    "TransactionType",

    # Entities
    "ActivityChart",
    "AdvanceResult",
    "ClientAccount",
    "ClientBalance",
    "InvestmentEvent",
    "JobAssignment",
    "JobDefinition",
    "MortgagePosition",
    "PropertyListing",
    "SlotState",
    "SlotSummary",
    "SpendingCategory",
    "Transaction",
]
