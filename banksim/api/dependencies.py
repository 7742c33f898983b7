"""
API plumbing shared by the routers: service lookup on app.state, domain
error to HTTP status mapping, and JSON shaping of domain objects.
"""

from decimal import Decimal
from typing import Optional

from fastapi import HTTPException, Request

from banksim.domain.exceptions import (
    AlreadyProcessed,
    InvalidTransition,
    NotFound,
    SimulationError,
    Unavailable,
)
from banksim.domain.models import (
    ActivityChart,
    ClientAccount,
    ClientBalance,
    InvestmentEvent,
    JobAssignment,
    MortgagePosition,
    PropertyListing,
    SlotState,
    SlotSummary,
    Transaction,
)
from banksim.services.chart_service import ChartService
from banksim.services.client_service import ClientService
from banksim.services.mortgage_service import MortgageService
from banksim.services.simulation_service import SimulationService
from banksim.utils.time import to_utc_iso


def get_simulation_service(request: Request) -> SimulationService:
    return _service(request, "simulation_service")


def get_client_service(request: Request) -> ClientService:
    return _service(request, "client_service")


def get_mortgage_service(request: Request) -> MortgageService:
    return _service(request, "mortgage_service")


def get_chart_service(request: Request) -> ChartService:
    return _service(request, "chart_service")


def _service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail="Simulation not initialized")
    return service


def require_known_slot(service: SimulationService, slot_id: int) -> None:
    if slot_id not in service.settings.SLOT_IDS:
        raise HTTPException(status_code=404, detail=f"Unknown slot {slot_id}")


def to_http(exc: SimulationError) -> HTTPException:
    """Map a domain error to the HTTP status the API reports"""
    if isinstance(exc, NotFound):
        status = 404
    elif isinstance(exc, (AlreadyProcessed, Unavailable, InvalidTransition)):
        status = 409
    else:
        # ValidationError, InsufficientFunds, OverDivestment
        status = 400
    return HTTPException(status_code=status, detail=str(exc))


# -------------------------------------------------------------------
# Serialization
# -------------------------------------------------------------------

def _amount(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _ts(value) -> Optional[str]:
    return to_utc_iso(value) if value is not None else None


def slot_state_to_dict(state: SlotState) -> dict:
    return {
        "slot_id": state.slot_id,
        "game_day": round(state.game_day, 4),
        "whole_day": state.whole_day,
        "liquid_cash": _amount(state.liquid_cash),
        "invested_amount": _amount(state.invested_amount),
        "total_assets": _amount(state.total_assets),
        "asset_price": _amount(state.asset_price),
        "mortgage_rate": float(state.mortgage_rate),
        "next_growth_day": state.next_growth_day,
        "next_dividend_day": state.next_dividend_day,
        "last_observed_at": _ts(state.last_observed_at),
    }


def slot_summary_to_dict(summary: SlotSummary) -> dict:
    return {
        "slot_id": summary.slot_id,
        "has_data": summary.has_data,
        "client_count": summary.client_count,
        "game_day": round(summary.game_day, 4),
        "liquid_cash": _amount(summary.liquid_cash),
    }


def client_to_dict(client: ClientAccount) -> dict:
    return {
        "id": client.id,
        "slot_id": client.slot_id,
        "name": client.name,
        "checking_balance": _amount(client.checking_balance),
        "daily_withdrawn": _amount(client.daily_withdrawn),
        "monthly_income": _amount(client.monthly_income_cache),
        "monthly_mandatory": _amount(client.monthly_mandatory_cache),
        "monthly_rent": _amount(client.monthly_rent_cache),
        "created_at": _ts(client.created_at),
    }


def assignment_to_dict(assignment: JobAssignment) -> dict:
    return {
        "id": assignment.id,
        "client_id": assignment.client_id,
        "job_code": assignment.job_code,
        "next_payday": assignment.next_payday,
        "is_primary": assignment.is_primary,
    }


def transaction_to_dict(tx: Transaction) -> dict:
    return {
        "id": tx.id,
        "client_id": tx.client_id,
        "type": tx.kind.value,
        "amount": _amount(tx.amount),
        "game_day": tx.game_day,
        "created_at": _ts(tx.created_at),
    }


def investment_event_to_dict(event: InvestmentEvent) -> dict:
    return {
        "id": event.id,
        "type": event.kind.value,
        "asset": event.asset,
        "amount": _amount(event.amount),
        "game_day": event.game_day,
        "created_at": _ts(event.created_at),
    }


def property_to_dict(listing: PropertyListing) -> dict:
    return {
        "id": listing.id,
        "slot_id": listing.slot_id,
        "name": listing.name,
        "price": _amount(listing.price),
        "status": listing.status.value,
        "owner_client_id": listing.owner_client_id,
    }


def mortgage_to_dict(mortgage: MortgagePosition) -> dict:
    return {
        "id": mortgage.id,
        "slot_id": mortgage.slot_id,
        "client_id": mortgage.client_id,
        "property_id": mortgage.property_id,
        "property_price": _amount(mortgage.property_price),
        "down_payment": _amount(mortgage.down_payment),
        "loan_amount": _amount(mortgage.loan_amount),
        "interest_rate": float(mortgage.interest_rate),
        "term_years": mortgage.term_years,
        "status": mortgage.status.value,
        "repayment_status": mortgage.repayment_status.value if mortgage.repayment_status else None,
        "monthly_payment": _amount(mortgage.monthly_payment),
        "next_payment_day": mortgage.next_payment_day,
        "missed_payments": mortgage.missed_payments,
        "created_at": _ts(mortgage.created_at),
        "updated_at": _ts(mortgage.updated_at),
    }


def client_balance_to_dict(item: ClientBalance) -> dict:
    return {
        "client_id": item.client_id,
        "name": item.name,
        "balance": _amount(item.balance),
    }


def activity_chart_to_dict(chart: ActivityChart) -> dict:
    return {
        "days": chart.days,
        "cumulative_deposits": [_amount(v) for v in chart.cumulative_deposits],
        "cumulative_withdrawals": [_amount(v) for v in chart.cumulative_withdrawals],
    }
