"""
Slot API Routes
Slot picker, bank state, index fund and the bank-wide schedules

Every call catches the slot up to "now" before answering.
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from banksim.api.dependencies import (
    get_simulation_service,
    investment_event_to_dict,
    require_known_slot,
    slot_state_to_dict,
    slot_summary_to_dict,
    to_http,
    transaction_to_dict,
)
from banksim.domain.exceptions import SimulationError
from banksim.services.simulation_service import SimulationService

router = APIRouter()


# -------------------------------------------------------------------
# Request models
# -------------------------------------------------------------------

class AmountRequest(BaseModel):
    """Invest / divest amount"""
    amount: Decimal = Field(..., description="Amount in dollars")


class GameDayRequest(BaseModel):
    """Optional explicit game day (default: the slot's current day)"""
    game_day: Optional[float] = Field(None, ge=0)


# -------------------------------------------------------------------
# Slots
# -------------------------------------------------------------------

@router.get("")
async def list_slots(service: SimulationService = Depends(get_simulation_service)):
    summaries = await service.list_slots()
    return {"slots": [slot_summary_to_dict(s) for s in summaries]}


@router.post("/{slot_id}/start")
async def start_slot(slot_id: int, service: SimulationService = Depends(get_simulation_service)):
    """Reset the slot and start a new game"""
    require_known_slot(service, slot_id)
    state = await service.reset_slot(slot_id)
    return slot_state_to_dict(state)


@router.get("/{slot_id}/bank")
async def get_bank_state(slot_id: int, service: SimulationService = Depends(get_simulation_service)):
    require_known_slot(service, slot_id)
    state = await service.advance(slot_id)
    return slot_state_to_dict(state)


@router.post("/{slot_id}/bank/invest")
async def invest(
    slot_id: int,
    payload: AmountRequest,
    service: SimulationService = Depends(get_simulation_service),
):
    require_known_slot(service, slot_id)
    try:
        state = await service.invest(slot_id, payload.amount)
    except SimulationError as e:
        raise to_http(e)
    return slot_state_to_dict(state)


@router.post("/{slot_id}/bank/divest")
async def divest(
    slot_id: int,
    payload: AmountRequest,
    service: SimulationService = Depends(get_simulation_service),
):
    require_known_slot(service, slot_id)
    try:
        state = await service.divest(slot_id, payload.amount)
    except SimulationError as e:
        raise to_http(e)
    return slot_state_to_dict(state)


@router.get("/{slot_id}/investments")
async def list_investment_events(
    slot_id: int, service: SimulationService = Depends(get_simulation_service)
):
    require_known_slot(service, slot_id)
    events = await service.list_investment_events(slot_id)
    return {"events": [investment_event_to_dict(e) for e in events]}


# -------------------------------------------------------------------
# Schedules
# -------------------------------------------------------------------

@router.post("/{slot_id}/payroll/run")
async def run_payroll(
    slot_id: int,
    payload: Optional[GameDayRequest] = None,
    service: SimulationService = Depends(get_simulation_service),
):
    require_known_slot(service, slot_id)
    game_day = payload.game_day if payload else None
    try:
        transactions = await service.run_payroll(slot_id, game_day)
    except SimulationError as e:
        raise to_http(e)
    return {"transactions": [transaction_to_dict(t) for t in transactions]}


@router.post("/{slot_id}/rent/charge")
async def charge_rent(
    slot_id: int,
    payload: Optional[GameDayRequest] = None,
    service: SimulationService = Depends(get_simulation_service),
):
    require_known_slot(service, slot_id)
    game_day = payload.game_day if payload else None
    try:
        transactions = await service.charge_rent(slot_id, game_day)
    except SimulationError as e:
        raise to_http(e)
    return {"transactions": [transaction_to_dict(t) for t in transactions]}
