"""
Client API Routes
Checking accounts, jobs, rent and discretionary spending of a slot's clients
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from banksim.api.dependencies import (
    assignment_to_dict,
    client_to_dict,
    get_client_service,
    get_simulation_service,
    to_http,
    transaction_to_dict,
)
from banksim.domain.exceptions import SimulationError
from banksim.domain.models import TransactionType
from banksim.services.client_service import ClientService
from banksim.services.simulation_service import SimulationService

router = APIRouter()


# -------------------------------------------------------------------
# Request models
# -------------------------------------------------------------------

class CreateClientRequest(BaseModel):
    name: str = Field(..., description="Client display name")
    opening_deposit: Decimal = Field(Decimal("0.00"), description="Optional first deposit")


class AmountRequest(BaseModel):
    amount: Decimal


class AssignJobRequest(BaseModel):
    job_code: str = Field(..., description="Catalog job code, e.g. TEACHER")
    primary: bool = Field(False, description="Make this the client's primary job")


class SpendingRequest(BaseModel):
    game_day: Optional[float] = Field(None, ge=0, description="Default: today")


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------

@router.post("/{slot_id}/clients")
async def create_client(
    slot_id: int,
    payload: CreateClientRequest,
    service: ClientService = Depends(get_client_service),
):
    try:
        client = await service.create_client(slot_id, payload.name, payload.opening_deposit)
    except SimulationError as e:
        raise to_http(e)
    return client_to_dict(client)


@router.get("/{slot_id}/clients")
async def list_clients(slot_id: int, service: ClientService = Depends(get_client_service)):
    clients = await service.list_clients(slot_id)
    return {"clients": [client_to_dict(c) for c in clients]}


@router.get("/{slot_id}/clients/{client_id}")
async def get_client(
    slot_id: int, client_id: int, service: ClientService = Depends(get_client_service)
):
    try:
        client = await service.get_client(slot_id, client_id)
    except SimulationError as e:
        raise to_http(e)
    return client_to_dict(client)


@router.post("/{slot_id}/clients/{client_id}/deposit")
async def deposit(
    slot_id: int,
    client_id: int,
    payload: AmountRequest,
    service: ClientService = Depends(get_client_service),
):
    try:
        tx = await service.deposit(slot_id, client_id, payload.amount)
    except SimulationError as e:
        raise to_http(e)
    return transaction_to_dict(tx)


@router.post("/{slot_id}/clients/{client_id}/withdraw")
async def withdraw(
    slot_id: int,
    client_id: int,
    payload: AmountRequest,
    service: ClientService = Depends(get_client_service),
):
    try:
        tx = await service.withdraw(slot_id, client_id, payload.amount)
    except SimulationError as e:
        raise to_http(e)
    return transaction_to_dict(tx)


@router.post("/{slot_id}/clients/{client_id}/jobs")
async def assign_job(
    slot_id: int,
    client_id: int,
    payload: AssignJobRequest,
    service: ClientService = Depends(get_client_service),
):
    try:
        assignment = await service.assign_job(slot_id, client_id, payload.job_code, payload.primary)
    except SimulationError as e:
        raise to_http(e)
    return assignment_to_dict(assignment)


@router.get("/{slot_id}/clients/{client_id}/jobs")
async def list_jobs(
    slot_id: int, client_id: int, service: ClientService = Depends(get_client_service)
):
    try:
        assignments = await service.list_jobs(slot_id, client_id)
    except SimulationError as e:
        raise to_http(e)
    return {"jobs": [assignment_to_dict(a) for a in assignments]}


@router.put("/{slot_id}/clients/{client_id}/rent")
async def set_rent(
    slot_id: int,
    client_id: int,
    payload: AmountRequest,
    service: ClientService = Depends(get_client_service),
):
    try:
        client = await service.set_rent(slot_id, client_id, payload.amount)
    except SimulationError as e:
        raise to_http(e)
    return client_to_dict(client)


@router.post("/{slot_id}/clients/{client_id}/spending")
async def generate_spending(
    slot_id: int,
    client_id: int,
    payload: Optional[SpendingRequest] = None,
    service: SimulationService = Depends(get_simulation_service),
):
    game_day = payload.game_day if payload else None
    try:
        transactions = await service.generate_spending(slot_id, client_id, game_day)
    except SimulationError as e:
        raise to_http(e)
    return {"transactions": [transaction_to_dict(t) for t in transactions]}


@router.get("/{slot_id}/clients/{client_id}/transactions")
async def list_transactions(
    slot_id: int,
    client_id: int,
    type: Optional[TransactionType] = None,
    service: ClientService = Depends(get_client_service),
):
    try:
        transactions = await service.list_transactions(slot_id, client_id, type)
    except SimulationError as e:
        raise to_http(e)
    return {"transactions": [transaction_to_dict(t) for t in transactions]}
