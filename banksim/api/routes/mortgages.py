"""
Mortgage API Routes
Property market listings and mortgage applications of a slot

Status Rules:
- PENDING -> ACCEPTED | REJECTED, once
- Repayment: CURRENT <-> DELINQUENT, then REPOSSESSED | PAID_OFF (final)
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from banksim.api.dependencies import (
    get_mortgage_service,
    mortgage_to_dict,
    property_to_dict,
    to_http,
)
from banksim.domain.exceptions import SimulationError
from banksim.domain.models import MortgageStatus, PropertyStatus, RepaymentStatus
from banksim.services.mortgage_service import MortgageService

router = APIRouter()


class CreatePropertyRequest(BaseModel):
    name: str
    price: Decimal


class CreateMortgageRequest(BaseModel):
    client_id: int
    property_id: int
    down_payment: Decimal = Field(..., description="Cash paid on acceptance")
    term_years: int = Field(..., description="5 to 30 years")


class MortgageStatusRequest(BaseModel):
    status: MortgageStatus


class RepaymentStatusRequest(BaseModel):
    status: RepaymentStatus


@router.post("/{slot_id}/properties")
async def create_property(
    slot_id: int,
    payload: CreatePropertyRequest,
    service: MortgageService = Depends(get_mortgage_service),
):
    try:
        listing = await service.create_property(slot_id, payload.name, payload.price)
    except SimulationError as e:
        raise to_http(e)
    return property_to_dict(listing)


@router.get("/{slot_id}/properties")
async def list_properties(
    slot_id: int,
    status: Optional[PropertyStatus] = None,
    service: MortgageService = Depends(get_mortgage_service),
):
    listings = await service.list_properties(slot_id, status)
    return {"properties": [property_to_dict(p) for p in listings]}


@router.post("/{slot_id}/mortgages")
async def create_mortgage(
    slot_id: int,
    payload: CreateMortgageRequest,
    service: MortgageService = Depends(get_mortgage_service),
):
    try:
        mortgage = await service.create_mortgage(
            slot_id,
            payload.client_id,
            payload.property_id,
            payload.down_payment,
            payload.term_years,
        )
    except SimulationError as e:
        raise to_http(e)
    return mortgage_to_dict(mortgage)


@router.get("/{slot_id}/mortgages")
async def list_mortgages(
    slot_id: int,
    client_id: Optional[int] = None,
    service: MortgageService = Depends(get_mortgage_service),
):
    mortgages = await service.list_mortgages(slot_id, client_id)
    return {"mortgages": [mortgage_to_dict(m) for m in mortgages]}


@router.put("/{slot_id}/mortgages/{mortgage_id}/status")
async def update_mortgage_status(
    slot_id: int,
    mortgage_id: int,
    payload: MortgageStatusRequest,
    service: MortgageService = Depends(get_mortgage_service),
):
    try:
        mortgage = await service.update_mortgage_status(slot_id, mortgage_id, payload.status)
    except SimulationError as e:
        raise to_http(e)
    return mortgage_to_dict(mortgage)


@router.put("/{slot_id}/mortgages/{mortgage_id}/repayment")
async def update_repayment_status(
    slot_id: int,
    mortgage_id: int,
    payload: RepaymentStatusRequest,
    service: MortgageService = Depends(get_mortgage_service),
):
    try:
        mortgage = await service.update_repayment_status(slot_id, mortgage_id, payload.status)
    except SimulationError as e:
        raise to_http(e)
    return mortgage_to_dict(mortgage)
