"""
Chart API Routes
Dashboard views of a slot: balance distribution and cumulative activity
"""

from fastapi import APIRouter, Depends

from banksim.api.dependencies import (
    activity_chart_to_dict,
    client_balance_to_dict,
    get_chart_service,
    require_known_slot,
)
from banksim.services.chart_service import ChartService

router = APIRouter()


@router.get("/{slot_id}/charts/clients")
async def client_distribution(slot_id: int, service: ChartService = Depends(get_chart_service)):
    """Checking balance per client, sorted by name"""
    require_known_slot(service.simulation, slot_id)
    items = await service.client_distribution(slot_id)
    return {"clients": [client_balance_to_dict(i) for i in items]}


@router.get("/{slot_id}/charts/activity")
async def activity(slot_id: int, service: ChartService = Depends(get_chart_service)):
    require_known_slot(service.simulation, slot_id)
    chart = await service.activity(slot_id)
    return activity_chart_to_dict(chart)
