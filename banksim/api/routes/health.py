from fastapi import APIRouter, Depends
from sqlalchemy import text

from banksim.api.dependencies import get_simulation_service
from banksim.services.simulation_service import SimulationService

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/ready")
async def ready(service: SimulationService = Depends(get_simulation_service)):
    try:
        async with service.session_factory() as session:
            await session.execute(text("SELECT 1"))
        db_connected = True
    except Exception:
        db_connected = False

    return {
        "status": "ready" if db_connected else "not_ready",
        "db_connected": db_connected,
    }


@router.get("/catalog")
async def catalog(service: SimulationService = Depends(get_simulation_service)):
    """Jobs, spending categories and market defaults clients can pick from"""
    cat = service.catalog
    return {
        "asset_name": cat.asset_name,
        "initial_asset_price": float(cat.initial_asset_price),
        "mortgage_rate": float(cat.mortgage_rate),
        "jobs": [
            {
                "code": job.code,
                "title": job.title,
                "employer": job.employer,
                "annual_salary": float(job.annual_salary),
                "pay_cycle_days": job.pay_cycle_days,
            }
            for job in cat.jobs
        ],
        "spending_categories": [
            {
                "code": c.code,
                "name": c.name,
                "min_pct": float(c.min_pct),
                "max_pct": float(c.max_pct),
                "variability": float(c.variability),
                "active": c.active,
            }
            for c in cat.spending_categories
        ],
    }
