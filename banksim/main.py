"""
FastAPI Main Application
Wires catalog, database and simulation services into one app
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from banksim.config import settings
from banksim.core.logging import setup_logging
from banksim.domain.services.catalog_engine import CatalogEngine
from banksim.infrastructure.db import database
from banksim.services.chart_service import ChartService
from banksim.services.client_service import ClientService
from banksim.services.mortgage_service import MortgageService
from banksim.services.simulation_service import SimulationService

logger = logging.getLogger(__name__)


def build_services(app: FastAPI, session_factory, catalog, **kwargs) -> SimulationService:
    """Attach the simulation services to app.state"""
    simulation = SimulationService(session_factory, catalog, **kwargs)
    app.state.simulation_service = simulation
    app.state.client_service = ClientService(simulation)
    app.state.mortgage_service = MortgageService(simulation)
    app.state.chart_service = ChartService(simulation)
    return simulation


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown of all services
    """
    setup_logging(settings.LOG_LEVEL)

    # ===================
    # STARTUP
    # ===================
    logger.info("=" * 60)
    logger.info("🚀 Starting Bank Simulator")
    logger.info("=" * 60)

    logger.info("⚙️  Step 1/3: Loading catalog...")
    catalog = CatalogEngine(settings.CONFIG_DIR).load_all()
    logger.info(
        "✅ Catalog loaded: %s jobs, %s spending categories",
        len(catalog.jobs),
        len(catalog.spending_categories),
    )

    logger.info("📊 Step 2/3: Initializing database...")
    session_factory = database.get_session_factory()
    await database.init_db()
    logger.info("✅ Database initialized")

    logger.info("🔧 Step 3/3: Building simulation services...")
    build_services(app, session_factory, catalog, settings=settings)
    logger.info(
        "✅ Slots %s ready (1 game day = %s ms)",
        settings.SLOT_IDS,
        settings.REAL_MS_PER_GAME_DAY,
    )

    yield

    # ===================
    # SHUTDOWN
    # ===================
    logger.info("🛑 Shutting down Bank Simulator...")
    await database.close_db()
    logger.info("✅ Database connections closed")


# Create FastAPI app
app = FastAPI(
    title="Bank Simulator",
    description="Pull-based simulation of a small bank across fixed save slots",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "🏦 Bank Simulator",
        "version": "1.0.0",
        "slots": settings.SLOT_IDS,
        "docs": "/docs",
    }


# Import and include routers
from banksim.api.routes import charts, clients, health, mortgages, slots  # noqa: E402

app.include_router(health.router, tags=["Health"])
app.include_router(slots.router, prefix="/api/slots", tags=["Slots & Bank"])
app.include_router(clients.router, prefix="/api/slots", tags=["Clients"])
app.include_router(mortgages.router, prefix="/api/slots", tags=["Properties & Mortgages"])
app.include_router(charts.router, prefix="/api/slots", tags=["Charts"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("banksim.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
