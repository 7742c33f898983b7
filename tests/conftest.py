import random
from datetime import datetime
from pathlib import Path
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from banksim.config import Settings
from banksim.infrastructure.db.database import init_db
from banksim.api.routes import charts, clients, health, mortgages, slots
from banksim.domain.services.catalog_engine import CatalogEngine
from banksim.domain.services.game_clock import ManualClock
from banksim.main import build_services
from banksim.services.chart_service import ChartService
from banksim.services.client_service import ClientService
from banksim.services.mortgage_service import MortgageService
from banksim.services.simulation_service import SimulationService

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"
START = datetime(2026, 1, 1, 12, 0, 0)
MS_PER_DAY = 60_000


class QuietRandom(random.Random):
    """RNG whose draws never clear the spending trigger"""

    def random(self):
        return 0.999


class ScriptedRandom(random.Random):
    """RNG that replays a fixed list of draws"""

    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)

    def random(self):
        if not self.values:
            return 0.999
        return self.values.pop(0)


@pytest.fixture()
def catalog():
    return CatalogEngine(CONFIG_DIR).load_all()


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        REAL_MS_PER_GAME_DAY=MS_PER_DAY,
        CONFIG_DIR=CONFIG_DIR,
    )


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(START)


@pytest.fixture()
async def db_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def simulation(session_factory, catalog, test_settings, clock) -> SimulationService:
    return SimulationService(
        session_factory,
        catalog,
        settings=test_settings,
        clock=clock,
        rng=QuietRandom(),
    )


@pytest.fixture()
def client_service(simulation) -> ClientService:
    return ClientService(simulation)


@pytest.fixture()
def mortgage_service(simulation) -> MortgageService:
    return MortgageService(simulation)


@pytest.fixture()
def chart_service(simulation) -> ChartService:
    return ChartService(simulation)


@pytest.fixture()
async def app(session_factory, catalog, test_settings, clock) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(slots.router, prefix="/api/slots", tags=["Slots & Bank"])
    app.include_router(clients.router, prefix="/api/slots", tags=["Clients"])
    app.include_router(mortgages.router, prefix="/api/slots", tags=["Properties & Mortgages"])
    app.include_router(charts.router, prefix="/api/slots", tags=["Charts"])

    build_services(
        app,
        session_factory,
        catalog,
        settings=test_settings,
        clock=clock,
        rng=QuietRandom(),
    )
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
