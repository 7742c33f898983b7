"""
CATALOG ENGINE
Load, validate, and expose the read-only simulation catalog

RESPONSIBILITIES:
- Load catalog.yml (job definitions, spending categories, market rates)
- Validate catalog integrity
- Expose read-only typed objects

RULES:
❌ No defaults if config missing
❌ No mutation after load
✅ Fail fast on invalid config
✅ Deterministic ordering (file order is catalog order)
"""

import yaml
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional

from banksim.domain.exceptions import NotFound
from banksim.domain.models import JobDefinition, SpendingCategory


@dataclass(frozen=True)
class Catalog:
    """Read-only configuration consumed by the engines"""
    jobs: List[JobDefinition]
    spending_categories: List[SpendingCategory]
    mortgage_rate: Decimal
    asset_name: str
    initial_asset_price: Decimal

    def get_job(self, code: str) -> JobDefinition:
        """Get job by code"""
        for job in self.jobs:
            if job.code == code:
                return job
        raise NotFound(f"Job not found: {code}")

    @property
    def jobs_by_code(self) -> Dict[str, JobDefinition]:
        return {job.code: job for job in self.jobs}

    @property
    def active_categories(self) -> List[SpendingCategory]:
        return [cat for cat in self.spending_categories if cat.active]


class CatalogEngine:
    """
    Catalog Engine
    Single source of truth for job definitions, spending categories and rates
    """

    CATALOG_FILE = "catalog.yml"

    def __init__(self, config_dir: Path):
        """Initialize with config directory"""
        self.config_dir = Path(config_dir)
        self._catalog: Optional[Catalog] = None

    def load_all(self) -> Catalog:
        """Load and validate catalog.yml"""
        catalog_file = self.config_dir / self.CATALOG_FILE
        if not catalog_file.exists():
            raise FileNotFoundError(f"Catalog config not found: {catalog_file}")

        with open(catalog_file, 'r') as f:
            data = yaml.safe_load(f) or {}

        jobs = self._parse_jobs(data.get('jobs', []))
        categories = self._parse_categories(data.get('spending_categories', []))

        market = data.get('market')
        if not isinstance(market, dict):
            raise ValueError("Catalog is missing the 'market' section")

        mortgage_rate = Decimal(str(market['mortgage_rate']))
        if mortgage_rate < 0:
            raise ValueError("Mortgage rate cannot be negative")

        initial_price = Decimal(str(market['initial_asset_price']))
        if initial_price <= 0:
            raise ValueError("Initial asset price must be positive")

        self._catalog = Catalog(
            jobs=jobs,
            spending_categories=categories,
            mortgage_rate=mortgage_rate,
            asset_name=str(market['asset_name']),
            initial_asset_price=initial_price,
        )
        return self._catalog

    @staticmethod
    def _parse_jobs(raw: list) -> List[JobDefinition]:
        jobs = [
            JobDefinition(
                code=item['code'],
                title=item['title'],
                employer=item['employer'],
                annual_salary=Decimal(str(item['annual_salary'])),
                pay_cycle_days=int(item['pay_cycle_days']),
            )
            for item in raw
        ]
        codes = [job.code for job in jobs]
        if len(codes) != len(set(codes)):
            raise ValueError("Duplicate job codes found in catalog")
        return jobs

    @staticmethod
    def _parse_categories(raw: list) -> List[SpendingCategory]:
        categories = [
            SpendingCategory(
                code=item['code'],
                name=item['name'],
                min_pct=Decimal(str(item['min_pct'])),
                max_pct=Decimal(str(item['max_pct'])),
                variability=Decimal(str(item.get('variability', 0))),
                active=bool(item.get('active', True)),
            )
            for item in raw
        ]
        codes = [cat.code for cat in categories]
        if len(codes) != len(set(codes)):
            raise ValueError("Duplicate spending category codes found in catalog")
        return categories

    @property
    def catalog(self) -> Catalog:
        """Get loaded catalog"""
        if self._catalog is None:
            raise RuntimeError("Catalog not loaded. Call load_all() first")
        return self._catalog
