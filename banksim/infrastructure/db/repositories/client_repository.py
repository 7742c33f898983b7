"""
Client Repository
CRUD operations for client accounts and their job assignments
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, update
from typing import Iterable, List, Optional

from banksim.infrastructure.db.models import ClientModel, JobAssignmentModel
from banksim.domain.models import ClientAccount, JobAssignment
from banksim.domain.money import ZERO


class ClientRepository:
    """Repository for ClientAccount"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def create(self, client: ClientAccount) -> ClientAccount:
        """
        Create new client account

        Returns:
            Created ClientAccount with its id
        """
        model = ClientModel(
            slot_id=client.slot_id,
            name=client.name,
            checking_balance=client.checking_balance,
            daily_withdrawn=client.daily_withdrawn,
            monthly_income_cache=client.monthly_income_cache,
            monthly_mandatory_cache=client.monthly_mandatory_cache,
            monthly_rent_cache=client.monthly_rent_cache,
        )
        if client.created_at is not None:
            model.created_at = client.created_at

        self.session.add(model)
        await self.session.flush()

        return self._to_domain(model)

    async def get(self, slot_id: int, client_id: int) -> Optional[ClientAccount]:
        """Get a client of a slot"""
        result = await self.session.execute(
            select(ClientModel).where(
                ClientModel.id == client_id,
                ClientModel.slot_id == slot_id,
            )
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list_for_slot(self, slot_id: int) -> List[ClientAccount]:
        """All clients of a slot, by id"""
        result = await self.session.execute(
            select(ClientModel)
            .where(ClientModel.slot_id == slot_id)
            .order_by(ClientModel.id)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def count_for_slot(self, slot_id: int) -> int:
        result = await self.session.execute(
            select(func.count(ClientModel.id)).where(ClientModel.slot_id == slot_id)
        )
        return int(result.scalar() or 0)

    async def save_all(self, clients: Iterable[ClientAccount]) -> None:
        """Write balances and caches back"""
        for client in clients:
            model = await self.session.get(ClientModel, client.id)
            if model is None:
                continue
            model.name = client.name
            model.checking_balance = client.checking_balance
            model.daily_withdrawn = client.daily_withdrawn
            model.monthly_income_cache = client.monthly_income_cache
            model.monthly_mandatory_cache = client.monthly_mandatory_cache
            model.monthly_rent_cache = client.monthly_rent_cache
        await self.session.flush()

    async def save(self, client: ClientAccount) -> ClientAccount:
        await self.save_all([client])
        return client

    async def delete_for_slot(self, slot_id: int) -> None:
        await self.session.execute(delete(ClientModel).where(ClientModel.slot_id == slot_id))

    @staticmethod
    def _to_domain(model: ClientModel) -> ClientAccount:
        """Convert database model to domain entity"""
        return ClientAccount(
            id=model.id,
            slot_id=model.slot_id,
            name=model.name,
            checking_balance=model.checking_balance,
            daily_withdrawn=model.daily_withdrawn if model.daily_withdrawn is not None else ZERO,
            monthly_income_cache=model.monthly_income_cache,
            monthly_mandatory_cache=model.monthly_mandatory_cache,
            monthly_rent_cache=model.monthly_rent_cache,
            created_at=model.created_at,
        )


class JobAssignmentRepository:
    """Repository for JobAssignment"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def create(self, assignment: JobAssignment) -> JobAssignment:
        model = JobAssignmentModel(
            slot_id=assignment.slot_id,
            client_id=assignment.client_id,
            job_code=assignment.job_code,
            next_payday=assignment.next_payday,
            is_primary=assignment.is_primary,
        )
        if assignment.created_at is not None:
            model.created_at = assignment.created_at

        self.session.add(model)
        await self.session.flush()
        return self._to_domain(model)

    async def list_for_slot(self, slot_id: int) -> List[JobAssignment]:
        result = await self.session.execute(
            select(JobAssignmentModel)
            .where(JobAssignmentModel.slot_id == slot_id)
            .order_by(JobAssignmentModel.id)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def list_for_client(self, client_id: int) -> List[JobAssignment]:
        result = await self.session.execute(
            select(JobAssignmentModel)
            .where(JobAssignmentModel.client_id == client_id)
            .order_by(JobAssignmentModel.id)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def demote_primaries(self, client_id: int) -> None:
        """Clear the primary flag on every assignment of a client"""
        await self.session.execute(
            update(JobAssignmentModel)
            .where(
                JobAssignmentModel.client_id == client_id,
                JobAssignmentModel.is_primary.is_(True),
            )
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )

    async def save_all(self, assignments: Iterable[JobAssignment]) -> None:
        for assignment in assignments:
            model = await self.session.get(JobAssignmentModel, assignment.id)
            if model is None:
                continue
            model.next_payday = assignment.next_payday
            model.is_primary = assignment.is_primary
        await self.session.flush()

    async def delete_for_slot(self, slot_id: int) -> None:
        await self.session.execute(
            delete(JobAssignmentModel).where(JobAssignmentModel.slot_id == slot_id)
        )

    @staticmethod
    def _to_domain(model: JobAssignmentModel) -> JobAssignment:
        return JobAssignment(
            id=model.id,
            slot_id=model.slot_id,
            client_id=model.client_id,
            job_code=model.job_code,
            next_payday=model.next_payday,
            is_primary=bool(model.is_primary),
            created_at=model.created_at,
        )
