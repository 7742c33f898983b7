"""
Mortgage Repositories
Property listings and mortgage positions per slot
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from typing import List, Optional

from banksim.infrastructure.db.models import MortgageModel, PropertyModel
from banksim.utils.time import now_utc_naive
from banksim.domain.models import (
    MortgagePosition,
    MortgageStatus,
    PropertyListing,
    PropertyStatus,
    RepaymentStatus,
)


class PropertyRepository:
    """Repository for PropertyListing"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def create(self, listing: PropertyListing) -> PropertyListing:
        model = PropertyModel(
            slot_id=listing.slot_id,
            name=listing.name,
            price=listing.price,
            status=listing.status,
            owner_client_id=listing.owner_client_id,
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_domain(model)

    async def get(self, slot_id: int, property_id: int) -> Optional[PropertyListing]:
        result = await self.session.execute(
            select(PropertyModel).where(
                PropertyModel.id == property_id,
                PropertyModel.slot_id == slot_id,
            )
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list_for_slot(
        self, slot_id: int, status: Optional[PropertyStatus] = None
    ) -> List[PropertyListing]:
        query = select(PropertyModel).where(PropertyModel.slot_id == slot_id)
        if status is not None:
            query = query.where(PropertyModel.status == status)
        result = await self.session.execute(query.order_by(PropertyModel.id))
        return [self._to_domain(m) for m in result.scalars().all()]

    async def save(self, listing: PropertyListing) -> PropertyListing:
        model = await self.session.get(PropertyModel, listing.id)
        model.status = listing.status
        model.owner_client_id = listing.owner_client_id
        await self.session.flush()
        return listing

    async def delete_for_slot(self, slot_id: int) -> None:
        await self.session.execute(delete(PropertyModel).where(PropertyModel.slot_id == slot_id))

    @staticmethod
    def _to_domain(model: PropertyModel) -> PropertyListing:
        return PropertyListing(
            id=model.id,
            slot_id=model.slot_id,
            name=model.name,
            price=model.price,
            status=PropertyStatus(model.status),
            owner_client_id=model.owner_client_id,
        )


class MortgageRepository:
    """Repository for MortgagePosition"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def create(self, mortgage: MortgagePosition) -> MortgagePosition:
        model = MortgageModel(
            slot_id=mortgage.slot_id,
            client_id=mortgage.client_id,
            property_id=mortgage.property_id,
            property_price=mortgage.property_price,
            down_payment=mortgage.down_payment,
            loan_amount=mortgage.loan_amount,
            interest_rate=mortgage.interest_rate,
            term_years=mortgage.term_years,
            status=mortgage.status,
            repayment_status=mortgage.repayment_status,
            monthly_payment=mortgage.monthly_payment,
            next_payment_day=mortgage.next_payment_day,
            missed_payments=mortgage.missed_payments,
            created_at=mortgage.created_at or now_utc_naive(),
            updated_at=mortgage.updated_at or now_utc_naive(),
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_domain(model)

    async def get(self, slot_id: int, mortgage_id: int) -> Optional[MortgagePosition]:
        result = await self.session.execute(
            select(MortgageModel).where(
                MortgageModel.id == mortgage_id,
                MortgageModel.slot_id == slot_id,
            )
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list_for_slot(self, slot_id: int) -> List[MortgagePosition]:
        result = await self.session.execute(
            select(MortgageModel)
            .where(MortgageModel.slot_id == slot_id)
            .order_by(MortgageModel.id)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def list_for_client(self, client_id: int) -> List[MortgagePosition]:
        result = await self.session.execute(
            select(MortgageModel)
            .where(MortgageModel.client_id == client_id)
            .order_by(MortgageModel.id)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def save(self, mortgage: MortgagePosition) -> MortgagePosition:
        model = await self.session.get(MortgageModel, mortgage.id)
        model.status = mortgage.status
        model.repayment_status = mortgage.repayment_status
        model.monthly_payment = mortgage.monthly_payment
        model.next_payment_day = mortgage.next_payment_day
        model.missed_payments = mortgage.missed_payments
        model.updated_at = mortgage.updated_at
        await self.session.flush()
        return mortgage

    async def delete_for_slot(self, slot_id: int) -> None:
        await self.session.execute(delete(MortgageModel).where(MortgageModel.slot_id == slot_id))

    @staticmethod
    def _to_domain(model: MortgageModel) -> MortgagePosition:
        return MortgagePosition(
            id=model.id,
            slot_id=model.slot_id,
            client_id=model.client_id,
            property_id=model.property_id,
            property_price=model.property_price,
            down_payment=model.down_payment,
            loan_amount=model.loan_amount,
            interest_rate=model.interest_rate,
            term_years=model.term_years,
            status=MortgageStatus(model.status),
            repayment_status=RepaymentStatus(model.repayment_status) if model.repayment_status else None,
            monthly_payment=model.monthly_payment,
            next_payment_day=model.next_payment_day,
            missed_payments=model.missed_payments or 0,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
