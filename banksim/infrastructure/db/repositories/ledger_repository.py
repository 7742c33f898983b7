"""
Ledger Repositories
Append-only client transactions and investment events (audit records)
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, exists
from typing import Iterable, List, Optional, Set, Tuple

from banksim.infrastructure.db.models import InvestmentEventModel, TransactionModel
from banksim.domain.models import (
    InvestmentEvent,
    InvestmentEventType,
    Transaction,
    TransactionType,
)

RENT_KINDS = (TransactionType.RENT_PAYMENT, TransactionType.PAYMENT_FAILED)


class TransactionRepository:
    """Repository for client Transactions"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def add_all(self, transactions: Iterable[Transaction]) -> List[Transaction]:
        """
        Append transactions

        Returns:
            The stored transactions with their ids
        """
        models = [
            TransactionModel(
                slot_id=tx.slot_id,
                client_id=tx.client_id,
                type=tx.kind,
                amount=tx.amount,
                game_day=tx.game_day,
                created_at=tx.created_at,
            )
            for tx in transactions
        ]
        if not models:
            return []
        self.session.add_all(models)
        await self.session.flush()
        return [self._to_domain(m) for m in models]

    async def add(self, transaction: Transaction) -> Transaction:
        stored = await self.add_all([transaction])
        return stored[0]

    async def exists_for_day(
        self, client_id: int, kind: TransactionType, game_day: int
    ) -> bool:
        """Has a transaction of this kind already been written for client/day?"""
        result = await self.session.execute(
            select(
                exists().where(
                    TransactionModel.client_id == client_id,
                    TransactionModel.type == kind,
                    TransactionModel.game_day == game_day,
                )
            )
        )
        return bool(result.scalar())

    async def spending_days(
        self, slot_id: int, first_day: int, last_day: int
    ) -> Set[Tuple[int, int]]:
        """(client_id, game_day) pairs that already carry SPENDING in a day range"""
        return await self.days_with(slot_id, (TransactionType.SPENDING,), first_day, last_day)

    async def rent_days(
        self, slot_id: int, first_day: int, last_day: int
    ) -> Set[Tuple[int, int]]:
        """(client_id, game_day) pairs already charged rent, paid or failed"""
        return await self.days_with(slot_id, RENT_KINDS, first_day, last_day)

    async def days_with(
        self,
        slot_id: int,
        kinds: Iterable[TransactionType],
        first_day: int,
        last_day: int,
    ) -> Set[Tuple[int, int]]:
        result = await self.session.execute(
            select(TransactionModel.client_id, TransactionModel.game_day)
            .where(
                TransactionModel.slot_id == slot_id,
                TransactionModel.type.in_(list(kinds)),
                TransactionModel.game_day >= first_day,
                TransactionModel.game_day <= last_day,
            )
            .distinct()
        )
        return {(row.client_id, row.game_day) for row in result}

    async def list_for_client(
        self, client_id: int, kind: Optional[TransactionType] = None
    ) -> List[Transaction]:
        """Client ledger, newest first"""
        query = select(TransactionModel).where(TransactionModel.client_id == client_id)
        if kind is not None:
            query = query.where(TransactionModel.type == kind)
        result = await self.session.execute(
            query.order_by(TransactionModel.game_day.desc(), TransactionModel.id.desc())
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def list_for_slot(self, slot_id: int) -> List[Transaction]:
        result = await self.session.execute(
            select(TransactionModel)
            .where(TransactionModel.slot_id == slot_id)
            .order_by(TransactionModel.id)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def delete_for_slot(self, slot_id: int) -> None:
        await self.session.execute(
            delete(TransactionModel).where(TransactionModel.slot_id == slot_id)
        )

    @staticmethod
    def _to_domain(model: TransactionModel) -> Transaction:
        """Convert database model to domain entity"""
        return Transaction(
            id=model.id,
            slot_id=model.slot_id,
            client_id=model.client_id,
            kind=TransactionType(model.type),
            amount=model.amount,
            game_day=model.game_day,
            created_at=model.created_at,
        )


class InvestmentEventRepository:
    """Repository for InvestmentEvents"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def add_all(self, events: Iterable[InvestmentEvent]) -> List[InvestmentEvent]:
        models = [
            InvestmentEventModel(
                slot_id=event.slot_id,
                type=event.kind,
                asset=event.asset,
                amount=event.amount,
                game_day=event.game_day,
                created_at=event.created_at,
            )
            for event in events
        ]
        if not models:
            return []
        self.session.add_all(models)
        await self.session.flush()
        return [self._to_domain(m) for m in models]

    async def list_for_slot(
        self, slot_id: int, kind: Optional[InvestmentEventType] = None
    ) -> List[InvestmentEvent]:
        """Slot's investment events, oldest first"""
        query = select(InvestmentEventModel).where(InvestmentEventModel.slot_id == slot_id)
        if kind is not None:
            query = query.where(InvestmentEventModel.type == kind)
        result = await self.session.execute(query.order_by(InvestmentEventModel.id))
        return [self._to_domain(m) for m in result.scalars().all()]

    async def delete_for_slot(self, slot_id: int) -> None:
        await self.session.execute(
            delete(InvestmentEventModel).where(InvestmentEventModel.slot_id == slot_id)
        )

    @staticmethod
    def _to_domain(model: InvestmentEventModel) -> InvestmentEvent:
        return InvestmentEvent(
            id=model.id,
            slot_id=model.slot_id,
            kind=InvestmentEventType(model.type),
            asset=model.asset,
            amount=model.amount,
            game_day=model.game_day,
            created_at=model.created_at,
        )
