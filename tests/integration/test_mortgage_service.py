from decimal import Decimal

import pytest

from banksim.domain.exceptions import (
    AlreadyProcessed,
    InsufficientFunds,
    InvalidTransition,
    NotFound,
    Unavailable,
)
from banksim.domain.models import (
    MortgageStatus,
    PropertyStatus,
    RepaymentStatus,
    TransactionType,
)


@pytest.fixture()
async def buyer(client_service):
    return await client_service.create_client(1, "Quinn", Decimal("80000"))


@pytest.fixture()
async def listing(mortgage_service):
    return await mortgage_service.create_property(1, "Harbour View", Decimal("300000"))


@pytest.mark.asyncio
@pytest.mark.integration
async def test_application_snapshots_slot_rate(mortgage_service, buyer, listing):
    mortgage = await mortgage_service.create_mortgage(1, buyer.id, listing.id, Decimal("60000"), 25)

    assert mortgage.status == MortgageStatus.PENDING
    assert mortgage.interest_rate == Decimal("0.0525")
    assert mortgage.loan_amount == Decimal("240000.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_accept_debits_down_payment_and_transfers_property(
    mortgage_service, client_service, buyer, listing
):
    mortgage = await mortgage_service.create_mortgage(1, buyer.id, listing.id, Decimal("60000"), 25)

    accepted = await mortgage_service.update_mortgage_status(1, mortgage.id, MortgageStatus.ACCEPTED)

    assert accepted.status == MortgageStatus.ACCEPTED
    assert accepted.repayment_status == RepaymentStatus.CURRENT
    assert accepted.monthly_payment == Decimal("800.00")

    client = await client_service.get_client(1, buyer.id)
    assert client.checking_balance == Decimal("20000.00")
    assert client.monthly_mandatory_cache == Decimal("800.00")

    downs = await client_service.list_transactions(1, buyer.id, TransactionType.MORTGAGE_DOWN_PAYMENT)
    assert [t.amount for t in downs] == [Decimal("60000.00")]

    [owned] = await mortgage_service.list_properties(1)
    assert owned.status == PropertyStatus.OWNED
    assert owned.owner_client_id == buyer.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_second_status_update_is_already_processed(mortgage_service, buyer, listing):
    mortgage = await mortgage_service.create_mortgage(1, buyer.id, listing.id, Decimal("0"), 30)
    await mortgage_service.update_mortgage_status(1, mortgage.id, MortgageStatus.ACCEPTED)

    with pytest.raises(AlreadyProcessed):
        await mortgage_service.update_mortgage_status(1, mortgage.id, MortgageStatus.REJECTED)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reject_takes_property_off_market(mortgage_service, buyer, listing):
    mortgage = await mortgage_service.create_mortgage(1, buyer.id, listing.id, Decimal("1000"), 10)

    rejected = await mortgage_service.update_mortgage_status(1, mortgage.id, MortgageStatus.REJECTED)

    assert rejected.status == MortgageStatus.REJECTED
    assert await mortgage_service.list_properties(1, PropertyStatus.AVAILABLE) == []
    [removed] = await mortgage_service.list_properties(1, PropertyStatus.REMOVED)
    assert removed.id == listing.id

    with pytest.raises(Unavailable):
        await mortgage_service.create_mortgage(1, buyer.id, listing.id, Decimal("1000"), 10)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_failed_accept_rolls_back(mortgage_service, client_service, buyer, listing):
    mortgage = await mortgage_service.create_mortgage(1, buyer.id, listing.id, Decimal("90000"), 10)

    with pytest.raises(InsufficientFunds):
        await mortgage_service.update_mortgage_status(1, mortgage.id, MortgageStatus.ACCEPTED)

    [still] = await mortgage_service.list_mortgages(1)
    assert still.status == MortgageStatus.PENDING
    assert (await mortgage_service.list_properties(1))[0].status == PropertyStatus.AVAILABLE
    assert (await client_service.get_client(1, buyer.id)).checking_balance == Decimal("80000.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_repayment_status_flow(mortgage_service, client_service, buyer, listing):
    mortgage = await mortgage_service.create_mortgage(1, buyer.id, listing.id, Decimal("60000"), 25)
    await mortgage_service.update_mortgage_status(1, mortgage.id, MortgageStatus.ACCEPTED)

    late = await mortgage_service.update_repayment_status(1, mortgage.id, RepaymentStatus.DELINQUENT)
    assert late.missed_payments == 1

    done = await mortgage_service.update_repayment_status(1, mortgage.id, RepaymentStatus.PAID_OFF)
    assert done.next_payment_day is None
    assert (await client_service.get_client(1, buyer.id)).monthly_mandatory_cache == Decimal("0.00")

    with pytest.raises(InvalidTransition):
        await mortgage_service.update_repayment_status(1, mortgage.id, RepaymentStatus.CURRENT)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_ids(mortgage_service, buyer):
    with pytest.raises(NotFound):
        await mortgage_service.create_mortgage(1, buyer.id, 999, Decimal("0"), 10)
    with pytest.raises(NotFound):
        await mortgage_service.update_mortgage_status(1, 999, MortgageStatus.ACCEPTED)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_mortgages_by_client(mortgage_service, client_service, buyer, listing):
    other = await client_service.create_client(1, "Rowan")
    second = await mortgage_service.create_property(1, "Cedar Loft", Decimal("150000"))
    await mortgage_service.create_mortgage(1, buyer.id, listing.id, Decimal("0"), 10)
    await mortgage_service.create_mortgage(1, other.id, second.id, Decimal("0"), 10)

    mine = await mortgage_service.list_mortgages(1, buyer.id)

    assert [m.property_id for m in mine] == [listing.id]
    assert len(await mortgage_service.list_mortgages(1)) == 2
