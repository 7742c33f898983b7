from decimal import Decimal

import pytest


@pytest.mark.asyncio
@pytest.mark.integration
async def test_client_distribution_after_catch_up(chart_service, client_service, clock):
    zed = await client_service.create_client(1, "Zed", Decimal("1000"))
    await client_service.create_client(1, "Abe", Decimal("200"))
    await client_service.set_rent(1, zed.id, Decimal("300"))
    clock.advance(minutes=30)

    items = await chart_service.client_distribution(1)

    assert [(i.name, i.balance) for i in items] == [
        ("Abe", Decimal("200.00")),
        ("Zed", Decimal("700.00")),
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_activity_runs_to_the_current_day(chart_service, client_service, clock):
    zed = await client_service.create_client(1, "Zed", Decimal("1000"))
    await client_service.create_client(1, "Abe", Decimal("200"))
    clock.advance(minutes=2, seconds=30)
    await client_service.withdraw(1, zed.id, Decimal("100"))
    clock.advance(minutes=1)

    chart = await chart_service.activity(1)

    assert chart.days == [0, 1, 2, 3]
    assert chart.cumulative_deposits == [Decimal("1200.00")] * 4
    assert chart.cumulative_withdrawals == [
        Decimal("0.00"),
        Decimal("0.00"),
        Decimal("100.00"),
        Decimal("100.00"),
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_charts_are_scoped_to_their_slot(chart_service, client_service):
    await client_service.create_client(2, "Other", Decimal("50"))

    assert await chart_service.client_distribution(1) == []
    chart = await chart_service.activity(1)
    assert chart.cumulative_deposits == [Decimal("0.00")]
