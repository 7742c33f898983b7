import pytest


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health_and_ready(client):
    assert (await client.get("/health")).json() == {"status": "ok"}

    ready = (await client.get("/ready")).json()
    assert ready["db_connected"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_catalog_lists_jobs(client):
    data = (await client.get("/catalog")).json()

    assert data["asset_name"] == "S&P 500"
    assert "TEACHER" in {j["code"] for j in data["jobs"]}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_slot_picker_and_start(client):
    resp = await client.get("/api/slots")
    assert resp.status_code == 200
    assert [s["slot_id"] for s in resp.json()["slots"]] == [1, 2, 3]

    started = await client.post("/api/slots/2/start")
    assert started.status_code == 200
    body = started.json()
    assert body["liquid_cash"] == 100000.0
    assert body["invested_amount"] == 0.0
    assert body["game_day"] == 0.0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_slot_is_404(client):
    assert (await client.get("/api/slots/9/bank")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_bank_advances_with_the_clock(client, clock):
    await client.post("/api/slots/1/start")
    await client.post("/api/slots/1/bank/invest", json={"amount": "10000"})
    clock.advance(minutes=12)

    bank = (await client.get("/api/slots/1/bank")).json()
    events = (await client.get("/api/slots/1/investments")).json()["events"]

    assert bank["whole_day"] == 12
    assert bank["invested_amount"] == 10700.0
    assert [e["type"] for e in events] == ["INVEST", "GROWTH", "DIVIDEND"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invest_errors_map_to_400(client):
    over = await client.post("/api/slots/1/bank/invest", json={"amount": "100000.01"})
    assert over.status_code == 400

    negative = await client.post("/api/slots/1/bank/invest", json={"amount": "-5"})
    assert negative.status_code == 400

    divest = await client.post("/api/slots/1/bank/divest", json={"amount": "1"})
    assert divest.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_client_lifecycle(client):
    created = await client.post("/api/slots/1/clients", json={"name": "Uma", "opening_deposit": "1500"})
    assert created.status_code == 200
    client_id = created.json()["id"]

    job = await client.post(f"/api/slots/1/clients/{client_id}/jobs", json={"job_code": "NURSE", "primary": True})
    assert job.status_code == 200
    assert job.json()["is_primary"] is True

    rent = await client.put(f"/api/slots/1/clients/{client_id}/rent", json={"amount": "900"})
    assert rent.json()["monthly_mandatory"] == 900.0

    withdrawn = await client.post(f"/api/slots/1/clients/{client_id}/withdraw", json={"amount": "600"})
    assert withdrawn.status_code == 400

    deposit = await client.post(f"/api/slots/1/clients/{client_id}/deposit", json={"amount": "25.5"})
    assert deposit.json()["amount"] == 25.5

    txs = (await client.get(f"/api/slots/1/clients/{client_id}/transactions", params={"type": "DEPOSIT"})).json()
    assert len(txs["transactions"]) == 2

    spent = await client.post(f"/api/slots/1/clients/{client_id}/spending")
    assert spent.status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_client_and_job_are_404(client):
    assert (await client.get("/api/slots/1/clients/404")).status_code == 404

    created = await client.post("/api/slots/1/clients", json={"name": "Vic"})
    client_id = created.json()["id"]
    resp = await client.post(f"/api/slots/1/clients/{client_id}/jobs", json={"job_code": "PIRATE"})
    assert resp.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_mortgage_flow_and_conflicts(client):
    buyer = (await client.post("/api/slots/1/clients", json={"name": "Wren", "opening_deposit": "50000"})).json()
    house = (await client.post("/api/slots/1/properties", json={"name": "Birch House", "price": "250000"})).json()
    assert house["status"] == "AVAILABLE"

    mortgage = await client.post(
        "/api/slots/1/mortgages",
        json={"client_id": buyer["id"], "property_id": house["id"], "down_payment": "50000", "term_years": 20},
    )
    assert mortgage.status_code == 200
    mortgage_id = mortgage.json()["id"]

    bad_term = await client.post(
        "/api/slots/1/mortgages",
        json={"client_id": buyer["id"], "property_id": house["id"], "down_payment": "0", "term_years": 40},
    )
    assert bad_term.status_code == 400

    accepted = await client.put(f"/api/slots/1/mortgages/{mortgage_id}/status", json={"status": "ACCEPTED"})
    assert accepted.status_code == 200
    assert accepted.json()["repayment_status"] == "CURRENT"

    again = await client.put(f"/api/slots/1/mortgages/{mortgage_id}/status", json={"status": "REJECTED"})
    assert again.status_code == 409

    sold = await client.post(
        "/api/slots/1/mortgages",
        json={"client_id": buyer["id"], "property_id": house["id"], "down_payment": "0", "term_years": 10},
    )
    assert sold.status_code == 409

    late = await client.put(f"/api/slots/1/mortgages/{mortgage_id}/repayment", json={"status": "DELINQUENT"})
    assert late.json()["missed_payments"] == 1

    listed = (await client.get("/api/slots/1/mortgages", params={"client_id": buyer["id"]})).json()
    assert [m["id"] for m in listed["mortgages"]] == [mortgage_id]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payroll_and_rent_endpoints(client, clock):
    buyer = (await client.post("/api/slots/1/clients", json={"name": "Xan", "opening_deposit": "100"})).json()
    await client.post(f"/api/slots/1/clients/{buyer['id']}/jobs", json={"job_code": "CONTRACTOR"})
    await client.put(f"/api/slots/1/clients/{buyer['id']}/rent", json={"amount": "400"})

    rent = (await client.post("/api/slots/1/rent/charge")).json()["transactions"]
    assert [(t["type"], t["amount"]) for t in rent] == [("PAYMENT_FAILED", 100.0)]
    again = (await client.post("/api/slots/1/rent/charge")).json()["transactions"]
    assert again == []

    future = await client.post("/api/slots/1/payroll/run", json={"game_day": 7})
    assert future.status_code == 400

    clock.advance(minutes=7)
    assert (await client.post("/api/slots/1/payroll/run")).json()["transactions"] == []
    txs = (await client.get(f"/api/slots/1/clients/{buyer['id']}/transactions", params={"type": "PAYROLL_DEPOSIT"})).json()
    assert [t["game_day"] for t in txs["transactions"]] == [7]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_chart_endpoints(client, clock):
    await client.post("/api/slots/1/clients", json={"name": "Yara", "opening_deposit": "300"})
    clock.advance(minutes=1)

    dist = (await client.get("/api/slots/1/charts/clients")).json()
    assert dist["clients"][0]["name"] == "Yara"
    assert dist["clients"][0]["balance"] == 300.0

    activity = (await client.get("/api/slots/1/charts/activity")).json()
    assert activity == {
        "days": [0, 1],
        "cumulative_deposits": [300.0, 300.0],
        "cumulative_withdrawals": [0.0, 0.0],
    }

    assert (await client.get("/api/slots/9/charts/activity")).status_code == 404
