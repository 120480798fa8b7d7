"""Table catalog API tests"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_list_tables(authenticated_client: AsyncClient, test_tables):
    response = await authenticated_client.get("/tables")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 4
    assert data["total_pages"] == 1
    assert [table["table_number"] for table in data["items"]] == ["T01", "T02", "T03", "T04"]


@pytest.mark.asyncio
async def test_list_tables_filters(authenticated_client: AsyncClient, test_tables, reservation_payload):
    await authenticated_client.post("/reservations", json=reservation_payload(pax=4))

    by_capacity = await authenticated_client.get("/tables", params={"min_capacity": 4})
    assert [table["table_number"] for table in by_capacity.json()["items"]] == ["T02", "T03", "T04"]

    reserved = await authenticated_client.get("/tables", params={"status": "reserved"})
    assert reserved.json()["total"] == 1
    assert reserved.json()["items"][0]["table_number"] == "T02"


@pytest.mark.asyncio
async def test_get_table(authenticated_client: AsyncClient, test_tables):
    response = await authenticated_client.get(f"/tables/{test_tables['T04'].id}")

    assert response.status_code == 200
    assert response.json()["capacity"] == 8
    assert response.json()["status"] == "available"

    missing = await authenticated_client.get("/tables/9999")
    assert missing.status_code == 404
    assert missing.json()["code"] == "table_not_found"


@pytest.mark.asyncio
async def test_create_table_requires_admin(authenticated_client: AsyncClient, test_tables):
    response = await authenticated_client.post("/tables", json={"table_number": "T05", "capacity": 6})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_table(admin_client: AsyncClient, test_tables):
    response = await admin_client.post("/tables", json={"table_number": "T05", "capacity": 6})

    assert response.status_code == 201
    data = response.json()
    assert data["table_number"] == "T05"
    assert data["capacity"] == 6
    assert data["status"] == "available"


@pytest.mark.asyncio
async def test_create_table_rejects_duplicates_and_bad_capacity(admin_client: AsyncClient, test_tables):
    duplicate = await admin_client.post("/tables", json={"table_number": "T01", "capacity": 2})
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "duplicate_table_number"

    empty = await admin_client.post("/tables", json={"table_number": "T09", "capacity": 0})
    assert empty.status_code == 422


@pytest.mark.asyncio
async def test_update_table(admin_client: AsyncClient, test_tables):
    table_id = test_tables["T03"].id

    response = await admin_client.put(f"/tables/{table_id}", json={"capacity": 6})

    assert response.status_code == 200
    assert response.json()["capacity"] == 6
    assert response.json()["table_number"] == "T03"

    duplicate = await admin_client.put(f"/tables/{table_id}", json={"table_number": "T02"})
    assert duplicate.status_code == 409

    missing = await admin_client.put("/tables/9999", json={"capacity": 4})
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_update_table_ignores_status(admin_client: AsyncClient, test_tables):
    table_id = test_tables["T01"].id

    response = await admin_client.put(f"/tables/{table_id}", json={"status": "occupied"})

    assert response.status_code == 200
    assert response.json()["status"] == "available"
