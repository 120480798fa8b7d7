"""Reservation API tests"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_reservation(authenticated_client: AsyncClient, test_tables, reservation_payload):
    response = await authenticated_client.post(
        "/reservations",
        json=reservation_payload(pax=4, time="18:30", notes="High chair"),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "awaiting"
    assert data["pax_number"] == 4
    assert data["reservation_date"] == "2030-06-02"
    assert data["reservation_time"] == "18:30"
    assert data["notes"] == "High chair"
    assert data["table"]["table_number"] == "T02"
    assert data["table"]["status"] == "reserved"
    assert data["customer"]["first_name"] == "Alice"
    assert data["customer"]["title"] == "Ms"


@pytest.mark.asyncio
async def test_create_reservation_requires_auth(client: AsyncClient, test_tables, reservation_payload):
    response = await client.post("/reservations", json=reservation_payload())

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides,status_code,code", [
    ({"date": "2030-06-01", "time": "12:30"}, 400, "invalid_reservation_time"),
    ({"date": "2030/06/02"}, 400, "invalid_date_format"),
    ({"time": "7:00 PM"}, 400, "invalid_time_format"),
    ({"pax": 12}, 409, "insufficient_capacity"),
    ({"table_id": 9999}, 404, "table_not_found"),
])
async def test_create_reservation_business_errors(
    authenticated_client: AsyncClient, test_tables, reservation_payload, overrides, status_code, code
):
    response = await authenticated_client.post("/reservations", json=reservation_payload(**overrides))

    assert response.status_code == status_code
    assert response.json()["code"] == code


@pytest.mark.asyncio
async def test_create_reservation_rejects_bad_payload(authenticated_client: AsyncClient, test_tables, reservation_payload):
    payload = reservation_payload(pax=0)
    payload["customer"]["email"] = "not-an-email"

    response = await authenticated_client.post("/reservations", json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_double_booking_is_rejected(authenticated_client: AsyncClient, test_tables, reservation_payload):
    table_id = test_tables["T01"].id
    first = await authenticated_client.post("/reservations", json=reservation_payload(table_id=table_id))
    second = await authenticated_client.post(
        "/reservations",
        json=reservation_payload(time="20:00", table_id=table_id, phone="+628190000001"),
    )

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["code"] == "table_unavailable"


@pytest.mark.asyncio
async def test_get_reservation(authenticated_client: AsyncClient, test_tables, reservation_payload):
    created = (await authenticated_client.post("/reservations", json=reservation_payload())).json()

    response = await authenticated_client.get(f"/reservations/{created['id']}")

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]

    missing = await authenticated_client.get("/reservations/4242")
    assert missing.status_code == 404
    assert missing.json()["code"] == "reservation_not_found"


@pytest.mark.asyncio
async def test_list_reservations(authenticated_client: AsyncClient, test_tables, reservation_payload):
    for booking_time in ("12:00", "15:00", "18:00"):
        await authenticated_client.post("/reservations", json=reservation_payload(time=booking_time))

    response = await authenticated_client.get("/reservations", params={"per_page": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["total_pages"] == 2
    assert [item["reservation_time"] for item in data["items"]] == ["18:00", "15:00"]

    filtered = await authenticated_client.get("/reservations", params={"status": "confirmed"})
    assert filtered.json()["total"] == 0

    invalid = await authenticated_client.get("/reservations", params={"status": "seated"})
    assert invalid.status_code == 400
    assert invalid.json()["code"] == "invalid_status"


@pytest.mark.asyncio
async def test_status_lifecycle(authenticated_client: AsyncClient, test_tables, reservation_payload):
    created = (await authenticated_client.post("/reservations", json=reservation_payload())).json()
    reservation_id = created["id"]

    rejected = await authenticated_client.patch(
        f"/reservations/{reservation_id}/status", json={"status": "completed"}
    )
    assert rejected.status_code == 409
    assert rejected.json()["code"] == "invalid_status_transition"

    confirmed = await authenticated_client.patch(
        f"/reservations/{reservation_id}/status", json={"status": "confirmed"}
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"

    seated = await authenticated_client.post(f"/reservations/{reservation_id}/check-in")
    assert seated.status_code == 200
    assert seated.json()["checked_in_at"] is not None
    assert seated.json()["table"]["status"] == "occupied"

    completed = await authenticated_client.patch(
        f"/reservations/{reservation_id}/status", json={"status": "completed"}
    )
    assert completed.status_code == 200
    assert completed.json()["checked_out_at"] is not None
    assert completed.json()["table"]["status"] == "available"


@pytest.mark.asyncio
async def test_status_update_rejects_unknown_status(authenticated_client: AsyncClient, test_tables, reservation_payload):
    created = (await authenticated_client.post("/reservations", json=reservation_payload())).json()

    response = await authenticated_client.patch(
        f"/reservations/{created['id']}/status", json={"status": "no_show"}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_status"


@pytest.mark.asyncio
async def test_cancel_reservation(authenticated_client: AsyncClient, test_tables, reservation_payload):
    created = (await authenticated_client.post("/reservations", json=reservation_payload(notes="Anniversary"))).json()

    response = await authenticated_client.post(
        f"/reservations/{created['id']}/cancel", json={"reason": "customer request"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cancelled"
    assert data["notes"] == "Anniversary\nCancellation reason: customer request"
    assert data["table"]["status"] == "available"

    again = await authenticated_client.post(f"/reservations/{created['id']}/cancel")
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_cancel_reason_too_long(authenticated_client: AsyncClient, test_tables, reservation_payload):
    created = (await authenticated_client.post("/reservations", json=reservation_payload())).json()

    response = await authenticated_client.post(
        f"/reservations/{created['id']}/cancel", json={"reason": "x" * 501}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_check_in_requires_confirmation(authenticated_client: AsyncClient, test_tables, reservation_payload):
    created = (await authenticated_client.post("/reservations", json=reservation_payload())).json()

    response = await authenticated_client.post(f"/reservations/{created['id']}/check-in")

    assert response.status_code == 409
    assert response.json()["code"] == "invalid_status_transition"


@pytest.mark.asyncio
async def test_available_tables(authenticated_client: AsyncClient, test_tables, reservation_payload):
    await authenticated_client.post("/reservations", json=reservation_payload(pax=4, time="19:00"))

    response = await authenticated_client.get(
        "/reservations/available-tables",
        params={"date": "2030-06-02", "time": "19:30", "pax": 4},
    )

    assert response.status_code == 200
    assert [table["table_number"] for table in response.json()] == ["T03", "T04"]


@pytest.mark.asyncio
async def test_available_tables_query_validation(authenticated_client: AsyncClient, test_tables):
    missing = await authenticated_client.get(
        "/reservations/available-tables", params={"date": "2030-06-02", "time": "19:30"}
    )
    assert missing.status_code == 422

    bad_date = await authenticated_client.get(
        "/reservations/available-tables", params={"date": "02/06/2030", "time": "19:30", "pax": 2}
    )
    assert bad_date.status_code == 400
    assert bad_date.json()["code"] == "invalid_date_format"
