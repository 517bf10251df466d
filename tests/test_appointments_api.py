"""Viewing appointment API tests.

Booking is public and date-checked (calendar date, today allowed). All
other routes are agent/admin only and scoped by ownership.
"""

import uuid
from datetime import date, timedelta

import pytest

from conftest import create_appointment, create_property


def _booking(property_id: str, **overrides) -> dict:
    return {
        "propertyId": property_id,
        "name": "Jamie Buyer",
        "email": "jamie@example.com",
        "preferred_date": (date.today() + timedelta(days=1)).isoformat(),
        "preferred_time": "10:00",
        **overrides,
    }


# ═══════════════════════════════════════════════════════════
# Public booking
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_book_viewing(client, listing):
    r = await client.post("/api/appointments", json=_booking(listing["id"], message="Mornings"))
    assert r.status_code == 201
    data = r.json()
    assert data["message"] == "Appointment request submitted successfully"
    appointment = data["appointment"]
    assert appointment["status"] == "pending"
    assert appointment["preferred_time"] == "10:00"
    assert appointment["message"] == "Mornings"
    assert appointment["property"]["city"] == listing["city"]


@pytest.mark.asyncio
async def test_today_is_accepted(client, listing):
    r = await client.post(
        "/api/appointments",
        json=_booking(listing["id"], preferred_date=date.today().isoformat()),
    )
    assert r.status_code == 201


@pytest.mark.asyncio
async def test_past_date_is_rejected(client, listing):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    r = await client.post(
        "/api/appointments", json=_booking(listing["id"], preferred_date=yesterday)
    )
    assert r.status_code == 400
    assert r.json() == {
        "error": "Invalid date",
        "message": "Appointment date must be today or later",
    }


@pytest.mark.asyncio
async def test_date_checked_before_property(client):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    r = await client.post(
        "/api/appointments", json=_booking(str(uuid.uuid4()), preferred_date=yesterday)
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_missing_property_is_404(client):
    r = await client.post("/api/appointments", json=_booking(str(uuid.uuid4())))
    assert r.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override",
    [{"preferred_time": "25:00"}, {"preferred_date": "next tuesday"}, {"email": "nope"}],
)
async def test_booking_validation(client, listing, override):
    r = await client.post("/api/appointments", json=_booking(listing["id"], **override))
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Agent reads
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_requires_agent_role(client, buyer):
    r = await client.get("/api/appointments")
    assert r.status_code == 401
    r = await client.get("/api/appointments", headers=buyer.headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_list_is_scoped_and_sorted(client, agent, other_agent, listing):
    later = await create_appointment(
        client, listing["id"], preferred_date=(date.today() + timedelta(days=5)).isoformat()
    )
    sooner = await create_appointment(
        client, listing["id"], preferred_date=(date.today() + timedelta(days=2)).isoformat()
    )
    other_listing = await create_property(client, other_agent)
    await create_appointment(client, other_listing["id"])

    r = await client.get("/api/appointments", headers=agent.headers)
    assert r.status_code == 200
    data = r.json()
    assert [a["id"] for a in data["appointments"]] == [sooner["id"], later["id"]]
    assert data["total"] == 2


@pytest.mark.asyncio
async def test_list_filters_by_status(client, agent, listing):
    a = await create_appointment(client, listing["id"])
    await create_appointment(client, listing["id"])
    await client.put(
        f"/api/appointments/{a['id']}/status",
        json={"status": "cancelled"},
        headers=agent.headers,
    )

    r = await client.get(
        "/api/appointments", params={"status": "cancelled"}, headers=agent.headers
    )
    assert [x["id"] for x in r.json()["appointments"]] == [a["id"]]


@pytest.mark.asyncio
async def test_stats(client, agent, listing):
    a = await create_appointment(client, listing["id"])
    b = await create_appointment(client, listing["id"])
    await create_appointment(client, listing["id"])
    for appointment, status in ((a, "confirmed"), (b, "completed")):
        await client.put(
            f"/api/appointments/{appointment['id']}/status",
            json={"status": status},
            headers=agent.headers,
        )

    r = await client.get("/api/appointments/stats", headers=agent.headers)
    assert r.status_code == 200
    assert r.json() == {
        "total_appointments": 3,
        "pending_appointments": 1,
        "confirmed_appointments": 1,
        "cancelled_appointments": 0,
        "completed_appointments": 1,
        "upcoming_appointments": 1,
    }


@pytest.mark.asyncio
async def test_get_by_id_ownership(client, agent, other_agent, admin, listing):
    appointment = await create_appointment(client, listing["id"])
    url = f"/api/appointments/{appointment['id']}"

    assert (await client.get(url, headers=agent.headers)).status_code == 200
    assert (await client.get(url, headers=other_agent.headers)).status_code == 403
    assert (await client.get(url, headers=admin.headers)).status_code == 200

    r = await client.get(f"/api/appointments/{uuid.uuid4()}", headers=agent.headers)
    assert r.status_code == 404
    assert r.json()["error"] == "Appointment not found"


# ═══════════════════════════════════════════════════════════
# Status updates and delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_status(client, agent, listing):
    appointment = await create_appointment(client, listing["id"])
    r = await client.put(
        f"/api/appointments/{appointment['id']}/status",
        json={"status": "confirmed"},
        headers=agent.headers,
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Appointment status updated successfully"
    assert r.json()["appointment"]["status"] == "confirmed"


@pytest.mark.asyncio
async def test_update_status_rejects_unknown_value(client, agent, listing):
    appointment = await create_appointment(client, listing["id"])
    r = await client.put(
        f"/api/appointments/{appointment['id']}/status",
        json={"status": "rescheduled"},
        headers=agent.headers,
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_delete_appointment(client, agent, other_agent, listing):
    appointment = await create_appointment(client, listing["id"])
    url = f"/api/appointments/{appointment['id']}"

    assert (await client.delete(url, headers=other_agent.headers)).status_code == 403

    r = await client.delete(url, headers=agent.headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Appointment deleted successfully"}
    assert (await client.get(url, headers=agent.headers)).status_code == 404
