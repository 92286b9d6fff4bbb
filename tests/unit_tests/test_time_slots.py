"""Tests for the owner time-slot endpoints."""

import asyncio

import pytest

from quickcourt.models import Role, TimeSlotCreate
from tests.conftest import auth_headers


@pytest.fixture()
def court(seed, owner):
    return seed.court(seed.venue(owner))


def _base(court) -> str:
    return f"/api/owner/venues/{court.venue_id}/courts/{court.id}/time-slots"


class TestCreateTimeSlot:
    def test_create(self, client, owner, court):
        resp = client.post(
            _base(court),
            json={"dayOfWeek": 1, "startTime": "09:00", "endTime": "10:00"},
            headers=auth_headers(owner),
        )
        assert resp.status_code == 201
        slot = resp.json()["data"]
        assert slot["dayName"] == "Monday"
        assert slot["courtId"] == court.id
        assert slot["isAvailable"] is True

    def test_duplicate_is_conflict(self, client, seed, owner, court):
        seed.slot(court, 1, "09:00", "10:00")
        resp = client.post(
            _base(court),
            json={"dayOfWeek": 1, "startTime": "09:00", "endTime": "10:00"},
            headers=auth_headers(owner),
        )
        assert resp.status_code == 409

    def test_start_after_end(self, client, owner, court):
        resp = client.post(
            _base(court),
            json={"dayOfWeek": 1, "startTime": "11:00", "endTime": "10:00"},
            headers=auth_headers(owner),
        )
        assert resp.status_code == 400

    def test_bulk_create_skips_duplicates(self, client, seed, owner, court):
        seed.slot(court, 2, "08:00", "09:00")
        slots = [{"dayOfWeek": 2, "startTime": f"{h:02d}:00", "endTime": f"{h + 1:02d}:00"} for h in range(8, 12)]

        resp = client.post(f"{_base(court)}/bulk", json={"slots": slots}, headers=auth_headers(owner))
        assert resp.status_code == 201
        assert resp.json()["data"] == {"requested": 4, "created": 3}

    def test_bulk_count_ignores_concurrent_inserts(self, seed, court):
        venue = seed.run(seed.venues.get, court.venue_id)
        other = seed.court(venue, name="Court B")

        async def bulk_and_single():
            return await asyncio.gather(
                seed.slots.create_many(
                    court.venue_id, court.id, [TimeSlotCreate(day_of_week=1, start_time="09:00", end_time="10:00")]
                ),
                seed.slots.create(other.venue_id, other.id, 1, "09:00", "10:00"),
            )

        created, _ = seed.run(bulk_and_single)
        assert created == 1


class TestReadTimeSlots:
    def test_list_includes_unavailable_by_default(self, client, seed, owner, court):
        seed.slot(court, 1, "09:00", "10:00")
        seed.slot(court, 1, "10:00", "11:00", is_available=False)
        seed.slot(court, 3, "09:00", "10:00")

        headers = auth_headers(owner)
        assert len(client.get(_base(court), headers=headers).json()["data"]) == 3
        only_open = client.get(_base(court), params={"includeUnavailable": False}, headers=headers).json()["data"]
        assert len(only_open) == 2
        monday = client.get(_base(court), params={"dayOfWeek": 1}, headers=headers).json()["data"]
        assert [s["startTime"] for s in monday] == ["09:00", "10:00"]

    def test_by_day_and_stats(self, client, seed, owner, court):
        seed.slot(court, 1, "09:00", "10:00")
        seed.slot(court, 1, "10:00", "11:00")
        seed.slot(court, 1, "11:00", "12:00", is_available=False)
        seed.slot(court, 2, "18:00", "19:00")
        seed.slot(court, 2, "19:00", "20:00")
        headers = auth_headers(owner)

        by_day = client.get(f"{_base(court)}/by-day", headers=headers).json()["data"]
        assert sorted(by_day) == ["1", "2"]
        assert len(by_day["1"]) == 3

        stats = client.get(f"{_base(court)}/stats", headers=headers).json()["data"]
        assert stats["Monday"] == {"total": 3, "available": 2, "blocked": 1}
        assert stats["Tuesday"] == {"total": 2, "available": 2, "blocked": 0}


class TestModifyTimeSlot:
    def test_update(self, client, seed, owner, court):
        slot = seed.slot(court, 1, "09:00", "10:00")
        resp = client.patch(
            f"{_base(court)}/{slot.id}",
            json={"endTime": "10:30"},
            headers=auth_headers(owner),
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["durationHours"] == 1.5

    def test_empty_update(self, client, seed, owner, court):
        slot = seed.slot(court, 1, "09:00", "10:00")
        resp = client.patch(f"{_base(court)}/{slot.id}", json={}, headers=auth_headers(owner))
        assert resp.status_code == 400
        assert resp.json()["message"] == "No valid fields to update"

    def test_set_availability_idempotent(self, client, seed, owner, court):
        slot = seed.slot(court, 1, "09:00", "10:00")
        for _ in range(2):
            resp = client.patch(
                f"{_base(court)}/{slot.id}/availability",
                json={"isAvailable": False},
                headers=auth_headers(owner),
            )
            assert resp.status_code == 200
            assert resp.json()["data"]["isAvailable"] is False

    def test_toggle(self, client, seed, owner, court):
        slot = seed.slot(court, 1, "09:00", "10:00")
        resp = client.post(f"{_base(court)}/{slot.id}/toggle", headers=auth_headers(owner))
        assert resp.json()["data"]["isAvailable"] is False

    def test_delete(self, client, seed, owner, court):
        slot = seed.slot(court, 1, "09:00", "10:00")
        headers = auth_headers(owner)
        assert client.delete(f"{_base(court)}/{slot.id}", headers=headers).status_code == 200
        assert client.delete(f"{_base(court)}/{slot.id}", headers=headers).status_code == 404

    def test_delete_all(self, client, seed, owner, court):
        seed.slot(court, 1, "09:00", "10:00")
        seed.slot(court, 2, "09:00", "10:00")
        resp = client.delete(_base(court), headers=auth_headers(owner))
        assert resp.json()["data"] == {"deleted": 2}

    def test_slot_of_another_court(self, client, seed, owner, court):
        other = seed.court(seed.venue(owner), name="Other")
        slot = seed.slot(other, 1, "09:00", "10:00")
        resp = client.post(f"{_base(court)}/{slot.id}/toggle", headers=auth_headers(owner))
        assert resp.status_code == 404


class TestTimeSlotAccess:
    def test_anonymous(self, client, court):
        assert client.get(_base(court)).status_code == 401

    def test_customer_is_forbidden(self, client, customer, court):
        assert client.get(_base(court), headers=auth_headers(customer)).status_code == 403

    def test_other_owner_is_forbidden(self, client, seed, court):
        rival = seed.user(Role.FACILITY_OWNER)
        assert client.get(_base(court), headers=auth_headers(rival)).status_code == 403

    def test_admin_may_manage_any_court(self, client, admin, court):
        resp = client.post(
            _base(court),
            json={"dayOfWeek": 0, "startTime": "07:00", "endTime": "08:00"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 201

    def test_court_of_another_venue(self, client, seed, owner, court):
        other_venue = seed.venue(owner, name="Second Site")
        resp = client.get(
            f"/api/owner/venues/{other_venue.id}/courts/{court.id}/time-slots",
            headers=auth_headers(owner),
        )
        assert resp.status_code == 404
        assert resp.json()["message"] == "Court not found"
