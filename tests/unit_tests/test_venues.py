"""Tests for owner venue and court management."""

from datetime import date, timedelta

from quickcourt.models import BookingStatus, Role
from tests.conftest import auth_headers

_VENUE = {
    "name": "Lakeside Arena",
    "address": "4 Lake View Road, Satellite",
    "city": "Ahmedabad",
    "amenities": ["parking", "showers"],
    "courts": [
        {"name": "Court 1", "sportType": "badminton", "pricePerHour": 15},
        {"name": "Court 2", "sportType": "tennis", "pricePerHour": 25},
    ],
}


class TestOwnerVenues:
    def test_create_venue_is_pending(self, client, owner):
        resp = client.post("/api/owner/venues", json=_VENUE, headers=auth_headers(owner))
        assert resp.status_code == 201
        venue = resp.json()["data"]
        assert venue["isApproved"] is False
        assert venue["amenities"] == ["parking", "showers"]

        listed = client.get("/api/owner/venues", headers=auth_headers(owner)).json()["data"]
        assert listed[0]["courtsCount"] == 2

    def test_customer_cannot_create_venue(self, client, customer):
        resp = client.post("/api/owner/venues", json=_VENUE, headers=auth_headers(customer))
        assert resp.status_code == 403

    def test_update_venue(self, client, seed, owner):
        venue = seed.venue(owner)
        resp = client.put(
            f"/api/owner/venues/{venue.id}",
            json={"name": "Renamed Arena"},
            headers=auth_headers(owner),
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["name"] == "Renamed Arena"

    def test_empty_update(self, client, seed, owner):
        venue = seed.venue(owner)
        resp = client.put(f"/api/owner/venues/{venue.id}", json={}, headers=auth_headers(owner))
        assert resp.status_code == 400

    def test_other_owner_cannot_see_venue(self, client, seed, owner):
        venue = seed.venue(owner)
        rival = seed.user(Role.FACILITY_OWNER)
        assert client.get(f"/api/owner/venues/{venue.id}", headers=auth_headers(rival)).status_code == 403

    def test_delete_venue_removes_courts_and_slots(self, client, seed, owner):
        venue = seed.venue(owner)
        court = seed.court(venue)
        seed.slot(court, 1, "09:00", "10:00")

        resp = client.delete(f"/api/owner/venues/{venue.id}", headers=auth_headers(owner))
        assert resp.status_code == 200
        assert seed.run(seed.courts.get, court.id) is None
        assert seed.run(seed.slots.find_by_court, court.id, None, True) == []

    def test_dashboard(self, client, seed, owner):
        venue = seed.venue(owner)
        seed.venue(owner, approved=False, name="Waiting Room")
        court = seed.court(venue)
        seed.booking(
            seed.user(), court, date.today() + timedelta(days=3), "10:00", "11:00", status=BookingStatus.CONFIRMED
        )

        data = client.get("/api/owner/dashboard", headers=auth_headers(owner)).json()["data"]
        assert (data["totalVenues"], data["approvedVenues"], data["pendingVenues"]) == (2, 1, 1)
        assert data["totalCourts"] == 1
        assert data["confirmedBookings"] == 1
        assert len(data["recentBookings"]) == 1


class TestVenueStats:
    def test_stats(self, client, seed, owner):
        venue = seed.venue(owner)
        court = seed.court(venue)
        player = seed.user()
        day = date.today() + timedelta(days=3)
        seed.booking(player, court, day, "10:00", "11:00", status=BookingStatus.CONFIRMED)
        seed.booking(player, court, day, "11:00", "12:00", status=BookingStatus.CANCELLED)

        resp = client.get(f"/api/venues/{venue.id}/stats", headers=auth_headers(owner))
        assert resp.status_code == 200
        stats = resp.json()["data"]
        assert stats["totalBookings"] == 2
        assert stats["confirmedBookings"] == 1
        assert stats["cancelledBookings"] == 1

    def test_stats_need_ownership(self, client, seed, owner, customer):
        venue = seed.venue(owner)
        assert client.get(f"/api/venues/{venue.id}/stats", headers=auth_headers(customer)).status_code == 403


class TestCourts:
    def test_create_and_list(self, client, seed, owner):
        venue = seed.venue(owner)
        resp = client.post(
            f"/api/owner/venues/{venue.id}/courts",
            json={"name": "Center Court", "sportType": "tennis", "pricePerHour": 40},
            headers=auth_headers(owner),
        )
        assert resp.status_code == 201
        listed = client.get(f"/api/owner/venues/{venue.id}/courts", headers=auth_headers(owner)).json()["data"]
        assert [c["name"] for c in listed] == ["Center Court"]

    def test_unknown_sport(self, client, seed, owner):
        venue = seed.venue(owner)
        resp = client.post(
            f"/api/owner/venues/{venue.id}/courts",
            json={"name": "Pool", "sportType": "water polo", "pricePerHour": 40},
            headers=auth_headers(owner),
        )
        assert resp.status_code == 400

    def test_toggle_status_hides_court(self, client, seed, owner):
        venue = seed.venue(owner)
        court = seed.court(venue)
        resp = client.patch(
            f"/api/owner/venues/{venue.id}/courts/{court.id}/toggle-status",
            headers=auth_headers(owner),
        )
        assert resp.json()["data"]["isActive"] is False
        assert client.get("/api/courts/badminton").json()["data"]["courts"] == []

    def test_update_court(self, client, seed, owner):
        venue = seed.venue(owner)
        court = seed.court(venue)
        resp = client.put(
            f"/api/owner/venues/{venue.id}/courts/{court.id}",
            json={"pricePerHour": 35},
            headers=auth_headers(owner),
        )
        assert resp.json()["data"]["pricePerHour"] == 35

    def test_delete_court(self, client, seed, owner):
        venue = seed.venue(owner)
        court = seed.court(venue)
        seed.slot(court, 2, "09:00", "10:00")
        headers = auth_headers(owner)
        assert client.delete(f"/api/owner/venues/{venue.id}/courts/{court.id}", headers=headers).status_code == 200
        assert client.get(f"/api/owner/venues/{venue.id}/courts/{court.id}", headers=headers).status_code == 404
