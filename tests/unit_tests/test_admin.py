"""Tests for the /api/admin endpoints."""

from quickcourt.models import Role
from tests.conftest import auth_headers


class TestAdminAccess:
    def test_owner_is_forbidden(self, client, owner):
        assert client.get("/api/admin/dashboard", headers=auth_headers(owner)).status_code == 403

    def test_dashboard(self, client, seed, admin, owner, customer):
        seed.venue(owner)
        seed.venue(owner, approved=False, name="Queue Court")
        data = client.get("/api/admin/dashboard", headers=auth_headers(admin)).json()["data"]
        assert data["totalUsers"] == 3
        assert data["usersByRole"] == {"admin": 1, "facility_owner": 1, "user": 1}
        assert data["venues"] == {"total": 2, "approved": 1, "pending": 1, "rejected": 0}


class TestVenueReview:
    def test_pending_list(self, client, seed, admin, owner):
        seed.venue(owner)
        pending = seed.venue(owner, approved=False, name="Queue Court")
        page = client.get("/api/admin/venues", params={"status": "pending"}, headers=auth_headers(admin)).json()
        assert [v["id"] for v in page["data"]["items"]] == [pending.id]

    def test_approve_makes_venue_public(self, client, seed, admin, owner):
        venue = seed.venue(owner, approved=False)
        resp = client.patch(
            f"/api/admin/venues/{venue.id}/review",
            json={"action": "approve"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["isApproved"] is True
        assert client.get(f"/api/venues/{venue.id}").status_code == 200

    def test_approve_twice(self, client, seed, admin, owner):
        venue = seed.venue(owner)
        resp = client.patch(
            f"/api/admin/venues/{venue.id}/review",
            json={"action": "approve"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Venue is already approved"

    def test_reject_needs_reason(self, client, seed, admin, owner):
        venue = seed.venue(owner, approved=False)
        resp = client.patch(
            f"/api/admin/venues/{venue.id}/review",
            json={"action": "reject"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Rejection reason is required"

    def test_reject(self, client, seed, admin, owner):
        venue = seed.venue(owner, approved=False)
        resp = client.patch(
            f"/api/admin/venues/{venue.id}/review",
            json={"action": "reject", "rejectionReason": "Photos missing"},
            headers=auth_headers(admin),
        )
        assert resp.json()["data"]["rejectionReason"] == "Photos missing"
        rejected = client.get("/api/admin/venues", params={"status": "rejected"}, headers=auth_headers(admin))
        assert rejected.json()["data"]["pagination"]["total"] == 1


class TestUserManagement:
    def test_list_users_by_role(self, client, seed, admin, owner, customer):
        page = client.get("/api/admin/users", params={"role": "facility_owner"}, headers=auth_headers(admin)).json()
        assert [u["id"] for u in page["data"]["items"]] == [owner.id]

    def test_suspend_and_reinstate(self, client, admin, customer):
        headers = auth_headers(admin)
        resp = client.patch(
            f"/api/admin/users/{customer.id}/status",
            json={"isSuspended": True, "reason": "Spam"},
            headers=headers,
        )
        assert resp.json()["data"]["isSuspended"] is True
        assert client.get("/api/auth/me", headers=auth_headers(customer)).status_code == 403

        client.patch(f"/api/admin/users/{customer.id}/status", json={"isSuspended": False}, headers=headers)
        assert client.get("/api/auth/me", headers=auth_headers(customer)).status_code == 200

    def test_cannot_suspend_self(self, client, admin):
        resp = client.patch(
            f"/api/admin/users/{admin.id}/status",
            json={"isSuspended": True},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400

    def test_cannot_suspend_another_admin(self, client, seed, admin):
        other = seed.user(Role.ADMIN)
        resp = client.patch(
            f"/api/admin/users/{other.id}/status",
            json={"isSuspended": True},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400
