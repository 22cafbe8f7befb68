"""
Tests for store management, the store_ratings aggregate and owner feedback.
"""

import pytest


class TestStoreRatingsListing:
    def test_unrated_store_has_zero_average(self, client, db, owner_id):
        db.add_store(owner_id)
        r = client.get("/api/v1/stores")
        assert r.status_code == 200
        [row] = r.json()
        assert row["average_rating"] == 0
        assert row["total_ratings"] == 0
        assert row["user_rating"] is None

    def test_average_is_mean_of_ratings(self, client, db, owner_id):
        store = db.add_store(owner_id)
        for i, value in enumerate((5, 4, 2)):
            rater = db.add_user(f"rater{i}@example.com")
            db.add_rating(rater, store["id"], value)
        row = client.get(f"/api/v1/stores/{store['id']}").json()
        assert row["average_rating"] == pytest.approx(11 / 3)
        assert row["total_ratings"] == 3

    def test_aggregate_is_recomputed_on_every_read(self, client, db, owner_id, user_id):
        store = db.add_store(owner_id)
        assert client.get(f"/api/v1/stores/{store['id']}").json()["total_ratings"] == 0
        db.add_rating(user_id, store["id"], 4)
        assert client.get(f"/api/v1/stores/{store['id']}").json()["average_rating"] == 4

    def test_authenticated_caller_sees_own_rating(self, client, db, owner_id, user_id, auth_headers):
        store = db.add_store(owner_id)
        db.add_rating(user_id, store["id"], 3)
        [row] = client.get("/api/v1/stores", headers=auth_headers(user_id)).json()
        assert row["user_rating"] == 3
        [row] = client.get("/api/v1/stores", headers=auth_headers(owner_id)).json()
        assert row["user_rating"] is None

    def test_aggregate_counts_every_rating_beyond_the_row_cap(self, client, db, owner_id):
        store = db.add_store(owner_id)
        values = [5] * 1000 + [1] * 200
        db.tables["ratings"].extend(
            {"id": f"r{i:05d}", "user_id": f"rater-{i}", "store_id": store["id"], "rating": value}
            for i, value in enumerate(values)
        )
        row = client.get(f"/api/v1/stores/{store['id']}").json()
        assert row["total_ratings"] == 1200
        assert row["average_rating"] == pytest.approx(5200 / 1200)
        [listed] = client.get("/api/v1/stores").json()
        assert listed["total_ratings"] == 1200

    def test_listing_returns_every_store(self, client, db, owner_id, auth_headers):
        db.tables["stores"].extend(
            {"id": f"s{i:05d}", "owner_id": owner_id, "name": f"Store {i:05d}", "email": "s@example.com",
             "address": "Addr"}
            for i in range(1001)
        )
        assert len(client.get("/api/v1/stores").json()) == 1001
        mine = client.get("/api/v1/stores/mine", headers=auth_headers(owner_id)).json()
        assert len(mine) == 1001
        assert mine[-1]["name"] == "Store 01000"

    def test_search_by_name_email_or_address(self, client, db, owner_id):
        db.add_store(owner_id, name="Bakery", email="bread@example.com", address="1 Flour Lane")
        db.add_store(owner_id, name="Hardware", email="tools@example.com", address="2 Nail St")
        names = [s["name"] for s in client.get("/api/v1/stores", params={"search": "flour"}).json()]
        assert names == ["Bakery"]
        names = [s["name"] for s in client.get("/api/v1/stores", params={"search": "hard"}).json()]
        assert names == ["Hardware"]
        names = [s["name"] for s in client.get("/api/v1/stores", params={"search": "TOOLS@"}).json()]
        assert names == ["Hardware"]

    def test_missing_store_is_404(self, client):
        assert client.get("/api/v1/stores/nope").status_code == 404

    def test_my_stores(self, client, db, owner_id, admin_id, auth_headers):
        db.add_store(owner_id, name="Mine")
        db.add_store(admin_id, name="Not mine")
        names = [s["name"] for s in client.get("/api/v1/stores/mine", headers=auth_headers(owner_id)).json()]
        assert names == ["Mine"]


class TestStoreCreation:
    def test_admin_creates_store_by_owner_email(self, client, db, admin_id, user_id, auth_headers):
        r = client.post("/api/v1/stores", json={
            "name": "Deli", "email": "deli@example.com", "address": "3 Rye Rd", "owner_email": "user@example.com"
        }, headers=auth_headers(admin_id))
        assert r.status_code == 201
        assert r.json()["owner_id"] == user_id
        assert [row["role"] for row in db.rows("user_roles", user_id=user_id)] == ["store_owner"]

    def test_unknown_owner_email(self, client, admin_id, auth_headers):
        r = client.post("/api/v1/stores", json={
            "name": "Deli", "email": "deli@example.com", "address": "3 Rye Rd", "owner_email": "ghost@example.com"
        }, headers=auth_headers(admin_id))
        assert r.status_code == 404
        assert r.json()["detail"] == "Owner not found with this email"

    def test_owner_required(self, client, admin_id, auth_headers):
        r = client.post("/api/v1/stores", json={
            "name": "Deli", "email": "deli@example.com", "address": "3 Rye Rd"
        }, headers=auth_headers(admin_id))
        assert r.status_code == 422

    def test_admin_owner_keeps_admin_role(self, client, db, admin_id, auth_headers):
        r = client.post("/api/v1/stores", json={
            "name": "HQ", "email": "hq@example.com", "address": "HQ", "owner_id": admin_id
        }, headers=auth_headers(admin_id))
        assert r.status_code == 201
        assert [row["role"] for row in db.rows("user_roles", user_id=admin_id)] == ["system_admin"]

    @pytest.mark.parametrize("who", ["owner", "user"])
    def test_non_admin_cannot_create(self, client, db, owner_id, user_id, auth_headers, who):
        caller = owner_id if who == "owner" else user_id
        r = client.post("/api/v1/stores", json={
            "name": "Deli", "email": "deli@example.com", "address": "3 Rye Rd", "owner_id": caller
        }, headers=auth_headers(caller))
        assert r.status_code == 403
        assert db.rows("stores") == []


class TestStoreUpdateAndDelete:
    def test_owner_updates_own_store(self, client, db, owner_id, auth_headers):
        stale = "2000-01-01T00:00:00+00:00"
        store = db.add_store(owner_id)
        db.tables["stores"][0]["updated_at"] = stale
        r = client.put(f"/api/v1/stores/{store['id']}", json={"name": "Renamed"}, headers=auth_headers(owner_id))
        assert r.status_code == 200
        assert r.json()["name"] == "Renamed"
        assert db.rows("stores")[0]["updated_at"] > stale

    def test_other_users_cannot_update(self, client, db, owner_id, user_id, auth_headers):
        store = db.add_store(owner_id)
        r = client.put(f"/api/v1/stores/{store['id']}", json={"name": "Hijacked"}, headers=auth_headers(user_id))
        assert r.status_code == 404
        assert db.rows("stores")[0]["name"] == "Corner Shop"

    def test_owner_cannot_reassign_ownership(self, client, db, owner_id, user_id, auth_headers):
        store = db.add_store(owner_id)
        r = client.put(f"/api/v1/stores/{store['id']}", json={"owner_id": user_id}, headers=auth_headers(owner_id))
        assert r.status_code == 403
        assert db.rows("stores")[0]["owner_id"] == owner_id

    def test_admin_can_reassign_ownership(self, client, db, owner_id, user_id, admin_id, auth_headers):
        store = db.add_store(owner_id)
        r = client.put(f"/api/v1/stores/{store['id']}", json={"owner_id": user_id}, headers=auth_headers(admin_id))
        assert r.status_code == 200
        assert r.json()["owner_id"] == user_id

    def test_delete_is_admin_only_and_cascades(self, client, db, owner_id, user_id, admin_id, auth_headers):
        store = db.add_store(owner_id)
        db.add_rating(user_id, store["id"], 5)
        assert client.delete(f"/api/v1/stores/{store['id']}", headers=auth_headers(owner_id)).status_code == 404
        assert client.delete(f"/api/v1/stores/{store['id']}", headers=auth_headers(admin_id)).status_code == 204
        assert db.rows("stores") == []
        assert db.rows("ratings") == []


class TestStoreFeedback:
    def test_admin_sees_rater_details_newest_first(self, client, db, owner_id, admin_id, auth_headers):
        store = db.add_store(owner_id)
        early = db.add_user("early@example.com", name="Early", address="E St")
        late = db.add_user("late@example.com", name="Late", address="L St")
        db.add_rating(early, store["id"], 2, created_at="2025-01-01T00:00:00+00:00")
        db.add_rating(late, store["id"], 5, created_at="2025-02-01T00:00:00+00:00")

        r = client.get(f"/api/v1/stores/{store['id']}/ratings", headers=auth_headers(admin_id))
        assert r.status_code == 200
        assert [(f["user_name"], f["rating"]) for f in r.json()] == [("Late", 5), ("Early", 2)]

    def test_owner_cannot_see_other_profiles(self, client, db, owner_id, user_id, auth_headers):
        store = db.add_store(owner_id)
        db.add_rating(user_id, store["id"], 4)
        [feedback] = client.get(f"/api/v1/stores/{store['id']}/ratings", headers=auth_headers(owner_id)).json()
        assert feedback["rating"] == 4
        assert feedback["user_name"] == "Unknown"
        assert feedback["user_email"] == "Unknown"
