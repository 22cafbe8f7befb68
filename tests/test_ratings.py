"""
Tests for rating submission and the one-rating-per-user-per-store rule.
"""

from fake_supabase import FakeSupabase
import pytest
from fastapi import HTTPException
from postgrest.exceptions import APIError
from rateboard.core.policies import AppRole, Caller
from rateboard.modules.ratings.schemas import RatingSubmit
from rateboard.modules.ratings.service import RatingService


class TestSubmitRatingService:
    def setup_method(self):
        self.db = FakeSupabase()
        self.owner = self.db.add_user("owner@example.com", role="store_owner")
        self.user = self.db.add_user("user@example.com")
        self.store = self.db.add_store(self.owner)
        self.caller = Caller(user_id=self.user, roles=frozenset({AppRole.NORMAL_USER}))
        self.service = RatingService(self.db)

    def test_first_submission_inserts(self):
        result = self.service.submit_rating(self.caller, RatingSubmit(store_id=self.store["id"], rating=4))
        assert result.created is True
        assert result.rating.rating == 4
        assert len(self.db.rows("ratings", user_id=self.user)) == 1

    def test_resubmission_overwrites_in_place(self):
        first = self.service.submit_rating(self.caller, RatingSubmit(store_id=self.store["id"], rating=4))
        second = self.service.submit_rating(self.caller, RatingSubmit(store_id=self.store["id"], rating=2))
        assert second.created is False
        assert second.rating.id == first.rating.id
        rows = self.db.rows("ratings", user_id=self.user, store_id=self.store["id"])
        assert [r["rating"] for r in rows] == [2]

    def test_racing_insert_rejected_by_unique_constraint(self):
        # Another request from the same user won the race between our lookup and insert
        self.db.add_rating(self.user, self.store["id"], 5)
        real_table = self.db.table

        def stale_lookup(name):
            query = real_table(name)
            if name == "ratings":
                query.filters.append(lambda row: False)
            return query

        self.db.table = stale_lookup

        # The stale lookup sees nothing, so the service inserts and hits the constraint
        with pytest.raises(HTTPException) as exc:
            self.service.submit_rating(self.caller, RatingSubmit(store_id=self.store["id"], rating=3))
        assert exc.value.status_code == 409
        assert "ratings_user_id_store_id_key" in exc.value.detail
        assert [r["rating"] for r in self.db.rows("ratings", user_id=self.user)] == [5]

    def test_unknown_store_is_foreign_key_violation(self):
        with pytest.raises(HTTPException) as exc:
            self.service.submit_rating(self.caller, RatingSubmit(store_id="missing", rating=3))
        assert exc.value.status_code == 400
        assert "foreign key" in exc.value.detail

    def test_direct_duplicate_insert_fails(self):
        self.db.add_rating(self.user, self.store["id"], 5)
        with pytest.raises(APIError) as exc:
            self.db.add_rating(self.user, self.store["id"], 1)
        assert exc.value.code == "23505"


class TestRatingRoutes:
    def test_submit_then_resubmit(self, client, db, owner_id, user_id, auth_headers):
        store = db.add_store(owner_id)
        headers = auth_headers(user_id)

        r = client.post("/api/v1/ratings", json={"store_id": store["id"], "rating": 4}, headers=headers)
        assert r.status_code == 200
        assert r.json()["created"] is True

        r = client.post("/api/v1/ratings", json={"store_id": store["id"], "rating": 2}, headers=headers)
        assert r.status_code == 200
        assert r.json()["created"] is False
        assert r.json()["message"] == "Rating updated successfully"

        r = client.get(f"/api/v1/stores/{store['id']}")
        assert r.json()["average_rating"] == 2
        assert r.json()["total_ratings"] == 1

    @pytest.mark.parametrize("value", [0, 6, -1])
    def test_out_of_range_rejected_before_data_layer(self, client, db, owner_id, user_id, auth_headers, value):
        store = db.add_store(owner_id)
        r = client.post("/api/v1/ratings", json={"store_id": store["id"], "rating": value}, headers=auth_headers(user_id))
        assert r.status_code == 422
        assert db.rows("ratings") == []

    def test_submit_requires_authentication(self, client, db, owner_id):
        store = db.add_store(owner_id)
        r = client.post("/api/v1/ratings", json={"store_id": store["id"], "rating": 3})
        assert r.status_code in (401, 403)

    def test_anyone_can_list_ratings(self, client, db, owner_id, user_id):
        store = db.add_store(owner_id)
        db.add_rating(user_id, store["id"], 5)
        r = client.get("/api/v1/ratings", params={"store_id": store["id"]})
        assert r.status_code == 200
        assert [x["rating"] for x in r.json()] == [5]

    def test_cannot_update_or_delete_someone_elses_rating(self, client, db, owner_id, user_id, admin_id, auth_headers):
        store = db.add_store(owner_id)
        rating = db.add_rating(user_id, store["id"], 5)

        for caller in (owner_id, admin_id):
            r = client.put(f"/api/v1/ratings/{rating['id']}", json={"rating": 1}, headers=auth_headers(caller))
            assert r.status_code == 404
            r = client.delete(f"/api/v1/ratings/{rating['id']}", headers=auth_headers(caller))
            assert r.status_code == 404

        assert db.rows("ratings")[0]["rating"] == 5

    def test_update_own_rating_refreshes_timestamp(self, client, db, owner_id, user_id, auth_headers):
        store = db.add_store(owner_id)
        stale = "2000-01-01T00:00:00+00:00"
        rating = db.add_rating(user_id, store["id"], 5, updated_at=stale)

        r = client.put(f"/api/v1/ratings/{rating['id']}", json={"rating": 3}, headers=auth_headers(user_id))
        assert r.status_code == 200
        assert r.json()["rating"] == 3
        assert db.rows("ratings")[0]["updated_at"] > stale

    def test_delete_own_rating(self, client, db, owner_id, user_id, auth_headers):
        store = db.add_store(owner_id)
        rating = db.add_rating(user_id, store["id"], 5)
        r = client.delete(f"/api/v1/ratings/{rating['id']}", headers=auth_headers(user_id))
        assert r.status_code == 204
        assert db.rows("ratings") == []
