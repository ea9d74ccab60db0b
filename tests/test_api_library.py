"""Tests for user, family, lending, reading and activity API endpoints."""

from fastapi.testclient import TestClient


def lend(client: TestClient, household, **overrides):
    payload = {
        "book_id": household["book"].id,
        "lender_id": household["alice"].id,
        "borrower_id": household["bob"].id,
    }
    payload.update(overrides)
    return client.post("/api/book-lendings", json=payload)


class TestUsers:
    def test_list_users_hides_passwords(self, client: TestClient, mem_household):
        response = client.get("/api/users")

        assert response.status_code == 200
        users = response.json()
        assert [u["username"] for u in users] == ["alice", "bob"]
        assert all("password" not in u for u in users)

    def test_get_user_not_found(self, client: TestClient):
        response = client.get("/api/users/42")

        assert response.status_code == 404

    def test_user_families(self, client: TestClient, mem_household):
        response = client.get(f"/api/users/{mem_household['alice'].id}/families")

        assert [f["name"] for f in response.json()] == ["Test Family"]

    def test_set_online(self, client: TestClient, mem_household):
        response = client.patch(
            f"/api/users/{mem_household['bob'].id}/online", json={"is_online": True}
        )

        assert response.status_code == 200
        assert response.json()["is_online"] is True


class TestFamilies:
    def test_create_family_with_creator(self, client: TestClient, mem_household):
        response = client.post(
            "/api/families",
            params={"creator_id": mem_household["bob"].id},
            json={"name": "Book Club"},
        )

        assert response.status_code == 201
        family_id = response.json()["id"]
        members = client.get(f"/api/families/{family_id}/users").json()
        assert [m["username"] for m in members] == ["bob"]

    def test_add_member(self, client: TestClient, mem_household):
        family = client.post("/api/families", json={"name": "Cousins"}).json()

        response = client.post(
            "/api/user-families",
            json={"user_id": mem_household["alice"].id, "family_id": family["id"]},
        )

        assert response.status_code == 201
        assert response.json()["family_id"] == family["id"]

    def test_duplicate_member(self, client: TestClient, mem_household):
        response = client.post(
            "/api/user-families",
            json={"user_id": mem_household["alice"].id, "family_id": mem_household["family"].id},
        )

        assert response.status_code == 409

    def test_remove_member(self, client: TestClient, mem_household):
        family_id = mem_household["family"].id
        bob_id = mem_household["bob"].id

        response = client.delete(f"/api/families/{family_id}/users/{bob_id}")

        assert response.status_code == 204
        assert client.delete(f"/api/families/{family_id}/users/{bob_id}").status_code == 404

    def test_family_not_found(self, client: TestClient):
        assert client.get("/api/families/7").status_code == 404


class TestLendings:
    def test_lend_and_return(self, client: TestClient, mem_household):
        """Should keep the book status in step with the lending."""
        book_id = mem_household["book"].id

        created = lend(client, mem_household)
        assert created.status_code == 201
        lending = created.json()
        assert lending["status"] == "borrowed"
        assert lending["due_date"] is not None
        assert client.get(f"/api/books/{book_id}").json()["status"] == "borrowed"

        returned = client.patch(f"/api/book-lendings/{lending['id']}/return")
        assert returned.status_code == 200
        assert returned.json()["status"] == "returned"
        assert returned.json()["return_date"] >= returned.json()["lend_date"]
        assert client.get(f"/api/books/{book_id}").json()["status"] == "available"

    def test_second_return_conflicts(self, client: TestClient, mem_household):
        lending = lend(client, mem_household).json()
        client.patch(f"/api/book-lendings/{lending['id']}/return")

        response = client.patch(f"/api/book-lendings/{lending['id']}/return")

        assert response.status_code == 409

    def test_cannot_lend_borrowed_book(self, client: TestClient, mem_household):
        lend(client, mem_household)

        response = lend(client, mem_household)

        assert response.status_code == 409

    def test_lent_book_cannot_be_patched_available(self, client: TestClient, mem_household):
        """Should keep a lent book from being lent a second time."""
        book_id = mem_household["book"].id
        lend(client, mem_household)

        patched = client.patch(f"/api/books/{book_id}", json={"status": "available"})
        second = lend(client, mem_household)

        assert patched.status_code == 409
        assert client.get(f"/api/books/{book_id}").json()["status"] == "borrowed"
        assert second.status_code == 409
        assert len(client.get("/api/book-lendings", params={"book_id": book_id}).json()) == 1

    def test_lender_and_borrower_must_differ(self, client: TestClient, mem_household):
        response = lend(client, mem_household, borrower_id=mem_household["alice"].id)

        assert response.status_code == 422
        assert response.json()["errors"][0]["reason"] == "invalid"

    def test_filters(self, client: TestClient, mem_household):
        lending = lend(client, mem_household).json()

        by_borrower = client.get(f"/api/book-lendings?borrower_id={mem_household['bob'].id}")
        by_lender = client.get(f"/api/book-lendings?lender_id={mem_household['bob'].id}")

        assert [x["id"] for x in by_borrower.json()] == [lending["id"]]
        assert by_lender.json() == []

    def test_return_unknown_lending(self, client: TestClient):
        assert client.patch("/api/book-lendings/5/return").status_code == 404


class TestReadingHistory:
    def test_start_and_complete(self, client: TestClient, mem_household):
        book_id = mem_household["book"].id
        started = client.post(
            "/api/reading-history",
            json={"user_id": mem_household["alice"].id, "book_id": book_id},
        )
        assert started.status_code == 201
        history = started.json()
        assert history["end_date"] is None
        assert client.get(f"/api/books/{book_id}").json()["status"] == "reading"

        completed = client.patch(
            f"/api/reading-history/{history['id']}/complete", json={"rating": 5}
        )

        assert completed.status_code == 200
        assert completed.json()["rating"] == 5
        assert completed.json()["end_date"] is not None
        assert client.get(f"/api/books/{book_id}").json()["status"] == "available"

    def test_complete_without_body(self, client: TestClient, mem_household):
        history = client.post(
            "/api/reading-history",
            json={"user_id": mem_household["bob"].id, "book_id": mem_household["book"].id},
        ).json()

        response = client.patch(f"/api/reading-history/{history['id']}/complete")

        assert response.status_code == 200
        assert response.json()["end_date"] is not None

    def test_rating_out_of_range(self, client: TestClient, mem_household):
        response = client.post(
            "/api/reading-history",
            json={"user_id": 1, "book_id": mem_household["book"].id, "rating": 9},
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "rating"


class TestActivities:
    def test_feed_is_newest_first(self, client: TestClient, mem_household):
        lending = lend(client, mem_household).json()
        client.patch(f"/api/book-lendings/{lending['id']}/return")

        feed = client.get("/api/activities").json()

        assert [a["activity_type"] for a in feed] == ["return", "borrow"]
        assert feed[0]["user_id"] == mem_household["bob"].id
        assert feed[0]["related_user_id"] == mem_household["alice"].id

    def test_limit(self, client: TestClient, mem_household):
        lending = lend(client, mem_household).json()
        client.patch(f"/api/book-lendings/{lending['id']}/return")

        assert len(client.get("/api/activities?limit=1").json()) == 1
        assert len(client.get("/api/activities?limit=0").json()) == 2

    def test_post_rate_activity(self, client: TestClient, mem_household):
        response = client.post(
            "/api/activities",
            json={
                "user_id": mem_household["alice"].id,
                "activity_type": "rate",
                "book_id": mem_household["book"].id,
                "data": {"rating": 4},
            },
        )

        assert response.status_code == 201
        assert response.json()["data"] == {"rating": 4}

    def test_post_rate_activity_without_rating(self, client: TestClient, mem_household):
        response = client.post(
            "/api/activities",
            json={
                "user_id": mem_household["alice"].id,
                "activity_type": "rate",
                "book_id": mem_household["book"].id,
            },
        )

        assert response.status_code == 422

    def test_family_feed(self, client: TestClient, mem_household):
        lend(client, mem_household)

        feed = client.get(f"/api/activities?family_id={mem_household['family'].id}").json()

        assert len(feed) == 1
        assert client.get("/api/activities?family_id=99").json() == []


class TestSampleData:
    def test_init_sample_data(self, client: TestClient):
        response = client.post("/api/init-sample-data")

        assert response.status_code == 200
        assert len(client.get("/api/books").json()) == 9

        login = client.post(
            "/api/auth/login", data={"username": "xiaoming", "password": "password"}
        )
        assert login.status_code == 200

    def test_init_twice_conflicts(self, client: TestClient):
        client.post("/api/init-sample-data")

        assert client.post("/api/init-sample-data").status_code == 409


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.json() == {"status": "ready", "checks": {"storage": "connected"}}

    def test_request_id_header(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
