"""Integration tests for the day endpoints.

- ``GET /today`` — today's image, generated on first call.
- ``GET|POST /finished`` and ``GET|POST /instagram`` — engagement counters.
- ``POST /api/add_days`` — admin seeding of upcoming days.
"""

from datetime import timedelta

from conftest import TODAY, TOMORROW, auth_headers, make_day
from apps.days.models import Day, Theme


class TestToday:
    """Test GET /today."""

    def test_no_day_returns_404(self, client):
        resp = client.get("/today")
        assert resp.status_code == 404
        assert resp.json()["error"] == "No day found for today : 20/03/2024"

    def test_returns_generated_image(self, client, db, generator):
        make_day(db, TODAY, votes=(0, 3, 1))

        resp = client.get("/today")

        assert resp.status_code == 200
        data = resp.json()
        assert data["day_date"] == "2024-03-20"
        assert data["image_url"] == "/images/image_20-03-2024.png"
        assert generator.prompts == ["Theme 1"]

    def test_second_call_reuses_image(self, client, db, generator):
        day = make_day(db, TODAY, votes=(1, 1, 0))

        first = client.get("/today").json()
        second = client.get("/today").json()

        assert first == second
        assert len(generator.prompts) == 1
        db.refresh(day)
        assert day.nb_view == 2

    def test_existing_image_is_served(self, client, db, generator):
        make_day(db, TODAY, image_url="/images/image_20-03-2024.png")

        resp = client.get("/today")

        assert resp.status_code == 200
        assert resp.json()["image_url"] == "/images/image_20-03-2024.png"
        assert generator.prompts == []

    def test_upstream_failure_is_500_and_retryable(self, client, db, generator):
        day = make_day(db, TODAY)
        generator.fail = True

        resp = client.get("/today")

        assert resp.status_code == 500
        assert resp.json()["category"] == "server_error"
        assert "Error ID" in resp.json()["error"]
        db.refresh(day)
        assert day.image_url is None

        generator.fail = False
        assert client.get("/today").status_code == 200

    def test_generation_in_progress_is_409(self, client, db, clock, generator):
        make_day(db, TODAY, generation_started_at=clock.now())

        resp = client.get("/today")

        assert resp.status_code == 409
        assert generator.prompts == []


class TestCounters:
    """Test /finished and /instagram."""

    def test_finished_after_today(self, client, db):
        make_day(db, TODAY)
        assert client.get("/today").status_code == 200

        resp = client.post("/finished")

        assert resp.status_code == 200
        assert resp.json() == {"nbFinish": 1}

    def test_finished_accepts_get(self, client, db):
        make_day(db, TODAY)
        client.get("/finished")
        assert client.get("/finished").json() == {"nbFinish": 2}

    def test_instagram(self, client, db):
        make_day(db, TODAY)
        assert client.post("/instagram").json() == {"nbPostInstagram": 1}
        assert client.get("/instagram").json() == {"nbPostInstagram": 2}

    def test_counters_without_day_are_404(self, client):
        assert client.post("/finished").status_code == 404
        assert client.post("/instagram").status_code == 404


class TestAddDays:
    """Test POST /api/add_days."""

    def _payload(self, count):
        return {"themes": [{"theme": f"Theme {i}"} for i in range(count)]}

    def test_requires_authentication(self, client, db):
        resp = client.post("/api/add_days", json=self._payload(3))
        assert resp.status_code == 401
        assert db.query(Day).count() == 0

    def test_requires_admin(self, client, db, user):
        resp = client.post("/api/add_days", json=self._payload(3), headers=auth_headers(user))
        assert resp.status_code == 403
        assert resp.json()["error"] == "Only admin can access this endpoint"
        assert db.query(Day).count() == 0

    def test_six_themes_create_two_days(self, client, db, admin):
        resp = client.post("/api/add_days", json=self._payload(6), headers=auth_headers(admin))

        assert resp.status_code == 200
        assert resp.json() == {"message": "Days added successfully"}
        days = db.query(Day).order_by(Day.day_date).all()
        assert [day.day_date for day in days] == [TOMORROW, TOMORROW + timedelta(days=1)]
        for day in days:
            themes = db.query(Theme).filter(Theme.day_id == day.id).all()
            assert len(themes) == 3
            assert {theme.nb_vote for theme in themes} == {0}

    def test_remainder_is_dropped(self, client, db, admin):
        client.post("/api/add_days", json=self._payload(8), headers=auth_headers(admin))
        assert db.query(Theme).count() == 6

    def test_empty_list_is_400(self, client, db, admin):
        resp = client.post("/api/add_days", json={"themes": []}, headers=auth_headers(admin))
        assert resp.status_code == 400
        assert resp.json()["error"] == "No themes provided"
        assert db.query(Day).count() == 0

    def test_missing_themes_is_400(self, client, db, admin):
        resp = client.post("/api/add_days", json={}, headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_malformed_theme_is_400(self, client, db, admin):
        resp = client.post("/api/add_days", json={"themes": [{"title": "x"}]}, headers=auth_headers(admin))
        assert resp.status_code == 400
        assert "error" in resp.json()


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["database"] == "connected"

    def test_security_headers(self, client):
        resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"

    def test_cors_preflight_from_local_frontend(self, client):
        resp = client.options(
            "/today",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "Authorization",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_cors_preflight_rejects_unlisted_method(self, client):
        resp = client.options(
            "/today",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "PUT"},
        )
        assert resp.status_code == 400
