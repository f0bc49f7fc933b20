import re
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from linkhub_app.models import Click, Link
from tests.conftest import assert_error_shape

_SHORT_NAME_RE = re.compile(r"^[A-Za-z0-9_-]{8}$")


def _create(client: TestClient, **body):
    body.setdefault("originalUrl", "https://example.com")
    return client.post("/api/links", json=body)


class TestCreateLink:
    """Test POST /api/links"""

    def test_create_short_link(self, client: TestClient):
        response = _create(client)
        assert response.status_code == 201

        body = response.json()
        assert body["success"] is True

        data = body["data"]
        assert _SHORT_NAME_RE.fullmatch(data["shortName"])
        assert data["originalUrl"] == "https://example.com"
        assert data["clickCount"] == 0
        assert data["customName"] is None
        assert data["shortUrl"].endswith("/" + data["shortName"])

    def test_create_with_custom_name(self, client: TestClient):
        response = _create(client, customName="  my-brand  ")
        assert response.status_code == 201

        data = response.json()["data"]
        assert data["shortName"] == "my-brand"
        assert data["customName"] == "my-brand"

    def test_blank_custom_name_generates_one(self, client: TestClient):
        response = _create(client, customName="   ")
        assert response.status_code == 201
        assert _SHORT_NAME_RE.fullmatch(response.json()["data"]["shortName"])

    def test_custom_name_conflict(self, client: TestClient):
        assert _create(client, customName="taken_alias").status_code == 201

        second = _create(client, originalUrl="https://example.com/2", customName="taken_alias")
        assert second.status_code == 409
        error = assert_error_shape(second, "CONFLICT")
        assert error["message"] == "This name is already taken"

    def test_reserved_custom_name(self, client: TestClient):
        response = _create(client, customName="Admin")
        assert response.status_code == 409
        error = assert_error_shape(response, "CONFLICT")
        assert "reserved" in error["message"]

    def test_custom_name_with_bad_characters(self, client: TestClient):
        response = _create(client, customName="no spaces")
        assert response.status_code == 409
        assert_error_shape(response, "CONFLICT")

    def test_custom_name_too_short_is_validation_error(self, client: TestClient):
        response = _create(client, customName="ab")
        assert response.status_code == 400
        error = assert_error_shape(response, "BAD_REQUEST")
        assert error["details"][0]["field"] == "customName"

    def test_invalid_url(self, client: TestClient):
        for bad in ("not-a-valid-url", "ftp://example.com", "javascript:alert(1)"):
            response = _create(client, originalUrl=bad)
            assert response.status_code == 400
            error = assert_error_shape(response, "BAD_REQUEST")
            assert error["details"][0]["field"] == "originalUrl"

    def test_missing_url(self, client: TestClient):
        response = client.post("/api/links", json={})
        assert response.status_code == 400

    def test_non_positive_expiry_rejected(self, client: TestClient):
        response = _create(client, expiresInSeconds=0)
        assert response.status_code == 400

    def test_expiry_is_stored(self, client: TestClient):
        response = _create(client, expiresInSeconds=3600)
        assert response.status_code == 201
        assert response.json()["data"]["expiresAt"] is not None

    def test_name_held_by_hub_is_taken(self, client: TestClient):
        hub = client.post("/api/hubs", json={
            "title": "Hub",
            "links": [{"title": "A", "url": "https://a.example.com", "order": 0}],
            "customName": "shared-name",
        })
        assert hub.status_code == 201

        response = _create(client, customName="shared-name")
        assert response.status_code == 409


class TestCheckAvailability:

    def test_available(self, client: TestClient):
        response = client.post("/api/links/check-availability", json={"customName": " free-one "})
        assert response.status_code == 200

        data = response.json()["data"]
        assert data == {"customName": "free-one", "available": True, "reason": None}

    def test_taken(self, client: TestClient):
        _create(client, customName="occupied")

        data = client.post("/api/links/check-availability", json={"customName": "occupied"}).json()["data"]
        assert data["available"] is False
        assert data["reason"] == "This name is already taken"

    def test_reserved(self, client: TestClient):
        data = client.post("/api/links/check-availability", json={"customName": "LOGIN"}).json()["data"]
        assert data["available"] is False

    def test_empty_body_is_validation_error(self, client: TestClient):
        response = client.post("/api/links/check-availability", json={"customName": ""})
        assert response.status_code == 400


class TestRedirect:
    """Test GET /{shortName}"""

    def test_redirect_and_count(self, client: TestClient):
        short_name = _create(client).json()["data"]["shortName"]

        response = client.get(f"/{short_name}", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com"

        info = client.get(f"/api/links/{short_name}").json()["data"]
        assert info["clickCount"] == 1

    def test_click_event_recorded(self, client: TestClient, db_session):
        short_name = _create(client).json()["data"]["shortName"]

        client.get(
            f"/{short_name}",
            follow_redirects=False,
            headers={"User-Agent": "pytest-agent", "Referer": "https://ref.example.com"},
        )

        click = db_session.query(Click).one()
        assert click.user_agent == "pytest-agent"
        assert click.referrer == "https://ref.example.com"

    def test_forwarded_ip_is_recorded(self, client: TestClient, db_session):
        short_name = _create(client).json()["data"]["shortName"]

        client.get(f"/{short_name}", follow_redirects=False, headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})

        assert db_session.query(Click).one().user_ip == "203.0.113.9"

    def test_redirect_nonexistent(self, client: TestClient):
        response = client.get("/nonexistent", follow_redirects=False)
        assert response.status_code == 404
        assert_error_shape(response, "NOT_FOUND")

    def test_expired_link_is_gone_and_not_counted(self, client: TestClient, db_session):
        short_name = _create(client, expiresInSeconds=60).json()["data"]["shortName"]
        db_session.query(Link).filter(Link.short_name == short_name).update(
            {"expires_at": datetime.now(timezone.utc) - timedelta(seconds=1)}
        )
        db_session.commit()

        response = client.get(f"/{short_name}", follow_redirects=False)
        assert response.status_code == 410
        assert_error_shape(response, "GONE")

        assert db_session.query(Click).count() == 0
        assert client.get(f"/api/links/{short_name}").json()["data"]["clickCount"] == 0

    def test_click_failure_does_not_block_redirect(self, client: TestClient, monkeypatch):
        from linkhub_app.storage.strategies import SQLAlchemyStorage

        def broken(self, *args, **kwargs):
            raise RuntimeError("analytics down")

        short_name = _create(client).json()["data"]["shortName"]
        monkeypatch.setattr(SQLAlchemyStorage, "create_click", broken)

        response = client.get(f"/{short_name}", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com"

    def test_deactivated_link(self, client: TestClient):
        short_name = _create(client).json()["data"]["shortName"]

        assert client.delete(f"/api/links/{short_name}").status_code == 204
        assert client.get(f"/{short_name}", follow_redirects=False).status_code == 404
        assert client.delete(f"/api/links/{short_name}").status_code == 404


class TestLinkStats:

    def test_stats_windows(self, client: TestClient, db_session):
        short_name = _create(client).json()["data"]["shortName"]
        client.get(f"/{short_name}", follow_redirects=False)

        link = db_session.query(Link).filter(Link.short_name == short_name).one()
        db_session.add(Click(link_id=link.id, clicked_at=datetime.now(timezone.utc) - timedelta(days=40)))
        db_session.commit()

        response = client.get(f"/api/links/{short_name}/stats")
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["shortName"] == short_name
        assert data["originalUrl"] == "https://example.com"

        stats = data["stats"]
        assert stats["totalClicks"] == 2
        assert stats["clicksToday"] == 1
        assert stats["clicksThisWeek"] == 1
        assert stats["clicksThisMonth"] == 1
        assert len(stats["recentClicks"]) == 2

    def test_recent_clicks_capped_and_newest_first(self, client: TestClient, storage):
        short_name = _create(client).json()["data"]["shortName"]
        link = storage.get_active_link(short_name)
        for i in range(12):
            storage.create_click(link_id=link.id, user_agent=f"agent-{i}")

        stats = client.get(f"/api/links/{short_name}/stats").json()["data"]["stats"]

        recent = stats["recentClicks"]
        assert stats["totalClicks"] == 12
        assert len(recent) == 10
        assert recent[0]["userAgent"] == "agent-11"
        timestamps = [click["clickedAt"] for click in recent]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_stats_not_found(self, client: TestClient):
        response = client.get("/api/links/missing1/stats")
        assert response.status_code == 404
        assert_error_shape(response, "NOT_FOUND")


class TestListLinks:

    def test_newest_first(self, client: TestClient):
        first = _create(client, customName="first-link").json()["data"]["shortName"]
        second = _create(client, customName="second-link").json()["data"]["shortName"]

        names = [link["shortName"] for link in client.get("/api/links").json()["data"]]
        assert names == [second, first]

    def test_limit_is_capped_at_100(self, client: TestClient, storage):
        for i in range(105):
            storage.create_link(short_name=f"bulk-{i:03d}", original_url="https://example.com")

        response = client.get("/api/links", params={"limit": 500})
        assert response.status_code == 200
        assert len(response.json()["data"]) == 100

    def test_offset(self, client: TestClient, storage):
        for i in range(5):
            storage.create_link(short_name=f"page-{i}", original_url="https://example.com")

        data = client.get("/api/links", params={"limit": 2, "offset": 4}).json()["data"]
        assert len(data) == 1

    def test_inactive_links_hidden(self, client: TestClient):
        short_name = _create(client).json()["data"]["shortName"]
        client.delete(f"/api/links/{short_name}")

        assert client.get("/api/links").json()["data"] == []

    def test_negative_offset_rejected(self, client: TestClient):
        assert client.get("/api/links", params={"offset": -1}).status_code == 400

    def test_zero_limit_uses_default(self, client: TestClient, storage):
        for i in range(55):
            storage.create_link(short_name=f"zero-{i:02d}", original_url="https://example.com")

        response = client.get("/api/links", params={"limit": 0})
        assert response.status_code == 200
        assert len(response.json()["data"]) == 50

    def test_negative_limit_rejected(self, client: TestClient):
        assert client.get("/api/links", params={"limit": -1}).status_code == 400
