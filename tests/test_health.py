# =============================================================================
# tests/test_health.py - Health & Configuration Check Tests
# =============================================================================

from app.config import Settings


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "development"
        assert body["version"] == "1.0.0"

    def test_root(self, client):
        body = client.get("/").json()

        assert body["docs"] == "/docs"
        assert body["health"] == "/api/v1/health"


class TestEnvCheck:

    def test_everything_present(self, client):
        body = client.get("/api/v1/env-check").json()

        assert body["ok"] is True
        assert body["missing"] == []
        assert "STRIPE_PRICE_GOLD" in body["present"]

    def test_reports_missing_names_only(self, client, use_settings):
        # Arrange
        use_settings(Settings(_env_file=None, STRIPE_WEBHOOK_SECRET=None, STRIPE_PRICE_BRONZE=None))

        # Act
        body = client.get("/api/v1/env-check").json()

        # Assert
        assert body["ok"] is False
        assert sorted(body["missing"]) == ["STRIPE_PRICE_BRONZE", "STRIPE_WEBHOOK_SECRET"]
        assert "sk_test_123" not in str(body)

    def test_context_is_included(self, client, use_settings):
        use_settings(Settings(_env_file=None, CONTEXT="deploy-preview"))

        body = client.get("/api/v1/env-check").json()

        assert body["context"]["CONTEXT"] == "deploy-preview"


class TestCheckoutHealth:

    def test_ready(self, client):
        body = client.get("/api/v1/checkout-health").json()

        assert body["has_secret"] is True
        assert body["has_price_founding_member"] is True
        assert body["has_webhook"] is True

    def test_missing_secret(self, client, use_settings):
        use_settings(Settings(_env_file=None, STRIPE_SECRET_KEY=None))

        body = client.get("/api/v1/checkout-health").json()

        assert body["has_secret"] is False


class TestReadiness:

    def test_ready(self, client, mock_db, monkeypatch):
        monkeypatch.setattr("app.routers.health.get_supabase_client", lambda settings: mock_db)

        body = client.get("/api/v1/health/ready").json()

        assert body["status"] == "ready"
        assert body["checks"] == {"database": "healthy", "stripe": "configured"}
        mock_db.ping.assert_called_once()

    def test_database_down(self, client, mock_db, monkeypatch):
        mock_db.ping.side_effect = Exception("connection refused")
        monkeypatch.setattr("app.routers.health.get_supabase_client", lambda settings: mock_db)

        body = client.get("/api/v1/health/ready").json()

        assert body["status"] == "degraded"
        assert body["checks"]["database"] == "unhealthy: connection refused"

    def test_not_configured(self, client, use_settings):
        use_settings(Settings(_env_file=None, SUPABASE_SERVICE_ROLE_KEY=None, STRIPE_SECRET_KEY=None))

        body = client.get("/api/v1/health/ready").json()

        assert body["status"] == "degraded"
        assert body["checks"] == {"database": "not configured", "stripe": "not configured"}
