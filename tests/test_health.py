from fence_quote import __version__


def test_health_reports_configured_email(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "fence-quote"
    assert body["version"] == __version__
    assert body["checks"]["email"] == {"status": "configured", "provider": "sendgrid"}
    assert "SG.test-key" not in response.text


def test_health_degraded_without_email(client, app_settings):
    app_settings.sendgrid_api_key = ""
    body = client.get("/api/health").json()
    assert body["status"] == "degraded"
    assert body["checks"]["email"] == {"status": "unconfigured"}

    app_settings.sendgrid_api_key = "SG.test-key"
    app_settings.from_email = "nobody"
    assert client.get("/api/health").json()["checks"]["email"] == {"status": "misconfigured"}


def test_root(client):
    body = client.get("/").json()
    assert body["name"] == "Fence Quote API"
    assert body["lead"] == "/api/lead"
