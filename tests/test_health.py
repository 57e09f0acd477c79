"""
Tests for GET /api/health
"""

from datetime import datetime


def test_health_reports_runtime_metadata(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Server is running"
    assert body["port"] == 5050
    assert body["environment"] == "test"
    assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None


def test_health_is_independent_of_mail_provider(client, mailer):
    mailer.fail_for = {"admin@altura.example.com"}

    assert client.get("/api/health").status_code == 200
    assert mailer.sent == []


def test_health_is_not_rate_limited(client):
    for _ in range(10):
        assert client.get("/api/health").status_code == 200
