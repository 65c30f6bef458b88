"""
Tests for the model listing and health endpoints.
"""

import pytest


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_models(client, auth_headers):
    response = client.get("/v1/models", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["object"] == "list"
    assert {model["id"]: model["name"] for model in data["data"]} == {
        "claude-opus-4-1-20250805": "Claude Opus 4.1",
        "claude-3-5-haiku-20241022": "Claude 3.5 Haiku",
    }
    for model in data["data"]:
        assert model["object"] == "model"
        assert model["owned_by"] == "talkai"
        assert isinstance(model["created"], int)


@pytest.mark.parametrize("headers, message", [
    ({}, "Missing authorization header"),
    ({"Authorization": "Bearer nope"}, "Invalid API key"),
])
def test_list_models_requires_key(client, app, headers, message):
    response = client.get("/v1/models", headers=headers)

    assert response.status_code == 401
    assert response.json() == {"error": message}
    assert app.state.statistics.get_statistics()["total_requests"] == 0


def test_response_carries_request_id(client):
    response = client.get("/health")
    assert len(response.headers["X-Request-ID"]) == 16
    assert float(response.headers["X-Process-Time"]) >= 0


def test_unknown_route_uses_error_body(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
