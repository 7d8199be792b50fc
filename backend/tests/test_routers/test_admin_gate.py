"""Tests for the admin-only dependency and the 403 mapping."""

import pytest
from fastapi import APIRouter, Depends

import authentication.auth as auth
import repositories.db_models as db_models

ADMIN_PATH = "/api/v1/admin-check"


@pytest.fixture
def admin_route(client):
    """Mount an admin-only route for the duration of a test."""
    from main import app

    router = APIRouter()

    @router.get(ADMIN_PATH)
    def admin_check(admin: db_models.User = Depends(auth.get_admin_user)):
        return {"username": admin.username}

    before = list(app.router.routes)
    app.include_router(router)
    yield ADMIN_PATH
    app.router.routes[:] = before


def test_admin_is_allowed(client, admin_route, admin_auth_headers):
    response = client.get(admin_route, headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json() == {"username": "adminuser"}


def test_regular_user_is_forbidden(client, admin_route, auth_headers):
    response = client.get(admin_route, headers=auth_headers)

    assert response.status_code == 403
    body = response.json()
    assert body["detail"] == "Access denied. Admin only."
    assert body["correlation_id"]
    assert "error" not in body


def test_anonymous_is_unauthorized(client, admin_route):
    response = client.get(admin_route)

    assert response.status_code == 401
    assert response.json()["error"] == "missing_token"
