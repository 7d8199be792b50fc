"""Integration tests for the notification endpoints."""

import pytest

from models.config import settings
from models.notification_types import NotificationType
from services.notification_service import NotificationService

API = "/api/v1/notifications"


@pytest.fixture
def inbox(db_session, test_user, other_user):
    """Three notifications for test_user, one for other_user."""
    mine = [
        NotificationService.create(
            db_session,
            recipient_id=test_user.id,
            sender_id=other_user.id,
            type=NotificationType.VOTE,
            title="New Vote",
            message=f"Vote {i}",
        )
        for i in range(3)
    ]
    theirs = NotificationService.create(
        db_session,
        recipient_id=other_user.id,
        type=NotificationType.SYSTEM,
        title="Welcome",
        message="Welcome aboard",
    )
    return [n.id for n in mine], theirs.id


def test_list_notifications(client, inbox, auth_headers):
    response = client.get(API, params={"limit": 2}, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert [n["message"] for n in data["notifications"]] == ["Vote 2", "Vote 1"]
    assert data["notifications"][0]["sender"]["username"] == "otheruser"
    assert data["pagination"] == {"limit": 2, "skip": 0, "unread_count": 3}


def test_list_oldest_first_with_skip(client, inbox, auth_headers):
    response = client.get(
        API, params={"sort": "oldest", "skip": 1}, headers=auth_headers
    )

    messages = [n["message"] for n in response.json()["data"]["notifications"]]
    assert messages == ["Vote 1", "Vote 2"]


def test_list_rejects_oversized_limit(client, auth_headers):
    assert client.get(API, params={"limit": 500}, headers=auth_headers).status_code == 400


def test_list_requires_auth(client):
    response = client.get(API)

    assert response.status_code == 401
    assert response.json()["error"] == "missing_token"


def test_unread_count(client, inbox, auth_headers):
    response = client.get(f"{API}/unread/count", headers=auth_headers)
    assert response.json()["data"] == {"count": 3}


@pytest.mark.parametrize("method", ["patch", "put"])
def test_mark_one_read(client, inbox, auth_headers, method):
    mine, _ = inbox

    response = getattr(client, method)(f"{API}/{mine[0]}/read", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["notification"]["read"] is True
    assert client.get(f"{API}/unread/count", headers=auth_headers).json()["data"] == {
        "count": 2
    }


def test_mark_someone_elses_notification(client, inbox, auth_headers):
    _, theirs = inbox

    response = client.patch(f"{API}/{theirs}/read", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Notification not found or does not belong to user"


@pytest.mark.parametrize("method", ["patch", "put"])
def test_mark_all_read(client, inbox, auth_headers, other_auth_headers, method):
    response = getattr(client, method)(f"{API}/read/all", headers=auth_headers)

    assert response.json()["data"] == {"success": True, "count": 3}
    # Other users' notifications are untouched
    other = client.get(f"{API}/unread/count", headers=other_auth_headers)
    assert other.json()["data"] == {"count": 1}


def test_delete_notification(client, inbox, auth_headers):
    mine, theirs = inbox

    deleted = client.delete(f"{API}/{mine[0]}", headers=auth_headers)
    forbidden = client.delete(f"{API}/{theirs}", headers=auth_headers)

    assert deleted.json() == {"success": True, "data": {"success": True}}
    assert forbidden.status_code == 404
    assert client.get(f"{API}/unread/count", headers=auth_headers).json()["data"] == {
        "count": 2
    }


def test_create_test_notification(client, test_user, auth_headers):
    response = client.post(f"{API}/test", json={"type": "vote"}, headers=auth_headers)

    assert response.status_code == 201
    notification = response.json()["data"]
    assert notification["type"] == "vote"
    assert notification["recipient_id"] == test_user.id
    assert notification["read"] is False


def test_unknown_test_type_is_system(client, auth_headers):
    response = client.post(f"{API}/test", json={"type": "party"}, headers=auth_headers)
    assert response.json()["data"]["type"] == "system"


def test_test_notifications_can_be_disabled(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_TEST_NOTIFICATIONS", False)

    response = client.post(f"{API}/test", json={"type": "vote"}, headers=auth_headers)

    assert response.status_code == 404
