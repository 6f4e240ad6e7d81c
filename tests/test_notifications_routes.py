"""Route tests for the user's notification inbox."""

import pytest
from fastapi.testclient import TestClient

from hoot.adapters.store.in_memory import InMemoryDataStore

from conftest import OTHER_ID, USER_HEADERS, USER_ID


@pytest.fixture
def inbox(store: InMemoryDataStore) -> InMemoryDataStore:
    store.rows("notifications").extend(
        [
            {"id": "n1", "title": "Welcome", "message": "Hello", "type": "welcome", "created_at": "2024-01-01"},
            {"id": "n2", "title": "Update", "message": "New regions", "type": "announcement", "created_at": "2024-02-01"},
        ]
    )
    store.rows("user_notifications").extend(
        [
            {"id": "un1", "user_id": USER_ID, "notification_id": "n1", "is_read": True, "created_at": "2024-01-01"},
            {"id": "un2", "user_id": USER_ID, "notification_id": "n2", "is_read": False, "created_at": "2024-02-01"},
            {"id": "un3", "user_id": OTHER_ID, "notification_id": "n2", "is_read": False, "created_at": "2024-02-01"},
        ]
    )
    return store


def test_list_joins_notifications_newest_first(client: TestClient, inbox: InMemoryDataStore):
    response = client.get("/api/notifications", headers=USER_HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["unread_count"] == 1
    assert [item["id"] for item in body["notifications"]] == ["un2", "un1"]
    assert body["notifications"][0]["notification"]["title"] == "Update"


def test_unread_count(client: TestClient, inbox: InMemoryDataStore):
    assert client.get("/api/notifications/unread-count", headers=USER_HEADERS).json() == {"unread_count": 1}


def test_mark_selected_read(client: TestClient, inbox: InMemoryDataStore):
    response = client.patch("/api/notifications", headers=USER_HEADERS, json={"notification_ids": ["un2", "un3"]})

    assert response.status_code == 200
    by_id = {r["id"]: r for r in inbox.rows("user_notifications")}
    assert by_id["un2"]["is_read"] is True
    assert by_id["un2"]["read_at"]
    # Another user's entry is never touched
    assert by_id["un3"]["is_read"] is False


def test_mark_all_read(client: TestClient, inbox: InMemoryDataStore):
    response = client.patch("/api/notifications", headers=USER_HEADERS, json={"mark_all": True})

    assert response.json()["message"] == "All notifications marked as read"
    assert client.get("/api/notifications/unread-count", headers=USER_HEADERS).json() == {"unread_count": 0}


def test_mark_requires_ids(client: TestClient, inbox: InMemoryDataStore):
    response = client.patch("/api/notifications", headers=USER_HEADERS, json={})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "notification_ids array is required"


def test_requires_session(client: TestClient):
    assert client.get("/api/notifications").status_code == 401
