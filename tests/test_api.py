"""Tests for the HTTP API."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from fixie_assistant.errors import ThreadCreationFailed
from fixie_assistant.main import app
from fixie_assistant.schemas import ConversationHandle, Message

HEADERS = {"X-API-Key": "test-token"}


@pytest.fixture
def manager():
    manager = MagicMock()
    manager.start_conversation = AsyncMock(return_value=ConversationHandle(
        assistant_id="asst_1", thread_id="thread_1", run_id="run_1",
    ))
    manager.get_status = AsyncMock(return_value={"thread_id": "thread_1", "status": "completed", "detail": None})
    manager.get_messages = AsyncMock(return_value=[
        Message(role="user", content="What does Fixie.ai do?"),
        Message(role="assistant", content="Fixie.ai helps developers build conversational AI apps."),
    ])
    manager.cancel_conversation = AsyncMock(return_value={"thread_id": "thread_1", "status": "cancelled"})
    return manager


@pytest.fixture
def client(manager):
    # без контекстного менеджера startup не выполняется
    app.state.conversation_manager = manager
    with patch("fixie_assistant.config.API_TOKEN", "test-token"):
        yield TestClient(app)


def test_root_is_public(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "Fixie Assistant API"


@pytest.mark.parametrize("headers", [{}, {"X-API-Key": "wrong"}])
def test_api_requires_valid_key(client, manager, headers):
    response = client.post("/api/conversations", json={"message": "Hi"}, headers=headers)

    assert response.status_code == 403
    manager.start_conversation.assert_not_called()


def test_start_conversation(client, manager):
    response = client.post("/api/conversations", json={"message": "What does Fixie.ai do?"}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"thread_id": "thread_1", "run_id": "run_1", "status": "in_progress"}
    manager.start_conversation.assert_awaited_once_with("What does Fixie.ai do?")


def test_start_failure_is_bad_gateway(client, manager):
    manager.start_conversation.side_effect = ThreadCreationFailed("Failed to create thread: 500")

    response = client.post("/api/conversations", json={"message": "Hi"}, headers=HEADERS)

    assert response.status_code == 502
    assert "Failed to create thread" in response.json()["detail"]


def test_conversation_status(client):
    response = client.get("/api/conversations/thread_1", headers=HEADERS)

    assert response.json() == {"status": "completed", "detail": None}


def test_conversation_messages(client):
    response = client.get("/api/conversations/thread_1/messages", headers=HEADERS)

    assert [m["role"] for m in response.json()["messages"]] == ["user", "assistant"]


def test_cancel_conversation(client, manager):
    response = client.post("/api/conversations/thread_1/cancel", headers=HEADERS)

    assert response.json() == {"status": "cancelled", "detail": None}
    manager.cancel_conversation.assert_awaited_once_with("thread_1")


def test_cancel_finished_conversation_reports_its_status(client, manager):
    manager.cancel_conversation.return_value = {"thread_id": "thread_1", "status": "failed", "detail": "Run failed: rate_limit_exceeded"}

    response = client.post("/api/conversations/thread_1/cancel", headers=HEADERS)

    assert response.json() == {"status": "failed", "detail": "Run failed: rate_limit_exceeded"}
