"""Общие фикстуры тестов."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from fixie_assistant.config import AssistantSettings
from fixie_assistant.schemas import Message
from fixie_assistant.services.openai_svc import OpenAIService
from tests.helpers import make_run


@pytest.fixture
def settings():
    return AssistantSettings(poll_interval=0, run_timeout=None, max_poll_errors=2)


@pytest.fixture
def openai_service():
    service = MagicMock(spec=OpenAIService)
    service.create_assistant = AsyncMock(return_value=SimpleNamespace(id="asst_1"))
    service.delete_assistant = AsyncMock()
    service.create_thread = AsyncMock(return_value=SimpleNamespace(id="thread_1"))
    service.delete_thread = AsyncMock()
    service.add_message = AsyncMock(return_value=SimpleNamespace(id="msg_1"))
    service.create_run = AsyncMock(return_value=make_run("queued"))
    service.get_run = AsyncMock(return_value=make_run("completed"))
    service.cancel_run = AsyncMock()
    service.submit_tool_outputs = AsyncMock()
    service.get_messages = AsyncMock(return_value=[
        Message(role="user", content="What does Fixie.ai do?"),
        Message(role="assistant", content="Fixie.ai builds a platform for conversational AI applications."),
    ])
    return service


@pytest.fixture
def corpus_service():
    service = MagicMock()
    service.query = AsyncMock(return_value={"results": [{"chunk": {"content": "Fixie is a platform..."}}]})
    return service
