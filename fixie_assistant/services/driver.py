"""
Запуск разговора с ассистентом: ассистент, тред, первое сообщение, запуск.
"""
import logging
from typing import Any, Callable, List, Optional

from fixie_assistant.config import AssistantSettings
from fixie_assistant.errors import (
    AssistantCreationFailed,
    MessageAppendFailed,
    RunCreationFailed,
    ThreadCreationFailed,
)
from fixie_assistant.schemas import AssistantDefinition, ConversationHandle, Message
from fixie_assistant.services.openai_svc import OpenAIService
from fixie_assistant.services.poller import RunPoller
from fixie_assistant.services.tools import ToolInvoker

logger = logging.getLogger(__name__)


class ConversationDriver:
    """Класс для запуска одного разговора."""
    def __init__(
        self,
        settings: AssistantSettings,
        openai_service: OpenAIService,
        tool_invoker: ToolInvoker,
        emit: Optional[Callable[[Message], Any]] = None,
    ):
        self.settings = settings
        self.openai_service = openai_service
        self.tool_invoker = tool_invoker
        self.emit = emit

    def assistant_definition(self) -> AssistantDefinition:
        return AssistantDefinition(
            name=self.settings.assistant_name,
            instructions=self.settings.instructions,
            tools=self.tool_invoker.definitions,
            model=self.settings.model,
        )

    def create_poller(self) -> RunPoller:
        return RunPoller.from_settings(self.settings, self.openai_service, self.tool_invoker, emit=self.emit)

    async def start(self, user_message: Optional[str] = None) -> ConversationHandle:
        content = user_message or self.settings.user_message
        owns_assistant = self.settings.assistant_id is None
        assistant_id = self.settings.assistant_id
        thread_id = None

        if owns_assistant:
            definition = self.assistant_definition()
            try:
                assistant = await self.openai_service.create_assistant(definition)
            except Exception as e:
                raise AssistantCreationFailed(f"Failed to create assistant {definition.name}: {e}") from e
            assistant_id = assistant.id
            logger.info(f"Создан ассистент {assistant_id}")

        try:
            try:
                thread = await self.openai_service.create_thread()
            except Exception as e:
                raise ThreadCreationFailed(f"Failed to create thread: {e}") from e
            thread_id = thread.id

            try:
                await self.openai_service.add_message(thread_id, "user", content)
            except Exception as e:
                raise MessageAppendFailed(f"Failed to add message to thread {thread_id}: {e}") from e

            try:
                run = await self.openai_service.create_run(thread_id, assistant_id)
            except Exception as e:
                raise RunCreationFailed(f"Failed to create run for thread {thread_id}: {e}") from e
        except Exception:
            if self.settings.cleanup_on_failure:
                await self._rollback(assistant_id if owns_assistant else None, thread_id)
            raise

        logger.info(f"Создан запуск {run.id} для треда {thread_id}")
        return ConversationHandle(
            assistant_id=assistant_id,
            thread_id=thread_id,
            run_id=run.id,
            owns_assistant=owns_assistant,
        )

    async def run(self, user_message: Optional[str] = None) -> List[Message]:
        handle = await self.start(user_message)
        poller = self.create_poller()
        return await poller.run(handle.thread_id, handle.run_id)

    async def _rollback(self, assistant_id: Optional[str], thread_id: Optional[str]) -> None:
        if thread_id:
            try:
                await self.openai_service.delete_thread(thread_id)
                logger.info(f"Удален тред {thread_id}")
            except Exception as e:
                logger.warning(f"Не удалось удалить тред {thread_id}: {e}")
        if assistant_id:
            try:
                await self.openai_service.delete_assistant(assistant_id)
                logger.info(f"Удален ассистент {assistant_id}")
            except Exception as e:
                logger.warning(f"Не удалось удалить ассистента {assistant_id}: {e}")
