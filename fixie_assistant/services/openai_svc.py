"""
Сервис для работы с OpenAI Assistants API.
"""
import logging
from typing import Any, Dict, List, Optional
import openai

from fixie_assistant import config
from fixie_assistant.schemas import AssistantDefinition, Message

logger = logging.getLogger(__name__)


class OpenAIService:
    """Класс для работы с OpenAI API."""
    def __init__(self, client: Optional[openai.AsyncOpenAI] = None):
        self.client = client or openai.AsyncOpenAI(
            api_key=config.OPENAI_API_KEY,
            organization=(config.OPENAI_ORG_ID or None),
        )
    async def create_assistant(self, definition: AssistantDefinition) -> Any:
        try:
            assistant = await self.client.beta.assistants.create(
                name=definition.name,
                instructions=definition.instructions,
                tools=[tool.to_tool() for tool in definition.tools],
                model=definition.model,
            )
            return assistant
        except Exception as e:
            logger.error(f"Ошибка при создании ассистента {definition.name}: {e}")
            raise
    async def delete_assistant(self, assistant_id: str) -> Any:
        try:
            return await self.client.beta.assistants.delete(assistant_id)
        except Exception as e:
            logger.error(f"Ошибка при удалении ассистента {assistant_id}: {e}")
            raise
    async def create_thread(self) -> Any:
        try:
            return await self.client.beta.threads.create()
        except Exception as e:
            logger.error(f"Ошибка при создании треда: {e}")
            raise
    async def delete_thread(self, thread_id: str) -> Any:
        try:
            return await self.client.beta.threads.delete(thread_id)
        except Exception as e:
            logger.error(f"Ошибка при удалении треда {thread_id}: {e}")
            raise
    async def add_message(self, thread_id: str, role: str, content: str) -> Any:
        try:
            message = await self.client.beta.threads.messages.create(
                thread_id=thread_id,
                role=role,
                content=content
            )
            return message
        except Exception as e:
            logger.error(f"Ошибка при добавлении сообщения в тред {thread_id}: {e}")
            raise
    async def create_run(self, thread_id: str, assistant_id: str) -> Any:
        try:
            run = await self.client.beta.threads.runs.create(
                thread_id=thread_id,
                assistant_id=assistant_id
            )
            return run
        except Exception as e:
            logger.error(f"Ошибка при создании запуска для треда {thread_id}: {e}")
            raise
    async def get_run(self, thread_id: str, run_id: str) -> Any:
        try:
            run = await self.client.beta.threads.runs.retrieve(
                run_id,
                thread_id=thread_id,
            )
            return run
        except Exception as e:
            logger.error(f"Ошибка при получении информации о запуске {run_id} для треда {thread_id}: {e}")
            raise
    async def cancel_run(self, thread_id: str, run_id: str) -> Any:
        try:
            run = await self.client.beta.threads.runs.cancel(
                run_id,
                thread_id=thread_id,
            )
            return run
        except Exception as e:
            logger.error(f"Ошибка при отмене запуска {run_id} для треда {thread_id}: {e}")
            raise
    async def submit_tool_outputs(self, thread_id: str, run_id: str, tool_outputs: List[Dict[str, str]]) -> Any:
        try:
            run = await self.client.beta.threads.runs.submit_tool_outputs(
                run_id,
                thread_id=thread_id,
                tool_outputs=tool_outputs,
            )
            return run
        except Exception as e:
            logger.error(f"Ошибка при отправке результатов инструментов для запуска {run_id}: {e}")
            raise
    async def get_messages(self, thread_id: str, limit: int = 100, order: str = "asc") -> List[Message]:
        try:
            messages = []
            # limit задаёт размер страницы, пагинатор SDK догружает остальные
            async for message in self.client.beta.threads.messages.list(
                thread_id=thread_id,
                limit=limit,
                order=order,
            ):
                messages.append(Message.from_openai(message))
            return messages
        except Exception as e:
            logger.error(f"Ошибка при получении сообщений из треда {thread_id}: {e}")
            raise
