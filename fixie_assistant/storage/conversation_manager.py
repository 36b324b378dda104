"""
Менеджер разговоров для HTTP-сервиса.
Запускает разговоры в фоне, отслеживает их жизненный цикл
и периодически отменяет зависшие.
"""
import asyncio
import logging
from typing import Dict, Any, List, Optional

from fixie_assistant.config import AssistantSettings
from fixie_assistant.errors import RunFailed, RunPollError, RunTimeout
from fixie_assistant.schemas import ConversationHandle, Message
from fixie_assistant.services.driver import ConversationDriver
from fixie_assistant.services.openai_svc import OpenAIService
from fixie_assistant.services.poller import RunPoller
from fixie_assistant.services.tools import ToolInvoker
from fixie_assistant.storage.file_storage import ACTIVE_STATUS, FileStorage

logger = logging.getLogger(__name__)


class ConversationManager:
    """Класс для управления разговорами."""
    def __init__(self, storage: FileStorage, openai_service: OpenAIService,
                 tool_invoker: ToolInvoker, settings: AssistantSettings):
        self.storage = storage
        self.openai_service = openai_service
        self.tool_invoker = tool_invoker
        self.settings = settings
        self.background_tasks: Dict[str, asyncio.Task] = {}
        self.cleanup_task: Optional[asyncio.Task] = None
    async def start_conversation(self, message: str) -> ConversationHandle:
        driver = ConversationDriver(self.settings, self.openai_service, self.tool_invoker)
        handle = await driver.start(message)
        self.storage.add_conversation(handle.thread_id, handle.assistant_id, handle.run_id)
        task = asyncio.create_task(self._watch(driver.create_poller(), handle))
        self.background_tasks[handle.thread_id] = task
        return handle
    async def _watch(self, poller: RunPoller, handle: ConversationHandle) -> None:
        thread_id = handle.thread_id
        try:
            await poller.run(thread_id, handle.run_id)
            self.storage.set_status(thread_id, "completed")
        except RunFailed as e:
            self.storage.set_status(thread_id, "failed", str(e))
        except RunTimeout as e:
            self.storage.set_status(thread_id, "timeout", str(e))
        except RunPollError as e:
            self.storage.set_status(thread_id, "error", str(e))
        except asyncio.CancelledError:
            self.storage.set_status(thread_id, "cancelled")
            raise
        except Exception as e:
            logger.error(f"Ошибка при отслеживании запуска {handle.run_id} для треда {thread_id}: {e}")
            self.storage.set_status(thread_id, "error", str(e))
        finally:
            self.background_tasks.pop(thread_id, None)
            if handle.owns_assistant:
                try:
                    await self.openai_service.delete_assistant(handle.assistant_id)
                except Exception as e:
                    logger.warning(f"Не удалось удалить ассистента {handle.assistant_id}: {e}")
    async def cancel_conversation(self, thread_id: str) -> Dict[str, Any]:
        task = self.background_tasks.get(thread_id)
        conversation = self.storage.get_conversation(thread_id)
        if conversation is None:
            return {"thread_id": thread_id, "status": "not_found"}
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            self.background_tasks.pop(thread_id, None)
        elif conversation["status"] == ACTIVE_STATUS:
            try:
                await self.openai_service.cancel_run(thread_id, conversation["run_id"])
            except Exception as e:
                logger.error(f"Ошибка при отмене запуска {conversation['run_id']} для треда {thread_id}: {e}")
        else:
            # завершённый разговор сохраняет свой статус
            return {"thread_id": thread_id, "status": conversation["status"], "detail": conversation.get("detail")}
        self.storage.set_status(thread_id, "cancelled")
        return {"thread_id": thread_id, "status": "cancelled"}
    async def get_status(self, thread_id: str) -> Dict[str, Any]:
        conversation = self.storage.get_conversation(thread_id)
        if conversation is None:
            return {"thread_id": thread_id, "status": "not_found", "detail": None}
        return {"thread_id": thread_id, "status": conversation["status"], "detail": conversation.get("detail")}
    async def get_messages(self, thread_id: str) -> List[Message]:
        return await self.openai_service.get_messages(thread_id)
    async def cleanup_inactive_conversations(self, hours: int = 5) -> List[str]:
        inactive = self.storage.get_inactive_conversations(hours)
        for thread_id in inactive:
            await self.cancel_conversation(thread_id)
        return inactive
    def start_cleanup(self, hours: int, interval_minutes: int) -> None:
        if self.cleanup_task is None or self.cleanup_task.done():
            self.cleanup_task = asyncio.create_task(self._cleanup_loop(hours, interval_minutes * 60))
    async def _cleanup_loop(self, hours: int, interval: float) -> None:
        while True:
            try:
                cancelled = await self.cleanup_inactive_conversations(hours)
            except Exception as e:
                logger.error(f"Ошибка при очистке неактивных разговоров: {e}")
            else:
                if cancelled:
                    logger.info(f"Отменены неактивные разговоры: {', '.join(cancelled)}")
            await asyncio.sleep(interval)
    async def shutdown(self) -> None:
        if self.cleanup_task is not None:
            self.cleanup_task.cancel()
            try:
                await self.cleanup_task
            except asyncio.CancelledError:
                pass
            self.cleanup_task = None
        for thread_id in list(self.background_tasks):
            await self.cancel_conversation(thread_id)
