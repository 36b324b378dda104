"""
Опрос статуса запуска (run) ассистента.

Цикл опроса:
- completed: получаем сообщения треда, передаем их в emit и завершаемся;
- requires_action: выполняем все вызовы инструментов параллельно и
  отправляем результаты одним запросом;
- queued / in_progress / cancelling: ждем poll_interval и опрашиваем снова;
- failed / cancelled / expired / incomplete и неизвестные статусы: RunFailed.
"""
import asyncio
import logging
from typing import Any, Callable, List, Optional

import openai

from fixie_assistant.config import AssistantSettings
from fixie_assistant.errors import RunFailed, RunPollError, RunTimeout
from fixie_assistant.schemas import Message, ToolCall
from fixie_assistant.services.openai_svc import OpenAIService
from fixie_assistant.services.tools import ToolInvoker

logger = logging.getLogger(__name__)

PENDING_STATUSES = ("queued", "in_progress", "cancelling")
FAILED_STATUSES = ("failed", "cancelled", "expired", "incomplete")


class RunPoller:
    """Класс для доведения запуска до завершения."""
    def __init__(
        self,
        openai_service: OpenAIService,
        tool_invoker: ToolInvoker,
        poll_interval: float = 3.0,
        max_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
        max_poll_errors: int = 3,
        emit: Optional[Callable[[Message], Any]] = None,
    ):
        self.openai_service = openai_service
        self.tool_invoker = tool_invoker
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.max_poll_errors = max_poll_errors
        self.emit = emit
        self.run_id: Optional[str] = None
        self.task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, settings: AssistantSettings, openai_service: OpenAIService,
                      tool_invoker: ToolInvoker, emit: Optional[Callable[[Message], Any]] = None) -> "RunPoller":
        return cls(
            openai_service,
            tool_invoker,
            poll_interval=settings.poll_interval,
            max_attempts=settings.max_poll_attempts,
            timeout=settings.run_timeout,
            max_poll_errors=settings.max_poll_errors,
            emit=emit,
        )

    def start(self, thread_id: str, run_id: str) -> asyncio.Task:
        if self.task is not None and not self.task.done():
            raise RuntimeError(f"Poller is already running run {self.run_id}")
        self.run_id = run_id
        self.task = asyncio.create_task(self.run(thread_id, run_id))
        return self.task

    async def stop(self):
        if self.task is not None and not self.task.done():
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
        self.task = None
        self.run_id = None

    async def run(self, thread_id: str, run_id: str) -> List[Message]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout if self.timeout else None
        attempts = 0
        errors = 0
        try:
            while True:
                if self.max_attempts is not None and attempts >= self.max_attempts:
                    raise RunTimeout(thread_id, run_id, f"Run {run_id} did not finish after {attempts} polls")
                if deadline is not None and loop.time() >= deadline:
                    raise RunTimeout(thread_id, run_id, f"Run {run_id} did not finish within {self.timeout}s")
                attempts += 1
                try:
                    messages = await self.poll_once(thread_id, run_id)
                except openai.APIError as e:
                    errors += 1
                    if errors > self.max_poll_errors:
                        raise RunPollError(thread_id, run_id, f"Polling run {run_id} failed {errors} times: {e}") from e
                    logger.warning(f"Ошибка опроса запуска {run_id} ({errors}/{self.max_poll_errors}): {e}")
                else:
                    errors = 0
                    if messages is not None:
                        return messages
                await asyncio.sleep(self.poll_interval)
        except RunTimeout:
            logger.error(f"Превышено время ожидания запуска {run_id} для треда {thread_id}")
            await self._cancel_remote(thread_id, run_id)
            raise
        except asyncio.CancelledError:
            logger.info(f"Опрос запуска {run_id} отменен")
            await self._cancel_remote(thread_id, run_id)
            raise

    async def poll_once(self, thread_id: str, run_id: str) -> Optional[List[Message]]:
        """Один цикл опроса. Возвращает сообщения, если запуск завершен."""
        run = await self.openai_service.get_run(thread_id, run_id)
        status = run.status
        logger.debug(f"Run Status: {status}")

        if status == "completed":
            return await self._emit_transcript(thread_id)
        if status == "requires_action":
            await self.submit_required_action(thread_id, run_id, run)
            return None
        if status in PENDING_STATUSES:
            logger.info(f"Assistant is still running. Polling again in {self.poll_interval}s")
            return None
        if status not in FAILED_STATUSES:
            logger.error(f"Неизвестный статус запуска {run_id}: {status}")
        raise RunFailed(thread_id, run_id, status, getattr(run, "last_error", None))

    async def submit_required_action(self, thread_id: str, run_id: str, run: Any) -> None:
        required_action = getattr(run, "required_action", None)
        submit = getattr(required_action, "submit_tool_outputs", None)
        tool_calls = [ToolCall.from_openai(call) for call in (getattr(submit, "tool_calls", None) or [])]
        logger.debug(f"Assistant requires action: {required_action}")
        if not tool_calls:
            logger.warning(f"Запуск {run_id} требует действия, но не содержит вызовов инструментов")
            return

        outputs = await asyncio.gather(*(self.tool_invoker.execute(call) for call in tool_calls))
        tool_outputs = [output.model_dump() for output in outputs]
        logger.debug(f"Submitting function output back to the Assistant: {tool_outputs}")
        await self.openai_service.submit_tool_outputs(thread_id, run_id, tool_outputs)

    async def _emit_transcript(self, thread_id: str) -> List[Message]:
        messages = await self.openai_service.get_messages(thread_id)
        if self.emit is not None:
            for message in messages:
                self.emit(message)
        return messages

    async def _cancel_remote(self, thread_id: str, run_id: str) -> None:
        try:
            await self.openai_service.cancel_run(thread_id, run_id)
        except Exception as e:
            logger.warning(f"Не удалось отменить запуск {run_id} для треда {thread_id}: {e}")
