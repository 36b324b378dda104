"""
Исключения клиента ассистента.
"""
from typing import Any, Optional


class AssistantError(Exception):
    """Базовое исключение пакета."""


class ToolError(AssistantError):
    """Ошибка выполнения инструмента."""
    def __init__(self, tool_name: str, message: str):
        super().__init__(message)
        self.tool_name = tool_name


class UnknownTool(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(tool_name, f"Unknown function: {tool_name}")


class MalformedArguments(ToolError):
    pass


class UpstreamQueryFailure(ToolError):
    pass


class ConversationStartError(AssistantError):
    """Ошибка на одном из шагов запуска разговора."""


class AssistantCreationFailed(ConversationStartError):
    pass


class ThreadCreationFailed(ConversationStartError):
    pass


class MessageAppendFailed(ConversationStartError):
    pass


class RunCreationFailed(ConversationStartError):
    pass


class RunError(AssistantError):
    """Ошибка выполнения запуска (run)."""
    def __init__(self, thread_id: str, run_id: str, message: str):
        super().__init__(message)
        self.thread_id = thread_id
        self.run_id = run_id


class RunFailed(RunError):
    def __init__(self, thread_id: str, run_id: str, status: str, last_error: Optional[Any] = None):
        message = f"Run {run_id} finished with status '{status}'"
        if last_error:
            message += f": {last_error}"
        super().__init__(thread_id, run_id, message)
        self.status = status
        self.last_error = last_error


class RunTimeout(RunError):
    pass


class RunPollError(RunError):
    pass
