"""
Реестр инструментов ассистента и их вызов.

Ошибки инструментов (неизвестное имя, некорректные аргументы, сбой
внешнего сервиса, исключение в обработчике) не прерывают запуск: они
возвращаются модели в виде результата инструмента, чтобы она могла
продолжить разговор.
"""
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List

from fixie_assistant.config import AssistantSettings
from fixie_assistant.errors import MalformedArguments, ToolError, UnknownTool
from fixie_assistant.schemas import ToolCall, ToolDefinition, ToolOutput
from fixie_assistant.services.corpus_svc import CorpusService

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Dict[str, Any]], Awaitable[Any]]

_JSON_TYPES = {
    "string": str,
    "integer": int,
    "number": (int, float),
    "boolean": bool,
    "object": dict,
    "array": list,
}


class ToolInvoker:
    """Класс для вызова зарегистрированных инструментов."""
    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}
        self._handlers: Dict[str, ToolHandler] = {}

    def register(self, definition: ToolDefinition, handler: ToolHandler) -> None:
        if definition.name in self._tools:
            raise ValueError(f"Tool {definition.name} is already registered")
        self._tools[definition.name] = definition
        self._handlers[definition.name] = handler

    @property
    def definitions(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def schemas(self) -> List[Dict[str, Any]]:
        return [definition.to_tool() for definition in self._tools.values()]

    def parse_arguments(self, tool_name: str, args_json: str) -> Dict[str, Any]:
        definition = self._tools.get(tool_name)
        if definition is None:
            raise UnknownTool(tool_name)
        try:
            args = json.loads(args_json) if args_json else {}
        except json.JSONDecodeError as e:
            raise MalformedArguments(tool_name, f"Arguments are not valid JSON: {e}") from e
        if not isinstance(args, dict):
            raise MalformedArguments(tool_name, "Arguments must be a JSON object")

        for field in definition.required:
            if field not in args:
                raise MalformedArguments(tool_name, f"Missing required argument '{field}'")
        properties = definition.parameters.get("properties", {})
        for field, value in args.items():
            expected = _JSON_TYPES.get(properties.get(field, {}).get("type"))
            # bool является подклассом int
            if expected and (not isinstance(value, expected) or (isinstance(value, bool) and expected is not bool)):
                raise MalformedArguments(tool_name, f"Argument '{field}' must be of type {properties[field]['type']}")
        return args

    async def invoke(self, tool_name: str, args_json: str) -> str:
        """
        Вызывает инструмент и возвращает его результат в виде JSON-строки.
        Бросает UnknownTool, MalformedArguments или UpstreamQueryFailure.
        """
        args = self.parse_arguments(tool_name, args_json)
        logger.debug(f"Вызов инструмента {tool_name} с аргументами {args}")
        result = await self._handlers[tool_name](args)
        return json.dumps(result)

    async def execute(self, tool_call: ToolCall) -> ToolOutput:
        try:
            output = await self.invoke(tool_call.name, tool_call.arguments)
        except ToolError as e:
            logger.error(f"Ошибка инструмента {tool_call.name} (tool_call_id={tool_call.id}): {e}")
            output = json.dumps({"error": type(e).__name__, "message": str(e)})
        except Exception as e:
            logger.exception(f"Непредвиденная ошибка инструмента {tool_call.name} (tool_call_id={tool_call.id})")
            output = json.dumps({"error": type(e).__name__, "message": str(e)})
        return ToolOutput(tool_call_id=tool_call.id, output=output)


def corpus_tool_definition(settings: AssistantSettings) -> ToolDefinition:
    return ToolDefinition(
        name=settings.tool_name,
        description=settings.tool_description,
        parameters={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The query to execute against the knowledge base",
                }
            },
            "required": ["query"],
        },
    )


def build_corpus_tool(invoker: ToolInvoker, corpus_service: CorpusService, settings: AssistantSettings) -> ToolDefinition:
    """Регистрирует инструмент поиска по корпусу Fixie."""
    definition = corpus_tool_definition(settings)

    async def query_corpus(args: Dict[str, Any]) -> Any:
        return await corpus_service.query(
            settings.corpus_id,
            args["query"],
            max_chunks=settings.max_chunks,
            tool_name=definition.name,
        )

    invoker.register(definition, query_corpus)
    return definition
