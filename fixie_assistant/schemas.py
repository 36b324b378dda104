"""
Схемы данных клиента ассистента и HTTP API.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional, List


class ToolDefinition(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})

    @property
    def required(self) -> List[str]:
        return list(self.parameters.get("required", []))

    def to_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "parameters": self.parameters,
                "description": self.description,
            },
        }


class AssistantDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    instructions: str
    tools: List[ToolDefinition] = []
    model: str


class Message(BaseModel):
    role: str
    content: str

    @classmethod
    def from_openai(cls, message: Any) -> "Message":
        parts = []
        for part in message.content or []:
            text = getattr(part, "text", None)
            if text is not None and getattr(text, "value", None):
                parts.append(text.value)
        return cls(role=message.role, content="\n".join(parts))


class ToolCall(BaseModel):
    id: str
    name: str
    arguments: str = ""

    @classmethod
    def from_openai(cls, call: Any) -> "ToolCall":
        return cls(id=call.id, name=call.function.name, arguments=call.function.arguments or "")


class ToolOutput(BaseModel):
    tool_call_id: str
    output: str


class ConversationHandle(BaseModel):
    assistant_id: str
    thread_id: str
    run_id: str
    owns_assistant: bool = True


# HTTP API

class StartConversationRequest(BaseModel):
    message: str


class StartConversationResponse(BaseModel):
    thread_id: str
    run_id: str
    status: str


class ConversationStatusResponse(BaseModel):
    status: str
    detail: Optional[str] = None


class MessageListResponse(BaseModel):
    messages: List[Message]
