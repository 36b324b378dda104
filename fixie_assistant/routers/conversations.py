"""
API роутеры для разговоров с ассистентом.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
import logging

from fixie_assistant.errors import ConversationStartError
from fixie_assistant.schemas import (
    StartConversationRequest, StartConversationResponse,
    ConversationStatusResponse, MessageListResponse,
)
from fixie_assistant.storage.conversation_manager import ConversationManager
from fixie_assistant.security import get_api_key

router = APIRouter(prefix="/api", tags=["conversations"])
logger = logging.getLogger(__name__)


# Зависимость для получения менеджера разговоров
def get_conversation_manager(request: Request) -> ConversationManager:
    return request.app.state.conversation_manager


@router.post("/conversations", response_model=StartConversationResponse)
async def start_conversation(
    request: StartConversationRequest,
    conversation_manager: ConversationManager = Depends(get_conversation_manager),
    api_key: str = Depends(get_api_key)
):
    """
    Создание ассистента, треда и запуска; опрос продолжается в фоне.
    """
    try:
        handle = await conversation_manager.start_conversation(request.message)
    except ConversationStartError as e:
        logger.error(f"Ошибка при запуске разговора: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    return {"thread_id": handle.thread_id, "run_id": handle.run_id, "status": "in_progress"}


@router.get("/conversations/{thread_id}", response_model=ConversationStatusResponse)
async def conversation_status(
    thread_id: str,
    conversation_manager: ConversationManager = Depends(get_conversation_manager),
    api_key: str = Depends(get_api_key)
):
    result = await conversation_manager.get_status(thread_id)
    return {"status": result["status"], "detail": result["detail"]}


@router.get("/conversations/{thread_id}/messages", response_model=MessageListResponse)
async def conversation_messages(
    thread_id: str,
    conversation_manager: ConversationManager = Depends(get_conversation_manager),
    api_key: str = Depends(get_api_key)
):
    """
    Получение сообщений треда (от старых к новым).
    """
    try:
        messages = await conversation_manager.get_messages(thread_id)
    except Exception as e:
        logger.error(f"Ошибка при получении сообщений: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"messages": messages}


@router.post("/conversations/{thread_id}/cancel", response_model=ConversationStatusResponse)
async def cancel_conversation(
    thread_id: str,
    conversation_manager: ConversationManager = Depends(get_conversation_manager),
    api_key: str = Depends(get_api_key)
):
    result = await conversation_manager.cancel_conversation(thread_id)
    return {"status": result["status"], "detail": result.get("detail")}
