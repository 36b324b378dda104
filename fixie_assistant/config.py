"""
Конфигурация клиента ассистента Fixie.
Значения берутся из окружения (и файла .env, если он есть).
"""
import os
import sys
import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# OpenAI API
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
OPENAI_ORG_ID = os.environ.get("OPENAI_ORG_ID")

# Fixie API
FIXIE_API_KEY = os.environ.get("FIXIE_API_KEY")
FIXIE_API_URL = os.environ.get("FIXIE_API_URL", "https://api.fixie.ai")
FIXIE_TIMEOUT = float(os.environ.get("FIXIE_TIMEOUT", "30"))

# API безопасность
API_TOKEN = os.environ.get("API_TOKEN", "")  # заголовок X-API-Key

# Хранилище данных
DATA_DIR = os.environ.get("DATA_DIR", "data")
CONVERSATIONS_FILENAME = os.environ.get("CONVERSATIONS_FILENAME", "conversations.json")

# Настройки автоматической очистки разговоров
INACTIVE_HOURS = int(os.environ.get("INACTIVE_HOURS", "5"))  # Часы неактивности для отмены разговора
CLEANUP_INTERVAL = int(os.environ.get("CLEANUP_INTERVAL", "10"))  # Интервал проверки в минутах

# Настройки сервера
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))

DEFAULT_MODEL = "gpt-4-1106-preview"
DEFAULT_CORPUS_ID = "437594d6-ae69-4e54-abea-c58ab2be80ec"  # Публичный корпус Fixie.ai
DEFAULT_USER_MESSAGE = "What does Fixie.ai do?"
ASSISTANT_NAME = "Fixie Assistant"
SYSTEM_MESSAGE = (
    "You are a helpful assistant who is an expert on a real company called Fixie.ai. "
    "The company is based in Seattle, WA and has a website at https://fixie.ai. "
    "Fixie provides a platform for helping developers build conversational, AI applications. "
    "You have access to a knowledge base that you can query for more information about Fixie, "
    "their products, and their APIs."
)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class AssistantSettings(BaseModel):
    """Настройки одного разговора: ассистент, корпус и параметры опроса."""
    assistant_name: str = ASSISTANT_NAME
    instructions: str = SYSTEM_MESSAGE
    model: str = DEFAULT_MODEL
    assistant_id: Optional[str] = None  # использовать существующего ассистента
    tool_name: str = "query_Fixie_Corpus"
    tool_description: str = "Query a knowledge base of information about Fixie.ai."
    corpus_id: str = DEFAULT_CORPUS_ID
    max_chunks: int = 5
    user_message: str = DEFAULT_USER_MESSAGE
    poll_interval: float = 3.0  # секунды
    run_timeout: Optional[float] = 300.0  # None - без ограничения
    max_poll_attempts: Optional[int] = None
    max_poll_errors: int = 3
    cleanup_on_failure: bool = True
    debug: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "AssistantSettings":
        values = {
            "model": os.environ.get("OPENAI_MODEL", DEFAULT_MODEL),
            "assistant_id": os.environ.get("OPENAI_ASSISTANT_ID") or None,
            "corpus_id": os.environ.get("FIXIE_CORPUS_ID", DEFAULT_CORPUS_ID),
            "max_chunks": int(os.environ.get("FIXIE_MAX_CHUNKS", "5")),
            "poll_interval": float(os.environ.get("POLL_INTERVAL", "3")),
            "run_timeout": float(os.environ.get("RUN_TIMEOUT", "300")) or None,
            "max_poll_attempts": int(os.environ.get("MAX_POLL_ATTEMPTS", "0")) or None,
            "max_poll_errors": int(os.environ.get("MAX_POLL_ERRORS", "3")),
            "debug": _env_bool("DEBUG_MESSAGES"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def configure_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    # httpx пишет каждый запрос на INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
