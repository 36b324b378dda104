"""
Модуль безопасности HTTP API.
Обеспечивает защиту API с помощью токена.
"""
import logging
from fastapi import Security, HTTPException
from fastapi.security.api_key import APIKeyHeader
from starlette.status import HTTP_403_FORBIDDEN

from fixie_assistant import config

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def get_api_key(api_key_header: str = Security(api_key_header)):
    if api_key_header is None:
        logger.warning("Отсутствует заголовок X-API-Key")
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Missing X-API-Key header")
    if not config.API_TOKEN or api_key_header != config.API_TOKEN:
        logger.warning("Невалидный API-ключ")
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Invalid API key")
    return api_key_header
