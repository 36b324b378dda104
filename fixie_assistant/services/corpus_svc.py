"""
Сервис для запросов к корпусу знаний Fixie.
"""
import logging
from typing import Any, Optional

import httpx

from fixie_assistant import config
from fixie_assistant.errors import UpstreamQueryFailure

logger = logging.getLogger(__name__)


class CorpusService:
    """Клиент Fixie Corpus API."""
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key if api_key is not None else config.FIXIE_API_KEY
        self.client = client or httpx.AsyncClient(
            base_url=base_url or config.FIXIE_API_URL,
            timeout=timeout or config.FIXIE_TIMEOUT,
        )

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def query(self, corpus_id: str, query: str, max_chunks: int = 5, tool_name: str = "query_corpus") -> Any:
        logger.debug(f"Запрос к корпусу {corpus_id}: {query}")
        try:
            response = await self.client.post(
                f"/api/v1/corpora/{corpus_id}:query",
                json={"corpus_id": corpus_id, "query": query, "max_chunks": max_chunks},
                headers=self._headers(),
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.error(f"Ошибка запроса к корпусу {corpus_id}: {e}")
            raise UpstreamQueryFailure(tool_name, f"Corpus query failed: {e}") from e
        except ValueError as e:
            logger.error(f"Некорректный ответ корпуса {corpus_id}: {e}")
            raise UpstreamQueryFailure(tool_name, f"Corpus returned invalid JSON: {e}") from e

    async def close(self):
        await self.client.aclose()
