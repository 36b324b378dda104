"""Tests for the Fixie corpus client."""

import json

import httpx
import pytest

from fixie_assistant.errors import UpstreamQueryFailure
from fixie_assistant.services.corpus_svc import CorpusService


def _service(handler) -> CorpusService:
    client = httpx.AsyncClient(base_url="https://api.fixie.ai", transport=httpx.MockTransport(handler))
    return CorpusService(api_key="fixie-key", client=client)


@pytest.mark.asyncio
async def test_query_posts_to_corpus_endpoint():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"results": [{"chunk": {"content": "Fixie"}}]})

    service = _service(handler)
    result = await service.query("corpus-1", "What does Fixie.ai do?", max_chunks=5)
    await service.close()

    assert result == {"results": [{"chunk": {"content": "Fixie"}}]}
    assert seen["url"] == "https://api.fixie.ai/api/v1/corpora/corpus-1:query"
    assert seen["auth"] == "Bearer fixie-key"
    assert seen["body"] == {"corpus_id": "corpus-1", "query": "What does Fixie.ai do?", "max_chunks": 5}


@pytest.mark.asyncio
async def test_http_error_status_is_upstream_failure():
    service = _service(lambda request: httpx.Response(503, json={"error": "unavailable"}))

    with pytest.raises(UpstreamQueryFailure) as exc_info:
        await service.query("corpus-1", "Fixie", tool_name="query_Fixie_Corpus")

    assert exc_info.value.tool_name == "query_Fixie_Corpus"


@pytest.mark.asyncio
async def test_timeout_is_upstream_failure():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamQueryFailure):
        await _service(handler).query("corpus-1", "Fixie")


@pytest.mark.asyncio
async def test_invalid_json_is_upstream_failure():
    service = _service(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

    with pytest.raises(UpstreamQueryFailure):
        await service.query("corpus-1", "Fixie")
