"""Вспомогательные функции тестов."""

from types import SimpleNamespace


def make_tool_call(call_id: str, name: str = "query_Fixie_Corpus", arguments: str = '{"query": "What does Fixie.ai do?"}'):
    """SDK-подобный объект вызова инструмента."""
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )


def make_run(status: str, tool_calls=None, last_error=None, run_id: str = "run_1"):
    """SDK-подобный объект запуска."""
    required_action = None
    if tool_calls is not None:
        required_action = SimpleNamespace(
            type="submit_tool_outputs",
            submit_tool_outputs=SimpleNamespace(tool_calls=tool_calls),
        )
    return SimpleNamespace(id=run_id, status=status, required_action=required_action, last_error=last_error)


def make_message(role: str, text: str):
    """SDK-подобный объект сообщения треда."""
    return SimpleNamespace(role=role, content=[SimpleNamespace(type="text", text=SimpleNamespace(value=text, annotations=[]))])


class FakePaginator:
    """Асинхронный итератор по страницам, как AsyncPaginator в SDK."""

    def __init__(self, pages):
        self.pages = pages
        self.pages_fetched = 0

    async def __aiter__(self):
        for page in self.pages:
            self.pages_fetched += 1
            for item in page:
                yield item
