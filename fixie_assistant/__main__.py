"""
Запуск разговора с ассистентом Fixie из командной строки.

    python -m fixie_assistant [--message TEXT] [--debug]
    python -m fixie_assistant serve
"""
import argparse
import asyncio
import json
import logging
import sys

import openai

from fixie_assistant import config
from fixie_assistant.errors import AssistantError
from fixie_assistant.schemas import Message
from fixie_assistant.services.corpus_svc import CorpusService
from fixie_assistant.services.driver import ConversationDriver
from fixie_assistant.services.openai_svc import OpenAIService
from fixie_assistant.services.tools import ToolInvoker, build_corpus_tool

logger = logging.getLogger("fixie_assistant")


def print_message(message: Message) -> None:
    print(f"\n{message.role}:\n{message.content}")


async def run_conversation(settings: config.AssistantSettings) -> None:
    corpus_service = CorpusService()
    try:
        tool_invoker = ToolInvoker()
        build_corpus_tool(tool_invoker, corpus_service, settings)
        driver = ConversationDriver(settings, OpenAIService(), tool_invoker, emit=print_message)
        user_message = {"role": "user", "content": settings.user_message}
        print(f"\nStarting Assistant thread with message: {json.dumps(user_message)}")
        await driver.run()
    finally:
        await corpus_service.close()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="fixie-assistant", description=__doc__.strip().splitlines()[0])
    parser.add_argument("command", nargs="?", choices=["run", "serve"], default="run")
    parser.add_argument("--message", help="Первое сообщение пользователя")
    parser.add_argument("--debug", action="store_true", default=None, help="Подробный вывод")
    parser.add_argument("--poll-interval", type=float, help="Интервал опроса в секундах")
    parser.add_argument("--timeout", type=float, help="Максимальное время ожидания запуска в секундах")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.command == "serve":
        import uvicorn
        uvicorn.run("fixie_assistant.main:app", host=config.HOST, port=config.PORT)
        return 0

    settings = config.AssistantSettings.from_env(
        user_message=args.message,
        debug=args.debug,
        poll_interval=args.poll_interval,
        run_timeout=args.timeout,
    )
    config.configure_logging(settings.debug)
    try:
        asyncio.run(run_conversation(settings))
    except (AssistantError, openai.OpenAIError) as e:
        logger.error(f"Разговор завершился с ошибкой: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Прервано пользователем")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
