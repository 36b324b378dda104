"""
HTTP-сервис для разговоров с ассистентом Fixie.
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fixie_assistant import __version__, config
from fixie_assistant.routers import conversations
from fixie_assistant.services.corpus_svc import CorpusService
from fixie_assistant.services.openai_svc import OpenAIService
from fixie_assistant.services.tools import ToolInvoker, build_corpus_tool
from fixie_assistant.storage.conversation_manager import ConversationManager
from fixie_assistant.storage.file_storage import FileStorage

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Fixie Assistant Service",
    description="Разговоры с OpenAI Assistants и поиском по корпусу Fixie",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(conversations.router)


@app.on_event("startup")
async def startup_event():
    settings = config.AssistantSettings.from_env()
    config.configure_logging(settings.debug)
    logger.info("Запуск сервиса ассистента Fixie")
    corpus_service = CorpusService()
    tool_invoker = ToolInvoker()
    build_corpus_tool(tool_invoker, corpus_service, settings)
    storage = FileStorage(config.DATA_DIR, config.CONVERSATIONS_FILENAME)
    manager = ConversationManager(storage, OpenAIService(), tool_invoker, settings)
    app.state.corpus_service = corpus_service
    app.state.conversation_manager = manager
    manager.start_cleanup(config.INACTIVE_HOURS, config.CLEANUP_INTERVAL)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Остановка сервиса ассистента Fixie")
    await app.state.conversation_manager.shutdown()
    await app.state.corpus_service.close()


@app.get("/")
async def root():
    return {"message": "Fixie Assistant API", "version": app.version}
