"""FastAPI application exposing stateless chat and memory-backed conversations."""
from typing import List, Optional
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from chatmem.api.schemas import (
    ChatReply,
    ConversationItem,
    HealthResponse,
    MessageRequest,
    StartResponse,
    TranscriptMessage,
)
from chatmem.chat.service import ConversationService
from chatmem.chat.simple import SimpleChatService
from chatmem.config import settings
from chatmem.errors import ConversationNotFound, ModelUnavailable, StoreUnavailable
from chatmem.llm.openai_client import ModelClient, get_model_client
from chatmem.logging import logger, new_request_id
from chatmem.models.message import MessageRole


def create_app(
    engine: Optional[Engine] = None,
    model: Optional[ModelClient] = None,
    prefix: Optional[str] = None,
) -> FastAPI:
    if engine is None:
        from chatmem.db import engine as default_engine, init_db
        engine = default_engine
        init_db(engine)

    def get_model() -> ModelClient:
        return model if model is not None else get_model_client()

    def get_session():
        with Session(engine) as session:
            yield session

    def get_conversations(
        session: Session = Depends(get_session),
        model_client: ModelClient = Depends(get_model),
    ) -> ConversationService:
        return ConversationService.from_session(session, model_client)

    def get_simple_chat(model_client: ModelClient = Depends(get_model)) -> SimpleChatService:
        return SimpleChatService(model_client)

    app = FastAPI(title="chatmem", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_scope(request: Request, call_next):
        rid = new_request_id(request.headers.get("X-Request-ID"))
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    @app.exception_handler(ConversationNotFound)
    async def conversation_not_found(request: Request, exc: ConversationNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ModelUnavailable)
    async def model_unavailable(request: Request, exc: ModelUnavailable):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=503, content={"detail": "The language model is unavailable. Please try again."})

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable(request: Request, exc: StoreUnavailable):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=503, content={"detail": "Storage is unavailable. Please try again."})

    router = APIRouter()

    @router.post("/chat", response_model=ChatReply)
    def chat(req: MessageRequest, service: SimpleChatService = Depends(get_simple_chat)):
        return ChatReply(message=service.chat(req.message))

    @router.get("/chat-memory", response_model=List[ConversationItem])
    def list_conversations(service: ConversationService = Depends(get_conversations)):
        return [ConversationItem(id=c.id, description=c.description) for c in service.list_conversations()]

    @router.post("/chat-memory/start", response_model=StartResponse)
    def start_conversation(req: MessageRequest, service: ConversationService = Depends(get_conversations)):
        started = service.create_conversation_with_first_message(req.message)
        return StartResponse(id=started.conversation_id, reply=started.reply, description=started.description)

    @router.get("/chat-memory/{conversation_id}", response_model=List[TranscriptMessage])
    def get_transcript(conversation_id: str, service: ConversationService = Depends(get_conversations)):
        return [TranscriptMessage(content=m.content, role=m.role) for m in service.get_transcript(conversation_id)]

    @router.post("/chat-memory/{conversation_id}", response_model=TranscriptMessage)
    def send_message(
        conversation_id: str,
        req: MessageRequest,
        service: ConversationService = Depends(get_conversations),
    ):
        reply = service.send_message(conversation_id, req.message)
        return TranscriptMessage(content=reply, role=MessageRole.ASSISTANT)

    app.include_router(router, prefix=settings.API_PREFIX if prefix is None else prefix)

    @app.get("/health", response_model=HealthResponse)
    def health():
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            database = True
        except SQLAlchemyError as e:
            logger.error(f"Health check could not reach the database: {e}")
            database = False
        return HealthResponse(ok=database, database=database)

    return app
