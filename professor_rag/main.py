from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware

from professor_rag.core.config import settings
from professor_rag.core.exceptions import EmptyConversationError
from professor_rag.core.logging import get_logger, log_shutdown_info, log_startup_info
from professor_rag.models.request import ChatMessage
from professor_rag.models.response import HealthCheckResponse, ResponseStatus
from professor_rag.services.chat_service import ChatService, get_chat_service
from professor_rag.services.ingestion import IngestionService, get_ingestion_service

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_startup_info()
    # Builds and validates the fixed RAG configuration once
    get_chat_service()
    logger.info("Application startup completed")
    yield
    log_shutdown_info()


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthCheckResponse)
def health(ingestion_service: IngestionService = Depends(get_ingestion_service)):
    """Health check endpoint: reports model names and index statistics."""
    stats = ingestion_service.get_index_stats()
    index_ok = stats.get("status") == "success"
    if not index_ok:
        logger.warning(f"Vector index health check failed: {stats.get('message')}")

    return JSONResponse(
        status_code=200,
        content=HealthCheckResponse(
            status=ResponseStatus.OK if index_ok else ResponseStatus.DEGRADED,
            embedding_model=settings.EMBEDDING_MODEL,
            llm_model=settings.LLM_MODEL_NAME,
            index=stats,
        ).model_dump(mode="json"),
    )


@app.post("/api/chat")
def chat(
    messages: List[ChatMessage],
    chat_service: ChatService = Depends(get_chat_service),
):
    """
    Streaming chat endpoint.

    Takes the conversation as a JSON array of {role, content} and streams
    the model's answer back as plain text, fragment by fragment.
    """
    try:
        fragments = chat_service.stream_chat(messages)
    except EmptyConversationError as e:
        return PlainTextResponse(str(e), status_code=400)
    except Exception as e:
        logger.exception(f"Error handling the chat request: {e}")
        return PlainTextResponse("Internal Server Error", status_code=500)

    return StreamingResponse(fragments, media_type="text/plain")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "professor_rag.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
    )
