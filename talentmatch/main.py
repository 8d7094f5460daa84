from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from talentmatch.middleware.error_handlers import (
    ExceptionHandlerMiddleware,
    PerformanceMiddleware,
    RequestLoggingMiddleware,
)
from talentmatch.models.settings import AppSettings, load_settings
from talentmatch.routers import candidates, jobs, matching
from talentmatch.services.db import RecordStore, create_client
from talentmatch.services.embeddings import EmbeddingClient
from talentmatch.services.evaluator import Evaluator
from talentmatch.services.llm import OllamaLLMClient
from talentmatch.services.matching import MatchingOrchestrator
from talentmatch.services.reranker import Reranker
from talentmatch.services.vector_index import build_vector_index
from talentmatch.utils.exceptions import TalentMatchBaseException
from talentmatch.utils.logging_config import configure_for_environment, get_logger

# Configure logging first
configure_for_environment()
logger = get_logger(__name__)


def build_orchestrator(settings: AppSettings, store: RecordStore) -> MatchingOrchestrator:
    llm = OllamaLLMClient(settings.llm)
    return MatchingOrchestrator(
        store=store,
        embeddings=EmbeddingClient(settings.embedding),
        index=build_vector_index(settings.vector_index),
        evaluator=Evaluator(llm),
        reranker=Reranker(llm, settings.matching.resume_excerpt_chars),
        settings=settings.matching,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager"""
    logger.info("TalentMatch API starting up...")
    settings = load_settings()
    client, db = create_client(settings.database)
    store = RecordStore(db)
    app.state.store = store
    app.state.orchestrator = build_orchestrator(settings, store)

    try:
        await store.init_indexes()
        await store.seed_default_jobs()
        await app.state.orchestrator.index_all_jobs()
    except TalentMatchBaseException as e:
        logger.warning(f"Startup initialization had issues: {e.message}")
        logger.info("Application will continue - jobs may be missing from the vector index")

    logger.info("TalentMatch API startup completed")

    yield

    logger.info("TalentMatch API shutting down...")
    client.close()


def create_app() -> FastAPI:
    app = FastAPI(title="TalentMatch API", version="1.0.0", lifespan=lifespan)

    # last added runs first
    app.add_middleware(PerformanceMiddleware, slow_request_threshold=2.0)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ExceptionHandlerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    @app.head("/")
    async def root():
        """Root endpoint - handles both GET and HEAD requests for health checks"""
        return {"message": "Welcome to the TalentMatch API", "version": "1.0.0", "status": "ok"}

    @app.get("/health")
    @app.head("/health")
    async def health_check():
        """Health check endpoint - handles both GET and HEAD requests"""
        return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}

    app.include_router(matching.router, prefix="/api")
    app.include_router(candidates.router, prefix="/api/candidates")
    app.include_router(jobs.router, prefix="/api/jobs")
    return app


app = create_app()
logger.info("TalentMatch API initialized successfully")
