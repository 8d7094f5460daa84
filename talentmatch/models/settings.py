"""
Runtime settings for the matching service, read from the environment
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Reranker score for candidates the model left out of its rankings.
UNRANKED_SCORE = 0.1


class LLMSettings(BaseModel):
    """LLM Configuration Settings"""
    model_name: str = Field(default="llama3.1:8b", description="LLM model name")
    base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    timeout: int = Field(default=120, ge=1, le=600, description="Request timeout in seconds")


class EmbeddingSettings(BaseModel):
    """Embedding Model Configuration"""
    model_name: str = Field(default="nomic-embed-text", description="Embedding model name")
    base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    dimension: int = Field(default=768, ge=1, description="Embedding dimension")
    timeout: int = Field(default=30, ge=1, le=300, description="Request timeout in seconds")


class VectorIndexSettings(BaseModel):
    """Vector index backend configuration"""
    backend: str = Field(default="memory", description="'pinecone' or 'memory'")
    api_key: Optional[str] = Field(default=None, description="Pinecone API key")
    index_name: str = Field(default="candidate-index", description="Pinecone index name")

    @field_validator('backend')
    @classmethod
    def validate_backend(cls, v):
        v = v.lower()
        if v not in ("pinecone", "memory"):
            raise ValueError("backend must be 'pinecone' or 'memory'")
        return v


class MatchingSettings(BaseModel):
    """Matching pipeline tuning"""
    max_concurrent_evaluations: int = Field(default=5, ge=1, le=50, description="Maximum in-flight evaluator calls")
    fallback_candidate_limit: int = Field(default=15, ge=1, le=50, description="Candidates sent to the model-only tier")
    default_search_limit: int = Field(default=10, ge=1, le=100, description="Search result limit when none is given")
    resume_excerpt_chars: int = Field(default=800, ge=100, description="Resume characters sent per candidate when reranking")


class DatabaseSettings(BaseModel):
    """MongoDB connection settings"""
    mongo_details: str = Field(default="mongodb://localhost:27017", description="MongoDB connection string")
    db_name: str = Field(default="talentmatch_db", description="Database name")


class AppSettings(BaseModel):
    """Complete service configuration"""
    llm: LLMSettings = Field(default_factory=LLMSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vector_index: VectorIndexSettings = Field(default_factory=VectorIndexSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


def load_settings() -> AppSettings:
    """Build settings from environment variables (and a .env file if present)"""
    load_dotenv()

    ollama = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    pinecone_key = os.getenv("PINECONE_API_KEY")
    backend = os.getenv("VECTOR_BACKEND") or ("pinecone" if pinecone_key else "memory")

    return AppSettings(
        llm=LLMSettings(
            model_name=os.getenv("LLM_MODEL", "llama3.1:8b"),
            base_url=ollama,
            timeout=int(os.getenv("LLM_TIMEOUT", "120")),
        ),
        embedding=EmbeddingSettings(
            model_name=os.getenv("EMBED_MODEL", "nomic-embed-text"),
            base_url=ollama,
            dimension=int(os.getenv("EMBED_DIM", "768")),
            timeout=int(os.getenv("EMBED_TIMEOUT", "30")),
        ),
        vector_index=VectorIndexSettings(
            backend=backend,
            api_key=pinecone_key,
            index_name=os.getenv("PINECONE_INDEX", "candidate-index"),
        ),
        matching=MatchingSettings(
            max_concurrent_evaluations=int(os.getenv("MAX_CONCURRENT_EVALUATIONS", "5")),
            fallback_candidate_limit=int(os.getenv("FALLBACK_CANDIDATE_LIMIT", "15")),
            default_search_limit=int(os.getenv("DEFAULT_SEARCH_LIMIT", "10")),
        ),
        database=DatabaseSettings(
            mongo_details=os.getenv("MONGO_DETAILS", "mongodb://localhost:27017"),
            db_name=os.getenv("DB_NAME", "talentmatch_db"),
        ),
    )
