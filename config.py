"""
Configuration module for the Movie Graph QA system.
Uses Pydantic for validation and environment variable loading.
"""

from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
import logging


MOVIES_CSV_URL = (
    "https://raw.githubusercontent.com/tomasonjo/blog-datasets/main/movies/movies_small.csv"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Keys
    openai_api_key: str = Field(default="sk-placeholder")

    # Neo4j Settings
    neo4j_uri: str = Field(default="bolt://localhost:7687")
    neo4j_user: str = Field(default="neo4j")
    neo4j_password: str = Field(...)
    neo4j_database: str = Field(default="neo4j")

    # Logging
    log_level: str = Field(default="INFO")

    # OpenAI Model Settings
    gpt_model: str = Field(default="gpt-3.5-turbo")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000)
    embedding_model: str = Field(default="text-embedding-3-small")
    embedding_dimensions: int = Field(default=1536)

    # Few-shot example store
    chroma_persist_dir: str = Field(default="./chroma_db")
    example_collection: str = Field(default="cypher_examples")
    example_k: int = Field(default=5, ge=1)

    # Graph QA chain
    top_k: int = Field(default=10, ge=1)
    validate_cypher: bool = Field(default=False)
    read_only: bool = Field(default=False)
    allow_dangerous_requests: bool = Field(default=True)
    return_intermediate_steps: bool = Field(default=True)
    verbose: bool = Field(default=True)

    # Schema introspection
    enhanced_schema: bool = Field(default=False)
    schema_sample_size: int = Field(default=1000, ge=1)
    exclude_types: List[str] = Field(default_factory=list)
    include_types: List[str] = Field(default_factory=list)

    # Sample data
    movies_csv_url: str = Field(default=MOVIES_CSV_URL)


class LogConfig:
    """Logging configuration."""

    @staticmethod
    def setup_logging(level: str = "INFO") -> logging.Logger:
        """Set up logging configuration."""
        log_level = getattr(logging, level.upper(), logging.INFO)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        root_logger.addHandler(console_handler)

        # Suppress noisy loggers
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("openai").setLevel(logging.WARNING)
        logging.getLogger("chromadb").setLevel(logging.WARNING)
        logging.getLogger("neo4j").setLevel(logging.WARNING)

        return root_logger


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)
