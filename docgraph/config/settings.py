"""
DocGraph Configuration
======================

Configuration dataclasses for the completion service and the database.

All fields support override from environment variables; explicit
constructor arguments win over the environment.

Usage:
    from docgraph.config import DocGraphConfig, LLMConfig

    # Default (env vars or defaults)
    config = DocGraphConfig()

    # Explicit override
    config = DocGraphConfig(llm=LLMConfig(api_key="sk-...", model="gpt-4o-mini"))

Environment Variables:
    LLM_API_KEY: Completion service credential (default: unset -> fallback extraction)
    LLM_API_URL: Chat completions endpoint (default: OpenAI)
    LLM_MODEL: Model identifier (default: gpt-3.5-turbo)
    LLM_TEMPERATURE: Sampling temperature (default: 0.0)
    LLM_TIMEOUT_SECONDS: HTTP timeout in seconds (default: 60)
    LLM_MAX_INPUT_CHARS: Characters of document text sent to the model (default: 4000)
    DOCGRAPH_DATABASE_URL: Async SQLAlchemy URL (default: sqlite+aiosqlite:///./docgraph.db)
    SQL_ECHO: Echo SQL statements (default: false)
    DOCGRAPH_POOL_SIZE: Connection pool size, PostgreSQL only (default: 10)
    DOCGRAPH_MAX_OVERFLOW: Pool overflow, PostgreSQL only (default: 20)
"""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./docgraph.db"


def _get_env_str(key: str, default: str) -> str:
    """Read an environment variable as a string."""
    return os.environ.get(key, default)


def _get_env_int(key: str, default: int) -> int:
    """Read an environment variable as an int."""
    return int(os.environ.get(key, default))


def _get_env_float(key: str, default: float) -> float:
    """Read an environment variable as a float."""
    return float(os.environ.get(key, default))


def _get_env_bool(key: str, default: bool) -> bool:
    """Read an environment variable as a bool ("1", "true", "yes", "on")."""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LLMConfig:
    """
    Completion service configuration.

    When ``api_key`` is empty the pipeline uses the deterministic fallback
    extractor instead of calling the model.

    Attributes:
        api_key: Bearer credential for the completion service
        api_url: OpenAI-compatible chat completions endpoint
        model: Model identifier
        temperature: Sampling temperature (0.0 = deterministic)
        timeout_seconds: Total HTTP timeout per request
        max_input_chars: Prefix of the document text sent to the model
    """
    api_key: Optional[str] = field(default_factory=lambda: _get_env_str("LLM_API_KEY", "") or None)
    api_url: str = field(default_factory=lambda: _get_env_str("LLM_API_URL", DEFAULT_API_URL))
    model: str = field(default_factory=lambda: _get_env_str("LLM_MODEL", DEFAULT_MODEL))
    temperature: float = field(default_factory=lambda: _get_env_float("LLM_TEMPERATURE", 0.0))
    timeout_seconds: int = field(default_factory=lambda: _get_env_int("LLM_TIMEOUT_SECONDS", 60))
    max_input_chars: int = field(default_factory=lambda: _get_env_int("LLM_MAX_INPUT_CHARS", 4000))

    @property
    def enabled(self) -> bool:
        """True if a credential is configured."""
        return bool(self.api_key)


@dataclass
class DatabaseConfig:
    """
    Database configuration.

    Supports:
    - PostgreSQL (production, via asyncpg)
    - SQLite (development/testing, via aiosqlite)
    """
    url: str = field(default_factory=lambda: _get_env_str("DOCGRAPH_DATABASE_URL", DEFAULT_DATABASE_URL))
    echo: bool = field(default_factory=lambda: _get_env_bool("SQL_ECHO", False))
    pool_size: int = field(default_factory=lambda: _get_env_int("DOCGRAPH_POOL_SIZE", 10))
    max_overflow: int = field(default_factory=lambda: _get_env_int("DOCGRAPH_MAX_OVERFLOW", 20))

    def __post_init__(self):
        # Plain sqlite URLs are promoted to the async driver
        if self.url.startswith("sqlite:///"):
            self.url = self.url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def sanitized_url(self) -> str:
        """Return the URL with the password hidden, for logging."""
        if "@" not in self.url or "://" not in self.url:
            return self.url
        scheme, rest = self.url.split("://", 1)
        credentials, host = rest.rsplit("@", 1)
        if ":" in credentials:
            user = credentials.split(":", 1)[0]
            return f"{scheme}://{user}:***@{host}"
        return self.url


@dataclass
class DocGraphConfig:
    """
    Top-level configuration for :class:`docgraph.core.DocGraph`.

    Attributes:
        llm: Completion service settings
        database: Database settings
        create_tables: Create missing tables on connect()
        serialize_per_document: Serialize concurrent analyze() calls per document id
    """
    llm: LLMConfig = field(default_factory=LLMConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    create_tables: bool = True
    serialize_per_document: bool = False
