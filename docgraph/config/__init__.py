"""
Configuration module for DocGraph.
"""

from .settings import (
    DocGraphConfig,
    LLMConfig,
    DatabaseConfig,
    DEFAULT_API_URL,
    DEFAULT_MODEL,
    DEFAULT_DATABASE_URL,
)

__all__ = [
    "DocGraphConfig",
    "LLMConfig",
    "DatabaseConfig",
    "DEFAULT_API_URL",
    "DEFAULT_MODEL",
    "DEFAULT_DATABASE_URL",
]
