"""
Vector Index Store Package

Provides the store interface plus in-memory and PostgreSQL/pgvector
implementations.
"""

from .base import VectorIndexStore, ChunkInput
from .memory_store import InMemoryVectorStore
from .sql_store import SqlVectorStore
from .models import Base, ChunkEmbedding
from .session import get_engine, get_session_factory, create_tables

__all__ = [
    "VectorIndexStore",
    "ChunkInput",
    "InMemoryVectorStore",
    "SqlVectorStore",
    "Base",
    "ChunkEmbedding",
    "get_engine",
    "get_session_factory",
    "create_tables",
]
