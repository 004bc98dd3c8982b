"""
SQLAlchemy Models

Defines the database schema for syllabus chunk embeddings
(vector storage with pgvector).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    Text,
    DateTime,
    Index,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from pgvector.sqlalchemy import Vector


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class ChunkEmbedding(Base):
    """
    One embedded chunk of a user's syllabus.

    The vector column carries no fixed dimension; the ranker rejects
    mismatched lengths at query time.
    """
    __tablename__ = "chunk_embedding"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    document_id: Mapped[str] = mapped_column(Text, nullable=False)
    class_label: Mapped[str] = mapped_column(Text, nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    embedding = Column(Vector(), nullable=False)

    __table_args__ = (
        Index("idx_chunk_owner_document", "owner_id", "document_id"),
        UniqueConstraint(
            "owner_id", "document_id", "chunk_index", name="uq_chunk_position"
        ),
    )
