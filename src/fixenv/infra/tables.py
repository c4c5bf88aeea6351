"""SQLAlchemy ORM models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        dict[str, Any]: JSON,
    }


class AnalysisResultRow(Base):
    """One stored analysis payload.

    Cache entries carry a ``cache_key`` and an ``expires_at``; shared results
    carry a ``share_token`` and never expire.
    """

    __tablename__ = "analysis_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    share_token: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    cache_key: Mapped[Optional[str]] = mapped_column(String(512))
    repository_url: Mapped[str] = mapped_column(Text, nullable=False)
    analysis_data: Mapped[dict[str, Any]] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_analysis_results_cache_key_expires", "cache_key", "expires_at"),
    )
