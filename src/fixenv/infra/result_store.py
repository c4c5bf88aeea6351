from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from sqlalchemy import select, update

from ..core.domain.models import CacheKey, SharedResult
from .database import Database
from .tables import AnalysisResultRow


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlResultCache:
    """ResultCachePort over the ``analysis_results`` table."""

    def __init__(
        self,
        *,
        database: Database,
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._db = database
        self._ttl = ttl
        self._clock = clock

    def get(self, key: CacheKey) -> Optional[dict[str, Any]]:
        now = self._clock()
        stmt = (
            select(AnalysisResultRow.analysis_data)
            .where(AnalysisResultRow.cache_key == key.value)
            .where(AnalysisResultRow.expires_at > now)
            .order_by(AnalysisResultRow.created_at.desc())
            .limit(1)
        )
        with self._db.session() as session:
            return session.execute(stmt).scalar_one_or_none()

    def put(self, key: CacheKey, repository_url: str, payload: dict[str, Any]) -> None:
        now = self._clock()
        row = AnalysisResultRow(
            cache_key=key.value,
            repository_url=repository_url,
            analysis_data=payload,
            created_at=now,
            expires_at=now + self._ttl,
            view_count=0,
        )
        with self._db.session() as session:
            session.add(row)


class SqlShareStore:
    """ShareStorePort over the ``analysis_results`` table."""

    def __init__(self, *, database: Database, clock: Callable[[], datetime] = _utcnow) -> None:
        self._db = database
        self._clock = clock

    @staticmethod
    def _to_shared(row: AnalysisResultRow) -> SharedResult:
        return SharedResult(
            token=row.share_token or "",
            repository_url=row.repository_url,
            analysis_data=row.analysis_data,
            created_at=as_utc(row.created_at),
            view_count=row.view_count,
        )

    def token_exists(self, token: str) -> bool:
        stmt = select(AnalysisResultRow.id).where(AnalysisResultRow.share_token == token)
        with self._db.session() as session:
            return session.execute(stmt).first() is not None

    def create(self, *, token: str, repository_url: str, analysis_data: dict[str, Any]) -> SharedResult:
        row = AnalysisResultRow(
            share_token=token,
            repository_url=repository_url,
            analysis_data=analysis_data,
            created_at=self._clock(),
            expires_at=None,
            view_count=0,
        )
        with self._db.session() as session:
            session.add(row)
            session.flush()
            return self._to_shared(row)

    def find(self, token: str) -> Optional[SharedResult]:
        stmt = select(AnalysisResultRow).where(AnalysisResultRow.share_token == token)
        with self._db.session() as session:
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_shared(row) if row is not None else None

    def set_view_count(self, token: str, view_count: int) -> None:
        stmt = (
            update(AnalysisResultRow)
            .where(AnalysisResultRow.share_token == token)
            .values(view_count=view_count)
        )
        with self._db.session() as session:
            session.execute(stmt)
