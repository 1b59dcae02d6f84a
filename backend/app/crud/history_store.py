import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.database import create_db_and_tables
from app.models.models import AnalysisRecord
from app.schemas.stats_models import WritingStatistics

logger = logging.getLogger(__name__)


class HistoryStore(ABC):
    """Holds the single most recent analysis per key.

    Writing a key replaces whatever it held; no older analyses are kept.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[WritingStatistics]:
        """Returns the stored analysis for the key, or None."""

    @abstractmethod
    def put(self, key: str, stats: WritingStatistics) -> None:
        """Replaces the stored analysis for the key."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Clears the key. Returns True if something was removed."""


class MemoryHistoryStore(HistoryStore):
    """Process-local store used when no database is configured."""

    def __init__(self):
        self._slots: Dict[str, WritingStatistics] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[WritingStatistics]:
        with self._lock:
            return self._slots.get(key)

    def put(self, key: str, stats: WritingStatistics) -> None:
        with self._lock:
            self._slots[key] = stats
        logger.info("Saved analysis for '%s' to memory", key)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._slots.pop(key, None) is not None


class SqlHistoryStore(HistoryStore):
    """Relational store keeping one AnalysisRecord row per key."""

    def __init__(self, engine: Engine):
        self.engine = engine
        create_db_and_tables(engine)

    def get(self, key: str) -> Optional[WritingStatistics]:
        try:
            with Session(self.engine) as session:
                record = session.exec(
                    select(AnalysisRecord).where(AnalysisRecord.document_key == key)
                ).first()
                return record.to_stats() if record else None
        except SQLAlchemyError:
            logger.exception("Error fetching previous analysis for '%s'", key)
            raise

    def put(self, key: str, stats: WritingStatistics) -> None:
        try:
            with Session(self.engine) as session:
                existing = session.exec(
                    select(AnalysisRecord).where(AnalysisRecord.document_key == key)
                ).all()
                for record in existing:
                    session.delete(record)

                # Deletes must reach the database before the insert or the
                # unique key index rejects the new row
                session.flush()

                record = AnalysisRecord.from_stats(key, stats)
                session.add(record)
                session.commit()
                session.refresh(record)
                logger.info("Saved analysis for '%s' to database (ID: %s)", key, record.id)
        except SQLAlchemyError:
            logger.exception("Error saving analysis for '%s'", key)
            raise

    def delete(self, key: str) -> bool:
        try:
            with Session(self.engine) as session:
                existing = session.exec(
                    select(AnalysisRecord).where(AnalysisRecord.document_key == key)
                ).all()
                for record in existing:
                    session.delete(record)
                session.commit()
                return bool(existing)
        except SQLAlchemyError:
            logger.exception("Error deleting analysis for '%s'", key)
            raise


def build_history_store(engine: Optional[Engine]) -> HistoryStore:
    """Selects the store implementation for this deployment.

    Args:
        engine (Optional[Engine]): SQL engine, or None when no database is configured.

    Returns:
        HistoryStore: A SQL-backed store if an engine is given, else an in-memory one.
    """
    if engine is None:
        logger.info("Using in-memory history storage (no DATABASE_URL configured)")
        return MemoryHistoryStore()

    logger.info("Using SQL history storage (%s)", engine.url.get_backend_name())
    return SqlHistoryStore(engine)
