import threading
from typing import Optional

from app.core.database import build_engine
from app.crud.history_store import build_history_store
from app.services.history_service import HistoryService

_history_service: Optional[HistoryService] = None
_history_service_lock = threading.Lock()


def get_history_service() -> HistoryService:
    """Dependency for FastAPI to get the shared history service.

    Built on first use so importing the app never opens a database connection.
    A single instance is shared so every request uses the same per-key locks.

    Returns:
        HistoryService: The process-wide history service.
    """
    global _history_service

    with _history_service_lock:
        if _history_service is None:
            _history_service = HistoryService(build_history_store(build_engine()))
        return _history_service
