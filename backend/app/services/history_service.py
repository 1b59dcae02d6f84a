import logging
import threading
import weakref
from typing import Optional

from app.core.config import HISTORY_MODE
from app.crud.history_store import HistoryStore
from app.schemas.stats_models import ComparisonResult, WritingStatistics
from app.services.analyzer_service import DEFAULT_PARAGRAPH_RULES, ParagraphRules
from app.services.diff_service import diff_stats, summarize_previous
from app.services.stats_service import calculate_stats

logger = logging.getLogger(__name__)

# Key of the single slot used when history is not tracked per document
GLOBAL_HISTORY_KEY = "latest"


class _KeyLock:
    """A mutex for one history key that can be weakly referenced."""

    def __init__(self):
        self._lock = threading.Lock()

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info):
        self._lock.release()


class HistoryService:
    """Analyzes texts and compares them with the stored history slot.

    The read-diff-write sequence is serialized per key, so two concurrent
    uploads of the same document cannot both diff against the same stale
    previous analysis.
    """

    def __init__(
        self,
        store: HistoryStore,
        mode: str = HISTORY_MODE,
        rules: ParagraphRules = DEFAULT_PARAGRAPH_RULES,
    ):
        self.store = store
        self.mode = mode
        self.rules = rules
        # Entries disappear once no caller holds the lock, so the registry
        # does not grow with every document name ever seen
        self._locks: "weakref.WeakValueDictionary[str, _KeyLock]" = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    def resolve_key(self, document: Optional[str] = None) -> str:
        """Maps a document name to its history key.

        Args:
            document (Optional[str]): The uploaded file name, if known.

        Returns:
            str: The document name in per-document mode, else the global key.
        """
        if self.mode == "per_document" and document and document.strip():
            return document.strip()
        return GLOBAL_HISTORY_KEY

    def compare(self, text: str, document: Optional[str] = None) -> ComparisonResult:
        """Analyzes a text, diffs it against the stored analysis and replaces it.

        Args:
            text (str): The text to analyze.
            document (Optional[str]): The document name, used as key in per-document mode.

        Returns:
            ComparisonResult: The new statistics, the differences and a summary of
                the replaced analysis (both None on the first upload).

        Raises:
            EmptyInputError: If the text is empty. Nothing is written in that case.
        """
        stats = calculate_stats(text, rules=self.rules)
        key = self.resolve_key(document)

        with self._lock_for(key):
            previous = self.store.get(key)
            differences = diff_stats(stats, previous)
            self.store.put(key, stats)

        logger.info(
            "Analyzed '%s': %d words (%s)",
            key,
            stats.word_count,
            "first upload" if previous is None else f"{differences.word_count:+d} words",
        )

        return ComparisonResult(
            stats=stats,
            differences=differences,
            previous_upload=summarize_previous(previous),
        )

    def latest(self, document: Optional[str] = None) -> Optional[WritingStatistics]:
        """Returns the stored analysis for the document's key, if any."""
        return self.store.get(self.resolve_key(document))

    def clear(self, document: Optional[str] = None) -> bool:
        """Empties the history slot for the document's key."""
        key = self.resolve_key(document)
        with self._lock_for(key):
            return self.store.delete(key)

    def _lock_for(self, key: str) -> _KeyLock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = _KeyLock()
                self._locks[key] = lock
            return lock
