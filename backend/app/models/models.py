from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone

from app.schemas.stats_models import WritingStatistics


class AnalysisRecord(SQLModel, table=True):
    """The most recent analysis stored for a history key.

    Holds at most one row per key; saving a new analysis replaces the row.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    document_key: str = Field(index=True, unique=True, max_length=255)

    # --- LEXICAL STATS ---
    word_count: int = Field(default=0)
    sentence_count: int = Field(default=0)
    char_count: int = Field(default=0)
    char_count_no_spaces: int = Field(default=0)
    paragraph_count: int = Field(default=1)
    unique_word_count: int = Field(default=0)

    # --- AVERAGES ---
    avg_word_length: float = Field(default=0.0)
    avg_words_per_sentence: float = Field(default=0.0)
    avg_sentence_length: float = Field(default=0.0)
    avg_chars_per_word: float = Field(default=0.0)

    # --- READABILITY ---
    flesch_score: float = Field(default=0.0)
    common_word_percentage: float = Field(default=0.0)
    reading_time_minutes: int = Field(default=0)

    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_stats(cls, key: str, stats: WritingStatistics) -> "AnalysisRecord":
        """Builds a row from an analysis."""
        return cls(document_key=key, **stats.model_dump())

    def to_stats(self) -> WritingStatistics:
        """Converts the row back into an immutable analysis."""
        analyzed_at = self.analyzed_at
        # SQLite drops the timezone, stored values are always UTC
        if analyzed_at.tzinfo is None:
            analyzed_at = analyzed_at.replace(tzinfo=timezone.utc)

        data = self.model_dump(exclude={"id", "document_key", "created_at"})
        data["analyzed_at"] = analyzed_at
        return WritingStatistics(**data)
