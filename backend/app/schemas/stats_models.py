"""
Pydantic schemas for the writing statistics produced by the analysis engine.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

# Count metrics are the only values compared between uploads
COUNT_METRICS = (
    "word_count",
    "sentence_count",
    "char_count",
    "char_count_no_spaces",
    "paragraph_count",
)


class WritingStatistics(BaseModel):
    """Complete statistics for a single analyzed document.

    This schema defines the contract for statistics returned by the analysis
    service. Instances are frozen once produced.
    """

    model_config = ConfigDict(frozen=True)

    # Core Metrics
    word_count: int = Field(ge=0)
    sentence_count: int = Field(ge=0)
    char_count: int = Field(ge=0)
    char_count_no_spaces: int = Field(ge=0)
    paragraph_count: int = Field(ge=1)
    unique_word_count: int = Field(ge=0)

    # Averages (2 decimal places)
    avg_word_length: float = 0.0
    avg_words_per_sentence: float = 0.0
    avg_sentence_length: float = 0.0
    avg_chars_per_word: float = 0.0

    # Readability
    flesch_score: float = 0.0
    common_word_percentage: float = 0.0
    reading_time_minutes: int = Field(default=0, ge=0)

    analyzed_at: datetime


class AnalysisDelta(BaseModel):
    """Signed change of each count metric against the previous analysis."""

    model_config = ConfigDict(frozen=True)

    word_count: int
    sentence_count: int
    char_count: int
    char_count_no_spaces: int
    paragraph_count: int


class PreviousSummary(BaseModel):
    """What the caller is told about the analysis that was replaced.

    Attributes:
        word_count (int): Word count of the previous analysis.
        analyzed_at (datetime): When the previous analysis was produced.
    """

    model_config = ConfigDict(frozen=True)

    word_count: int
    analyzed_at: datetime


class ComparisonResult(BaseModel):
    """A fresh analysis together with its comparison to the stored one."""

    model_config = ConfigDict(frozen=True)

    stats: WritingStatistics
    differences: Optional[AnalysisDelta] = None
    previous_upload: Optional[PreviousSummary] = None
