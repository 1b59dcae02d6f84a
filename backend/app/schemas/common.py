"""
Shared Pydantic schemas used by the HTTP layer.
"""

from pydantic import BaseModel
from typing import Optional
from .stats_models import AnalysisDelta, PreviousSummary, WritingStatistics


class WritingProgress(BaseModel):
    """Progress towards the configured word goal.

    Attributes:
        target_words (int): The word goal.
        percentage (float): Share of the goal reached, capped at 100.
        remaining_words (int): Words still missing, never negative.
    """

    target_words: int
    percentage: float
    remaining_words: int


class AnalysisResponse(BaseModel):
    """Body returned by the analyze and upload endpoints."""

    stats: WritingStatistics
    differences: Optional[AnalysisDelta] = None
    previous_upload: Optional[PreviousSummary] = None
    readability: str
    progress: WritingProgress
    file_name: Optional[str] = None


class HistoryResponse(BaseModel):
    """Body returned by the history endpoint."""

    key: str
    analysis: WritingStatistics
    readability: str
