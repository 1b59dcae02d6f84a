from typing import Optional
from app.schemas.stats_models import (
    COUNT_METRICS,
    AnalysisDelta,
    PreviousSummary,
    WritingStatistics,
)


def diff_stats(
    current: WritingStatistics, previous: Optional[WritingStatistics]
) -> Optional[AnalysisDelta]:
    """Compares a fresh analysis with the previously stored one.

    Only the count metrics are compared; averages and scores are not.

    Args:
        current (WritingStatistics): The analysis that was just computed.
        previous (Optional[WritingStatistics]): The stored analysis, if any.

    Returns:
        Optional[AnalysisDelta]: Signed differences (current - previous), or None
            when there is nothing to compare against.
    """
    if previous is None:
        return None

    return AnalysisDelta(
        **{
            metric: getattr(current, metric) - getattr(previous, metric)
            for metric in COUNT_METRICS
        }
    )


def summarize_previous(
    previous: Optional[WritingStatistics],
) -> Optional[PreviousSummary]:
    """Reduces the replaced analysis to what the caller displays."""
    if previous is None:
        return None
    return PreviousSummary(
        word_count=previous.word_count, analyzed_at=previous.analyzed_at
    )
