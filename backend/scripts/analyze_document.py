"""
Command-line document analysis.

Extracts the text of a document, compares its statistics with the stored
history slot and prints the result. History is kept in DATABASE_URL when
set, otherwise in a SQLite file next to the backend, so consecutive runs
compare against each other. HISTORY_MODE applies as in the API.
"""

import sys
import os
import json
import argparse
import mimetypes

# Add project root to path (go up from scripts/ to backend/)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, PROJECT_ROOT)

from app.core.config import DATABASE_URL  # noqa: E402
from app.core.database import build_engine  # noqa: E402
from app.core.exceptions import AnalysisError  # noqa: E402
from app.crud.history_store import build_history_store  # noqa: E402
from app.schemas.stats_models import COUNT_METRICS  # noqa: E402
from app.services.extraction_service import extract_text, resolve_format  # noqa: E402
from app.services.history_service import HistoryService  # noqa: E402
from app.services.stats_service import calculate_progress, readability_label  # noqa: E402

# Each run is a separate process, so history must outlive it
DEFAULT_DATABASE_URL = "sqlite:///" + os.path.join(PROJECT_ROOT, "writing_history.db")

LABELS = {
    "word_count": "Word Count",
    "sentence_count": "Sentence Count",
    "paragraph_count": "Paragraph Count",
    "char_count": "Character Count",
    "char_count_no_spaces": "Characters (no spaces)",
    "unique_word_count": "Unique Words",
    "avg_words_per_sentence": "Avg Words per Sentence",
    "avg_chars_per_word": "Avg Characters per Word",
    "avg_word_length": "Avg Word Length",
    "avg_sentence_length": "Avg Sentence Length",
    "flesch_score": "Flesch Reading Ease",
    "common_word_percentage": "Common Words (%)",
    "reading_time_minutes": "Reading Time (min)",
}


def print_report(result, file_name: str):
    """Prints the statistics with differences to the previous analysis."""
    stats = result.stats
    differences = result.differences

    width = 50
    print(f"\n{'=' * width}")
    print(f"{'Writing Statistics: ' + file_name:^{width}}")
    print(f"{'=' * width}\n")

    for field, label in LABELS.items():
        value = getattr(stats, field)
        line = f"{label:<28} {value:>10,}"
        if differences is not None and field in COUNT_METRICS:
            line += f"  ({getattr(differences, field):+,})"
        print(line)

    print(f"\nReadability: {readability_label(stats.flesch_score)}")

    progress = calculate_progress(stats.word_count)
    print(
        f"Progress to {progress.target_words:,} words: {progress.percentage:.2f}% "
        f"({progress.remaining_words:,} remaining)"
    )

    if result.previous_upload:
        previous = result.previous_upload
        print(
            f"Previous upload: {previous.word_count:,} words "
            f"at {previous.analyzed_at.isoformat()}"
        )
    else:
        print("First upload, nothing to compare against.")


def build_service(database_url: str) -> HistoryService:
    """Builds a history service on a SQL store at the given URL."""
    return HistoryService(build_history_store(build_engine(database_url)))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Analyze a .txt, .pdf or .docx document")
    parser.add_argument("path", help="Path to the document")
    parser.add_argument(
        "--format", help="MIME type of the document (guessed from the extension by default)"
    )
    parser.add_argument(
        "--document", help="History key in per_document mode (defaults to the file name)"
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument(
        "--db",
        help="Database URL for the history (defaults to DATABASE_URL, then a local SQLite file)",
    )
    args = parser.parse_args(argv)

    if not os.path.isfile(args.path):
        print(f"ERROR: File not found at {args.path}")
        sys.exit(1)

    file_name = os.path.basename(args.path)
    declared_format = args.format or resolve_format(
        mimetypes.guess_type(args.path)[0], file_name
    )

    with open(args.path, "rb") as f:
        content = f.read()

    try:
        text = extract_text(content, declared_format)
        service = build_service(args.db or DATABASE_URL or DEFAULT_DATABASE_URL)
        result = service.compare(text, document=args.document or file_name)
    except AnalysisError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        print_report(result, file_name)


if __name__ == "__main__":
    main()
