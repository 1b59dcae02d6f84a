import math
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

from app.core.config import WORD_GOAL
from app.core.exceptions import EmptyInputError
from app.schemas.common import WritingProgress
from app.schemas.stats_models import WritingStatistics
from app.services.analyzer_service import (
    DEFAULT_PARAGRAPH_RULES,
    ParagraphRules,
    normalize_text,
    split_paragraphs,
    split_sentences,
    split_words,
)

# Compile regex once at module level for performance
NON_ALNUM_REGEX = re.compile(r"[\W_]+")

VOWELS = "aeiouy"

# High-frequency function words used to approximate lexical simplicity
COMMON_WORDS = frozenset(
    {
        "the", "be", "to", "of", "and", "a", "in", "that", "have", "i",
        "it", "for", "not", "on", "with", "he", "as", "you", "do", "at",
    }
)

WORDS_PER_MINUTE = 200

# Constants for the Flesch Reading Ease formula
FLESCH_BASE = 206.835
FLESCH_SENTENCE_WEIGHT = 1.015
FLESCH_SYLLABLE_WEIGHT = 84.6

# Lower bound of each readability band, checked from easiest to hardest
READABILITY_BANDS = [
    (90, "Very Easy"),
    (80, "Easy"),
    (70, "Fairly Easy"),
    (60, "Standard"),
    (50, "Fairly Difficult"),
    (30, "Difficult"),
]


def round2(value: float) -> float:
    """Rounds to 2 decimal places, half away from zero.

    The built-in round() uses banker's rounding, so 0.125 would become 0.12.
    """
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def strip_word(word: str) -> str:
    """Removes non-alphanumeric characters and case-folds a token."""
    return NON_ALNUM_REGEX.sub("", word).casefold()


def count_syllables(word: str) -> int:
    """Estimates the syllables in a word by counting vowel groups.

    Args:
        word (str): A single word token, punctuation allowed.

    Returns:
        int: The estimated syllable count, at least 1.
    """
    word = NON_ALNUM_REGEX.sub("", word).lower()
    if len(word) <= 3:
        return 1

    count = 0
    previous_was_vowel = False
    for char in word:
        is_vowel = char in VOWELS
        if is_vowel and not previous_was_vowel:
            count += 1
        previous_was_vowel = is_vowel

    # Silent 'e', except the syllabic "-le" after a consonant ("simple", "able",
    # "people"), where a plain silent-e rule would undercount by one
    if word.endswith("e") and not (word.endswith("le") and word[-3] not in VOWELS):
        count -= 1

    return max(1, count)


def calculate_flesch_score(
    word_count: int, sentence_count: int, syllable_count: int
) -> float:
    """Computes a Flesch Reading Ease approximation.

    The score is unbounded: very short sentences of monosyllables can push it
    above 100 and dense academic prose below 0.

    Args:
        word_count (int): Total words.
        sentence_count (int): Total sentences.
        syllable_count (int): Total estimated syllables.

    Returns:
        float: The score rounded to 2 decimals, or 0.0 for an empty text.
    """
    if word_count == 0:
        return 0.0

    words_per_sentence = word_count / sentence_count if sentence_count else 0.0
    score = (
        FLESCH_BASE
        - FLESCH_SENTENCE_WEIGHT * words_per_sentence
        - FLESCH_SYLLABLE_WEIGHT * (syllable_count / word_count)
    )
    return round2(score)


def readability_label(score: float) -> str:
    """Maps a Flesch score to a human-readable band for display."""
    for lower_bound, label in READABILITY_BANDS:
        if score >= lower_bound:
            return label
    return "Very Difficult"


def calculate_progress(word_count: int, target: int = WORD_GOAL) -> WritingProgress:
    """Calculates progress towards the word goal.

    Args:
        word_count (int): Words written so far.
        target (int): The word goal.

    Returns:
        WritingProgress: Percentage reached (capped at 100) and words remaining.
    """
    percentage = min(word_count / target * 100, 100.0) if target > 0 else 100.0
    return WritingProgress(
        target_words=target,
        percentage=round2(percentage),
        remaining_words=max(target - word_count, 0),
    )


def calculate_stats(
    text: str,
    rules: ParagraphRules = DEFAULT_PARAGRAPH_RULES,
    analyzed_at: Optional[datetime] = None,
) -> WritingStatistics:
    """Generates the writing statistics of a text.

    Args:
        text (str): The original text as extracted from the document.
        rules (ParagraphRules): Thresholds for paragraph detection.
        analyzed_at (Optional[datetime]): Timestamp to record, defaults to now (UTC).

    Returns:
        WritingStatistics: The computed statistics.

    Raises:
        EmptyInputError: If the text is empty or whitespace-only.
    """
    normalized = normalize_text(text)
    if not normalized:
        raise EmptyInputError()

    words = split_words(normalized)
    sentences = split_sentences(text)
    paragraphs = split_paragraphs(text, len(words), rules)

    lexical_stats = _get_lexical_metrics(text, words)
    sentence_stats = _get_sentence_metrics(words, sentences)

    syllable_count = sum(count_syllables(word) for word in words)
    flesch_score = calculate_flesch_score(len(words), len(sentences), syllable_count)

    result = {
        "word_count": len(words),
        "sentence_count": len(sentences),
        "paragraph_count": paragraphs.paragraph_count,
        "flesch_score": flesch_score,
        "reading_time_minutes": math.ceil(len(words) / WORDS_PER_MINUTE),
        "analyzed_at": analyzed_at or datetime.now(timezone.utc),
        **lexical_stats,
        **sentence_stats,
    }

    return WritingStatistics(**result)


def _get_lexical_metrics(text: str, words: List[str]) -> Dict[str, float]:
    """Calculates character counts, vocabulary size and word-level averages.

    Args:
        text (str): The original text, used for character counts.
        words (List[str]): Word tokens of the normalized text.

    Returns:
        Dict[str, float]: Character counts, unique words and rounded averages.
    """
    char_count_no_spaces = len(re.sub(r"\s", "", text))
    stripped = [strip_word(word) for word in words]

    # Tokens made only of punctuation ("--", "...") are not vocabulary
    unique_words = {form for form in stripped if form}
    common_count = sum(1 for form in stripped if form in COMMON_WORDS)

    if not words:
        avg_word_length = avg_chars_per_word = common_pct = 0.0
    else:
        avg_word_length = sum(len(word) for word in words) / len(words)
        avg_chars_per_word = char_count_no_spaces / len(words)
        common_pct = common_count / len(words) * 100

    return {
        "char_count": len(text),
        "char_count_no_spaces": char_count_no_spaces,
        "unique_word_count": len(unique_words),
        "avg_word_length": round2(avg_word_length),
        "avg_chars_per_word": round2(avg_chars_per_word),
        "common_word_percentage": round2(common_pct),
    }


def _get_sentence_metrics(words: List[str], sentences: List[str]) -> Dict[str, float]:
    """Calculates sentence-level averages.

    Args:
        words (List[str]): Word tokens of the normalized text.
        sentences (List[str]): Sentence segments of the raw text.

    Returns:
        Dict[str, float]: Rounded words-per-sentence and characters-per-sentence.
    """
    if not sentences or not words:
        return {"avg_words_per_sentence": 0.0, "avg_sentence_length": 0.0}

    avg_len = sum(len(s.strip()) for s in sentences) / len(sentences)

    return {
        "avg_words_per_sentence": round2(len(words) / len(sentences)),
        "avg_sentence_length": round2(avg_len),
    }
