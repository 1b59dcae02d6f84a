import re
from typing import List, NamedTuple
from pydantic import BaseModel, ConfigDict

# Compile regex once at module level for performance
WHITESPACE_REGEX = re.compile(r"\s+")
SENTENCE_END_REGEX = re.compile(r"[.!?]+")
BLANK_LINE_REGEX = re.compile(r"\n\s*\n")
LINE_BREAK_REGEX = re.compile(r"\n+")
# A terminator followed by what looks like the start of a new paragraph
PARAGRAPH_START_REGEX = re.compile(r"[.!?]\s+(?=[A-Z][a-z])")

# Names of the paragraph strategies, reported alongside the split
BLANK_LINE = "blank_line"
LINE_BREAK = "line_break"
SENTENCE_BOUNDARY = "sentence_boundary"


class ParagraphRules(BaseModel):
    """Thresholds for the paragraph fallback heuristic.

    Attributes:
        short_text_chars (int): Texts up to this length never use the fallbacks.
        min_fallback_chars (int): Fallback segments must be longer than this.
        words_per_line_paragraph (int): A line-break split is rejected unless each
            paragraph averages more than this many words.
    """

    model_config = ConfigDict(frozen=True)

    short_text_chars: int = 100
    min_fallback_chars: int = 20
    words_per_line_paragraph: int = 50


DEFAULT_PARAGRAPH_RULES = ParagraphRules()


class ParagraphSplit(NamedTuple):
    paragraphs: List[str]
    strategy: str

    @property
    def paragraph_count(self) -> int:
        # Every text has at least one paragraph
        return max(len(self.paragraphs), 1)


def normalize_text(text: str) -> str:
    """Collapses every whitespace run into a single space and trims the result.

    Args:
        text (str): The raw text.

    Returns:
        str: The normalized text, possibly empty.
    """
    return WHITESPACE_REGEX.sub(" ", text).strip()


def split_words(normalized: str) -> List[str]:
    """Splits normalized text into whitespace-separated word tokens."""
    return [word for word in normalized.split() if word]


def split_sentences(text: str) -> List[str]:
    """Splits raw text on runs of sentence terminators.

    Segments that are empty after trimming are dropped, so a trailing
    terminator does not produce an extra sentence.
    """
    return [s for s in SENTENCE_END_REGEX.split(text) if s.strip()]


def split_paragraphs(
    text: str, word_count: int, rules: ParagraphRules = DEFAULT_PARAGRAPH_RULES
) -> ParagraphSplit:
    """Detects paragraphs using a layered heuristic.

    Extracted text often loses its blank lines (PDF and DOCX converters are
    the usual culprits), so blank-line splitting is tried first and two
    fallbacks are used only when it finds a single paragraph in a longer text:

    1. Split on single line breaks, accepted only if it beats the blank-line
       split without over-segmenting (poetry, code, lists).
    2. Split where a terminator is followed by a capitalised word.

    Args:
        text (str): The raw, non-normalized text.
        word_count (int): Number of words in the text.
        rules (ParagraphRules): Thresholds for the fallbacks.

    Returns:
        ParagraphSplit: The paragraphs and the name of the strategy that produced them.
    """
    paragraphs = [p for p in BLANK_LINE_REGEX.split(text) if p.strip()]

    if len(paragraphs) > 1 or len(text) <= rules.short_text_chars:
        return ParagraphSplit(paragraphs, BLANK_LINE)

    line_paragraphs = [
        p
        for p in LINE_BREAK_REGEX.split(text)
        if len(p.strip()) > rules.min_fallback_chars
    ]
    if (
        len(line_paragraphs) > len(paragraphs)
        and len(line_paragraphs) < word_count / rules.words_per_line_paragraph
    ):
        return ParagraphSplit(line_paragraphs, LINE_BREAK)

    if PARAGRAPH_START_REGEX.search(text):
        sentence_paragraphs = [
            p
            for p in PARAGRAPH_START_REGEX.split(text)
            if len(p.strip()) > rules.min_fallback_chars
        ]
        return ParagraphSplit(sentence_paragraphs, SENTENCE_BOUNDARY)

    return ParagraphSplit(paragraphs, BLANK_LINE)
