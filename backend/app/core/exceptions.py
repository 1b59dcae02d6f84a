"""
Domain errors raised by the analysis engine and its collaborators.
"""


class AnalysisError(Exception):
    """Base class for recoverable, user-facing analysis failures."""


class EmptyInputError(AnalysisError):
    """The text is empty or whitespace-only, so there is nothing to analyze."""

    def __init__(self, message: str = "No text found in the document."):
        super().__init__(message)


class ExtractionError(AnalysisError):
    """Base class for failures coming from the text extractor."""


class UnsupportedFormatError(ExtractionError):
    """The declared document format has no extractor."""

    def __init__(self, declared_format: str):
        self.declared_format = declared_format
        super().__init__(
            f"Unsupported file type '{declared_format}'. "
            "Please upload a .txt, .pdf, or .docx file."
        )


class ExtractionFailedError(ExtractionError):
    """The extractor recognised the format but could not read the payload."""
