import logging
from typing import Dict, Optional
from fastapi import FastAPI, Depends, HTTPException, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from app.api import history
from app.api.dependencies import get_history_service
from app.core.config import LOG_LEVEL, MAX_UPLOAD_BYTES, get_cors_origins
from app.core.exceptions import (
    AnalysisError,
    EmptyInputError,
    ExtractionFailedError,
    UnsupportedFormatError,
)
from app.schemas.common import AnalysisResponse
from app.schemas.stats_models import ComparisonResult
from app.services.extraction_service import extract_text, resolve_format
from app.services.history_service import HistoryService
from app.services.stats_service import calculate_progress, readability_label

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Writing Analyzer API",
    description="API for analyzing documents and tracking writing progress between uploads.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(history.router)

# HTTP status for each recoverable analysis failure
ERROR_STATUS = {
    EmptyInputError: 400,
    UnsupportedFormatError: 415,
    ExtractionFailedError: 422,
}


class AnalysisRequest(BaseModel):
    """Request model for text analysis."""

    text: str
    document: Optional[str] = None


def _to_http_error(error: AnalysisError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(error), 400)
    return HTTPException(status_code=status_code, detail=str(error))


def _build_response(
    result: ComparisonResult, file_name: Optional[str] = None
) -> AnalysisResponse:
    return AnalysisResponse(
        stats=result.stats,
        differences=result.differences,
        previous_upload=result.previous_upload,
        readability=readability_label(result.stats.flesch_score),
        progress=calculate_progress(result.stats.word_count),
        file_name=file_name,
    )


def _analyze_upload(
    service: HistoryService,
    content: bytes,
    declared_format: str,
    file_name: Optional[str],
) -> ComparisonResult:
    text = extract_text(content, declared_format)
    return service.compare(text, document=file_name)


@app.get("/")
def read_root() -> Dict[str, str]:
    """Root endpoint to check API status.

    Returns:
        Dict[str, str]: Status message and link to docs.
    """
    return {"status": "API is ready", "docs": "/docs"}


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok", "message": "Writing Analyzer API is running"}


@app.post("/analyze")
def analyze_endpoint(
    request: AnalysisRequest,
    service: HistoryService = Depends(get_history_service),
) -> AnalysisResponse:
    """Analyzes a block of text.

    Calculates writing statistics, compares them with the stored analysis and
    replaces the stored analysis with the new one.

    Args:
        request (AnalysisRequest): The request body containing the text to analyze.
        service (HistoryService): The history service.

    Returns:
        AnalysisResponse: Statistics, differences to the previous analysis and progress.

    Raises:
        HTTPException: If the text is empty.
    """
    try:
        result = service.compare(request.text, document=request.document)
    except AnalysisError as e:
        raise _to_http_error(e)

    return _build_response(result, file_name=request.document)


@app.post("/upload")
async def upload_endpoint(
    file: UploadFile = File(...),
    service: HistoryService = Depends(get_history_service),
) -> AnalysisResponse:
    """Extracts the text of an uploaded document and analyzes it.

    Args:
        file (UploadFile): A .txt, .pdf or .docx document.
        service (HistoryService): The history service.

    Returns:
        AnalysisResponse: Statistics, differences to the previous analysis and progress.

    Raises:
        HTTPException: If the file is too large, unsupported, unreadable or empty.
    """
    # Read one byte past the limit to detect oversized uploads
    content = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File is too large")

    declared_format = resolve_format(file.content_type, file.filename)

    try:
        # Parsing and the store round-trip block, keep them off the event loop
        result = await run_in_threadpool(
            _analyze_upload, service, content, declared_format, file.filename
        )
    except AnalysisError as e:
        logger.warning("Rejected upload '%s': %s", file.filename, e)
        raise _to_http_error(e)

    return _build_response(result, file_name=file.filename)
