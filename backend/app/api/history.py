from typing import Dict, Optional
from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_history_service
from app.schemas.common import HistoryResponse
from app.services.history_service import HistoryService
from app.services.stats_service import readability_label

router = APIRouter(prefix="/history", tags=["History"])


@router.get("")
def get_latest_analysis(
    document: Optional[str] = None,
    service: HistoryService = Depends(get_history_service),
) -> HistoryResponse:
    """Retrieves the analysis currently stored in the history slot.

    Args:
        document (Optional[str]): Document name, used as key in per-document mode.
        service (HistoryService): The history service.

    Returns:
        HistoryResponse: The stored analysis and its history key.

    Raises:
        HTTPException: If nothing has been stored for the key yet.
    """
    analysis = service.latest(document)
    if analysis is None:
        raise HTTPException(status_code=404, detail="No history found for this file")

    return HistoryResponse(
        key=service.resolve_key(document),
        analysis=analysis,
        readability=readability_label(analysis.flesch_score),
    )


@router.delete("")
def delete_history(
    document: Optional[str] = None,
    service: HistoryService = Depends(get_history_service),
) -> Dict[str, str]:
    """Clears the history slot so the next upload is treated as the first.

    Args:
        document (Optional[str]): Document name, used as key in per-document mode.
        service (HistoryService): The history service.

    Returns:
        Dict[str, str]: A confirmation message.

    Raises:
        HTTPException: If the slot was already empty.
    """
    if not service.clear(document):
        raise HTTPException(status_code=404, detail="Entry not found")
    return {"message": "Deleted"}
