import os
from typing import List
from dotenv import load_dotenv

load_dotenv()

# Persistence: unset means the in-memory history store is used
DATABASE_URL = os.environ.get("DATABASE_URL")

# "global" keeps one slot for every upload, "per_document" keys slots by file name
HISTORY_MODE = os.environ.get("HISTORY_MODE", "global").strip().lower()
HISTORY_MODES = {"global", "per_document"}

if HISTORY_MODE not in HISTORY_MODES:
    raise ValueError(
        f"HISTORY_MODE must be one of {sorted(HISTORY_MODES)}, got '{HISTORY_MODE}'."
    )

MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 50 * 1024 * 1024))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

WORD_GOAL = int(os.environ.get("WORD_GOAL", 100000))


def get_cors_origins() -> List[str]:
    """Parses the comma-separated CORS_ORIGINS variable.

    Returns:
        List[str]: Allowed origins for the frontend.
    """
    raw = os.environ.get(
        "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    )
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
