from typing import Optional
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from app.core.config import DATABASE_URL


def build_engine(database_url: Optional[str] = DATABASE_URL) -> Optional[Engine]:
    """Creates the SQL engine, or returns None when no database is configured.

    Args:
        database_url (Optional[str]): SQLAlchemy connection URL.

    Returns:
        Optional[Engine]: The engine, or None for in-memory deployments.
    """
    if not database_url:
        return None

    # pool_pre_ping: checks if the connection is alive before using it
    return create_engine(database_url, pool_pre_ping=True, echo=False)


def create_db_and_tables(engine: Engine):
    """Creates the tables if they don't exist."""
    SQLModel.metadata.create_all(engine)
