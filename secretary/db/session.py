"""
Database session management - SQLAlchemy engine and session factory.
This module provides the database connection and session dependency for FastAPI.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from secretary.core.config import settings

# ---------------------------------------------------------------------------
# DATABASE ENGINE
# ---------------------------------------------------------------------------
# pool_pre_ping=True: check a pooled connection with "SELECT 1" before use,
# so a database restart between digest runs does not surface as an error.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# ---------------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------------
# autocommit=False: the repository decides when to commit
# autoflush=False: flushes happen only when we ask for them
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.post("/digest/run")
        async def run_digest(db: Session = Depends(get_db)):
            ...

    The session is always closed after the request, even when the
    route raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
