"""
Database engine, session management, and base model.

Every model inherits from Base. Every request gets a session
from get_db() and the router commits it once the whole unit
of work (record, membership list, audit entry) has succeeded.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from backoffice.config import get_settings

settings = get_settings()

# --- Engine ---
# SQLite connections are opened and used on different worker
# threads by FastAPI, so the same-thread check is turned off.
connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

# --- Session Factory ---
# autocommit=False: a request's writes become visible together
# on commit, so a record and the list that indexes it never
# diverge. autoflush=False: SQL is sent only on explicit flush.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, and anything left uncommitted is rolled back.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
