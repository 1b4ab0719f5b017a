from dataclasses import dataclass
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from core.config import settings


Base = declarative_base()


@dataclass(frozen=True)
class Backend:
    """
    Process-wide handle to the relational backend.

    Built once at startup from settings and never mutated afterwards.
    Components receive sessions from it through dependency injection
    (see utils.deps.get_db) instead of reaching for a module global.
    """
    url: str
    engine: Engine
    session_factory: sessionmaker


def create_backend(url: str) -> Backend:
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    # Bound parameters carry customer data; keep them out of error messages
    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True, hide_parameters=True)

    if url.startswith("sqlite"):
        # SQLite ignores foreign keys unless asked
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return Backend(url=url, engine=engine, session_factory=session_factory)


backend = create_backend(settings.DATABASE_URL)
SessionLocal = backend.session_factory
