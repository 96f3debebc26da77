from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from supabase import create_client, Client
from fastapi import HTTPException, Request, status
from dotenv import load_dotenv
from contextlib import contextmanager
from typing import Optional
import logging
import os

load_dotenv()

logger = logging.getLogger(__name__)

# Database settings
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./campus_events.db")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_TIMEOUT_SECONDS = float(os.getenv("DB_TIMEOUT_SECONDS", "10"))

# Access gate settings
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")

Base = declarative_base()


def _engine_options(url: str, timeout: float, pool_size: int) -> dict:
    """Pool and driver options with every wait bounded by ``timeout``"""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False, "timeout": timeout}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every checkout sees an empty db
            options["poolclass"] = StaticPool
        return options

    options = {
        "pool_size": pool_size,
        "pool_timeout": timeout,
        "pool_pre_ping": True,  # Good for PostgreSQL connections
        "pool_recycle": 300,  # Recycle connections every 5 minutes
    }
    if url.startswith("postgresql"):
        options["connect_args"] = {
            "connect_timeout": int(timeout),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    return options


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Persistent store handle: one engine, its connection pool and a session factory.

    Created once by the application factory and handed to request handlers
    through ``get_db``; nothing in the services reaches for a global handle.
    """

    def __init__(
        self,
        url: str = DATABASE_URL,
        timeout: float = DB_TIMEOUT_SECONDS,
        pool_size: int = DB_POOL_SIZE,
    ):
        self.url = url
        self.timeout = timeout
        self.engine = create_engine(url, **_engine_options(url, timeout, pool_size))

        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    def init_db(self):
        """Create tables that do not exist yet"""
        # Register every mapped class on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def session_scope(self):
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def check_connection(self) -> bool:
        """Check database connectivity"""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    def dispose(self):
        self.engine.dispose()


def create_supabase_client() -> Optional[Client]:
    """Build the access gate client when credentials are configured"""
    if SUPABASE_URL and SUPABASE_ANON_KEY:
        return create_client(SUPABASE_URL, SUPABASE_ANON_KEY)
    logger.warning("Supabase is not configured; bearer tokens cannot be verified")
    return None


# Request dependencies
def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_supabase(request: Request) -> Client:
    """Get the Supabase client used to verify bearer tokens"""
    supabase = getattr(request.app.state, "supabase", None)
    if supabase is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "success": False,
                "message": "Authentication service is not configured",
                "error_code": "AuthenticationError",
            },
        )
    return supabase
