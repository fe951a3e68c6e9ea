import logging
from sqlalchemy import create_engine, event, Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from .config import Settings

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def _receive_connect(dbapi_connection, connection_record):
    """Event listener for database connections"""
    logger.info("Database connection established")


def _receive_checkout(dbapi_connection, connection_record, connection_proxy):
    """Event listener for connection checkout"""
    logger.debug("Database connection checked out from pool")


def create_db_engine(settings: Settings) -> Engine:
    """
    Create the pooled SQLAlchemy engine for the configured database.

    On PostgreSQL every session gets a server-side statement_timeout so a
    slow query is aborted instead of holding its pooled connection.

    Args:
        settings: Application settings

    Returns:
        Engine: Configured engine
    """
    connect_args = {}
    if settings.database_url.startswith("postgresql"):
        connect_args["options"] = f"-c statement_timeout={settings.db_statement_timeout_ms}"

    engine = create_engine(
        settings.database_url,
        poolclass=QueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
        pool_recycle=settings.db_pool_recycle,
        connect_args=connect_args,
        echo=settings.debug
    )

    # Database event listeners for monitoring
    event.listen(engine, "connect", _receive_connect)
    event.listen(engine, "checkout", _receive_checkout)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the given engine"""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine
    )


def init_db(engine: Engine) -> bool:
    """
    Initialize database tables

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        # Import all models here to ensure they are registered
        from ..models import task, user  # noqa: F401

        # Create tables
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        return False
