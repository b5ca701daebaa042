"""
Database configuration and session management
"""

from sqlmodel import SQLModel, Session, create_engine
import structlog

from agenda.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)


def init_db():
    """Create tables directly (development only, production uses Alembic)"""
    import agenda.models  # noqa: F401  registers table metadata

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created")


def get_session():
    """Dependency to get database session"""
    with Session(engine) as session:
        yield session
