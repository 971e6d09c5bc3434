from sqlmodel import SQLModel, create_engine, Session
from app.core.config import settings
from app.core.store import DocumentStore
import logging

logger = logging.getLogger(__name__)

# Ensure the URL uses postgresql:// (not postgres://) for SQLAlchemy
db_url = settings.database_url
if db_url.startswith("postgres://"):
    db_url = db_url.replace("postgres://", "postgresql://", 1)

logger.info(f"Connecting to database: {db_url[:20]}...")  # Log partial URL for debugging

if db_url.startswith("sqlite"):
    engine = create_engine(
        db_url,
        echo=False,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        db_url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
    )


def get_store():
    """Dependency for getting a document store bound to a fresh session."""
    with Session(engine) as session:
        yield DocumentStore(session)


def init_db():
    """Initialize database tables."""
    # Import models so every table is registered on the metadata
    from app.models import models  # noqa: F401
    SQLModel.metadata.create_all(engine)
