import logging
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings  # where DATABASE_URL lives
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
SessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


async def get_db() -> AsyncSession:
    """
    Dependency that provides a database session.
    Session is automatically closed after the request.

    Returns:
        AsyncSession: SQLAlchemy async session

    Usage:
        @app.get("/items/")
        async def read_items(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Item))
            return result.scalars().all()
    """
    async with SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def commit_or_rollback(db: AsyncSession, action: str) -> None:
    """Commit the unit of work; on failure nothing of it is kept."""
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise StorageError(action) from e


async def init_models(bind=None) -> None:
    """Create every table known to the models package."""
    # Imported here so the models register themselves on Base.metadata.
    from app.models import (  # noqa: F401
        user, organization, artist, release, track, split_share,
        qc_item, delivery_job, report_row, audit_log,
    )

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
