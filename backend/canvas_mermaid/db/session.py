import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from canvas_mermaid.config import DATABASE_URL
from canvas_mermaid.db.models import ConversionLog

logger = logging.getLogger(__name__)


def make_engine(url: str = DATABASE_URL):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def log_conversion(result, session_factory=None) -> bool:
    """Record a conversion run. Best effort: a database error is logged, never raised."""
    session_factory = session_factory or SessionLocal
    entry = ConversionLog(
        canvas_name=result.name,
        output=result.callout or None,
        success=result.success,
        valid_mermaid=result.valid_mermaid,
        error=result.error,
        nodes_count=result.statistics.nodes_count,
        edges_count=result.statistics.edges_count,
        groups_count=result.statistics.groups_count,
        processing_time_ms=result.statistics.processing_time_ms,
    )

    try:
        with session_factory() as session:
            session.add(entry)
            session.commit()
        return True
    except SQLAlchemyError as e:
        logger.warning("Conversion log not written: %s", e)
        return False
