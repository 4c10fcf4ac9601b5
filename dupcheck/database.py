"""
Database schema and connection management.

Uses SQLite with SQLAlchemy as a local mirror of the question table the
duplicate check reads its candidate pool from.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Column, Date, DateTime, String
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class Question(Base):
    """Published prediction-market question."""

    __tablename__ = "questions"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    closes_at = Column(Date, nullable=True)
    status = Column(String, nullable=True)  # open, closed, resolved, archived
    visibility = Column(String, nullable=False, default="public")  # public, private, link_only
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    deleted_at = Column(DateTime, nullable=True)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    engine.dispose()


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
