"""
Database connection and session management for the SQL cache backend.
"""

from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


class Database:
    """
    Owns the SQLAlchemy engine and session factory for one database URL.

    The engine keeps a connection pool, so a single instance is shared by
    every request for the lifetime of the process.
    """

    def __init__(self, url: str):
        """
        Args:
            url: SQLAlchemy database URL, e.g. postgresql://... or sqlite:///cache.db
        """
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.engine: Engine = create_engine(url, connect_args=connect_args)
        self.session_factory = sessionmaker(bind=self.engine)

    @contextmanager
    def session(self):
        """
        Context manager for a database session.

        Usage:
            with database.session() as db:
                # Use db session
                pass
        """
        db: Session = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def init_schema(self):
        """Create all tables."""
        from transgate.db_models import Base

        Base.metadata.create_all(bind=self.engine)

    def dispose(self):
        """Close all pooled connections."""
        self.engine.dispose()
