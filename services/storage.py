# services/storage.py
"""
SQLAlchemy-backed store for form submission records
"""

import logging
from typing import Any, Dict

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database_models import Base, MODELS
from core.results import StorageError, StoredRecord

logger = logging.getLogger(__name__)


def create_database_engine(database_url: str, connect_timeout: int = 10, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine with settings suited to the backend

    In-memory SQLite shares a single connection so every session sees the
    same database.
    """
    engine_options: Dict[str, Any] = {
        'pool_pre_ping': True,
        'echo': echo,
    }

    if database_url.startswith('sqlite'):
        engine_options['connect_args'] = {'check_same_thread': False}
        if ':memory:' in database_url or database_url in ('sqlite://', 'sqlite:///'):
            engine_options['poolclass'] = StaticPool
    else:
        engine_options['pool_recycle'] = 3600
        if 'postgresql' in database_url:
            engine_options['connect_args'] = {
                'application_name': 'lead_capture',
                'connect_timeout': connect_timeout,
            }

    return create_engine(database_url, **engine_options)


class SQLAlchemySubmissionStore:
    """
    Creates immutable submission records

    Records are only ever inserted; this store has no update or delete path.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.Session = sessionmaker(bind=engine, expire_on_commit=False)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def create(self, kind: str, fields: Dict[str, Any]) -> StoredRecord:
        """
        Insert one record

        Args:
            kind: Persistence kind ('contact', 'careers', 'report')
            fields: Validated field values, stored verbatim

        Returns:
            StoredRecord with the assigned id and creation timestamp

        Raises:
            StorageError: On unknown kind or any database failure
        """
        model = MODELS.get(kind)
        if model is None:
            raise StorageError(f"Unknown submission kind: {kind}")

        session = self.Session()
        try:
            row = model(**fields)
            session.add(row)
            session.commit()
            logger.debug(f"Stored {kind} record {row.id}")
            return StoredRecord(id=row.id, created_at=row.created_at)
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to store {kind} record") from e
        finally:
            session.close()

    def ping(self) -> bool:
        """Check database connectivity for health checks"""
        try:
            with self.engine.connect() as connection:
                connection.execute(text('SELECT 1'))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False
