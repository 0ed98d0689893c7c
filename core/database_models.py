from datetime import datetime, timezone
import uuid
from sqlalchemy import Column, String, DateTime, Text

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Contact(Base):
    __tablename__ = 'contacts'

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Career(Base):
    __tablename__ = 'careers'

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    position = Column(String(255), nullable=False)
    message = Column(Text)  # Optional cover note
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class ReportDownload(Base):
    __tablename__ = 'report_downloads'

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


# Persistence kind -> model
MODELS = {
    'contact': Contact,
    'careers': Career,
    'report': ReportDownload,
}
