from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """Base class for job database models"""
    pass

class TimestampMixin:
    """Insert time for append-only job rows"""
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
