#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the Sweet Shop API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps, set in Python so they are available
  right after commit (sessions use expire_on_commit=False)

Persistence is NOT done from the models: services receive a DBStorage
handle and add/commit through it.
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import declarative_base

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """
    SQLite hands back naive datetimes even for DateTime(timezone=True);
    treat those as UTC so comparisons against utcnow() are valid.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """DateTime that always reads back as aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_result_value(self, value, dialect):
        return as_utc(value)


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at and updated_at.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(UTCDateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session.
        id and created_at are filled eagerly so callers can use them before flush.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()
        if getattr(self, "created_at", None) is None:
            self.created_at = utcnow()
