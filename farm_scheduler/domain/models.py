"""SQLAlchemy models for the local record store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class PageRecord(Base):
    """A plain page that can hold child containers (e.g. the schedule root)."""

    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(64), unique=True, nullable=False)
    title = Column(String(200), nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<PageRecord(uid='{self.uid}', title='{self.title}')>"


class ContainerRecord(Base):
    """A schema'd collection of rows, optionally parented under a page."""

    __tablename__ = "containers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(64), unique=True, nullable=False)
    parent_uid = Column(String(64), nullable=True, index=True)
    title = Column(String(200), nullable=False, default="")
    schema = Column(JSON, nullable=False, default=dict)  # field name -> {"type": kind, kind: config}
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    rows = relationship("RowRecord", back_populates="container", order_by="RowRecord.id")

    def __repr__(self) -> str:
        return f"<ContainerRecord(uid='{self.uid}', title='{self.title}')>"


class RowRecord(Base):
    """One row with typed field values inside a container."""

    __tablename__ = "rows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(64), unique=True, nullable=False)
    container_id = Column(Integer, ForeignKey("containers.id"), nullable=False)
    properties = Column(JSON, nullable=False, default=dict)  # field name -> value shape
    archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    container = relationship("ContainerRecord", back_populates="rows")

    def __repr__(self) -> str:
        return f"<RowRecord(uid='{self.uid}', container={self.container_id}, archived={self.archived})>"
