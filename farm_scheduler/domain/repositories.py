"""Repository classes for data access."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from .models import ContainerRecord, PageRecord, RowRecord


def new_uid() -> str:
    return str(uuid.uuid4())


class PageRepository:
    """Repository for page data access."""

    @staticmethod
    def get_by_uid(session: Session, uid: str) -> Optional[PageRecord]:
        """Get page by external id."""
        return session.query(PageRecord).filter(PageRecord.uid == uid).first()

    @staticmethod
    def create(session: Session, title: str, uid: str | None = None) -> PageRecord:
        """Create a new page."""
        page = PageRecord(uid=uid or new_uid(), title=title)
        session.add(page)
        session.commit()
        session.refresh(page)
        return page


class ContainerRepository:
    """Repository for container data access."""

    @staticmethod
    def get_by_uid(session: Session, uid: str) -> Optional[ContainerRecord]:
        """Get container by external id."""
        return session.query(ContainerRecord).filter(ContainerRecord.uid == uid).first()

    @staticmethod
    def get_children(session: Session, parent_uid: str) -> List[ContainerRecord]:
        """Get all containers parented under a page, in creation order."""
        return (
            session.query(ContainerRecord)
            .filter(ContainerRecord.parent_uid == parent_uid)
            .order_by(ContainerRecord.id)
            .all()
        )

    @staticmethod
    def create(
        session: Session,
        title: str,
        schema: Dict[str, Any],
        parent_uid: str | None = None,
        uid: str | None = None,
    ) -> ContainerRecord:
        """Create a new container."""
        container = ContainerRecord(
            uid=uid or new_uid(),
            parent_uid=parent_uid,
            title=title,
            schema=schema,
        )
        session.add(container)
        session.commit()
        session.refresh(container)
        return container

    @staticmethod
    def update_schema(session: Session, container: ContainerRecord, schema: Dict[str, Any]) -> ContainerRecord:
        """Replace a container's schema."""
        container.schema = schema
        session.commit()
        return container


class RowRepository:
    """Repository for row data access."""

    @staticmethod
    def get_by_uid(session: Session, uid: str) -> Optional[RowRecord]:
        """Get row by external id."""
        return session.query(RowRecord).filter(RowRecord.uid == uid).first()

    @staticmethod
    def get_active(session: Session, container: ContainerRecord) -> List[RowRecord]:
        """Get all non-archived rows of a container, in store order."""
        return (
            session.query(RowRecord)
            .filter(RowRecord.container_id == container.id, RowRecord.archived.is_(False))
            .order_by(RowRecord.id)
            .all()
        )

    @staticmethod
    def create(session: Session, container: ContainerRecord, properties: Dict[str, Any]) -> RowRecord:
        """Create a new row."""
        row = RowRecord(uid=new_uid(), container_id=container.id, properties=properties)
        session.add(row)
        session.commit()
        session.refresh(row)
        return row

    @staticmethod
    def update_properties(session: Session, row: RowRecord, properties: Dict[str, Any]) -> RowRecord:
        """Replace a row's field values."""
        row.properties = properties
        session.commit()
        return row

    @staticmethod
    def set_archived(session: Session, row: RowRecord, archived: bool) -> RowRecord:
        """Archive or restore a row."""
        row.archived = archived
        session.commit()
        return row
