"""Record store interface that every store adapter must implement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class RecordStore(ABC):
    """
    Abstract base class for record store adapters.

    The adapter is the only component that talks to the hosted record store.
    Containers are returned as ``{"id", "title", "properties"}`` where
    ``properties`` maps field name to ``{"type": kind, kind: config}``. Rows
    are returned as ``{"id", "properties", "archived"}`` where ``properties``
    maps field name to a typed value (``{"type": kind, kind: value}``).

    Adapters raise NotFoundError for missing objects and TransientStoreError
    for every other failure. Timeouts, retries and rate limiting are the
    adapter's business.
    """

    @abstractmethod
    def retrieve_container(self, container_id: str) -> Dict[str, Any]:
        """
        Get a container's title and schema.

        Raises:
            NotFoundError: If ``container_id`` is not a queryable container
        """

    @abstractmethod
    def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        """Get a single row by id."""

    @abstractmethod
    def query_container(
        self,
        container_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        page_size: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Get one page of rows.

        Args:
            container_id: Container to query
            filter: ``{"property": name, kind: {"equals": value}}``
            sorts: ``[{"property": name, "direction": "ascending" | "descending"}]``
            page_size: Maximum rows to return
        """

    @abstractmethod
    def query_all_container_rows(self, container_id: str) -> List[Dict[str, Any]]:
        """Get every non-archived row, paginating transparently."""

    @abstractmethod
    def list_children(self, page_id: str) -> List[Dict[str, Any]]:
        """Get child blocks of a page; containers appear as ``child_database`` blocks."""

    @abstractmethod
    def create_container(self, parent_id: str, title: str, schema: Dict[str, Any]) -> str:
        """Create a container under a page and return its id."""

    @abstractmethod
    def create_row(self, container_id: str, fields: Dict[str, Any]) -> str:
        """Create a row and return its id."""

    @abstractmethod
    def update_row(self, row_id: str, fields: Dict[str, Any]) -> None:
        """Overwrite the given fields of a row."""

    @abstractmethod
    def update_container_schema(self, container_id: str, schema_patch: Dict[str, Any]) -> None:
        """Merge a schema patch into a container's schema."""

    @abstractmethod
    def archive_row(self, row_id: str, archived: bool = True) -> None:
        """Soft-delete (or restore) a row."""
