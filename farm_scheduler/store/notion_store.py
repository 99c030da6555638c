"""Record store adapter for the hosted Notion API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.errors import NotFoundError, TransientStoreError

from .base import RecordStore


class NotionRecordStore(RecordStore):
    """
    RecordStore over the Notion REST API.

    Every call is a single blocking request; there are no retries. HTTP 404
    (and ``object_not_found`` responses) become NotFoundError, everything else
    that fails becomes TransientStoreError.
    """

    PAGE_SIZE = 100

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.notion.com/v1",
        version: str = "2022-06-28",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": version,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, cfg: FarmSchedulerConfig) -> "NotionRecordStore":
        return cls(
            token=cfg.require_api_token(),
            base_url=cfg.api_base_url,
            version=cfg.api_version,
            timeout=cfg.request_timeout,
        )

    def close(self) -> None:
        self.client.close()

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        not_found_codes: tuple = (),
    ) -> Dict[str, Any]:
        try:
            response = self.client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            raise TransientStoreError(f"{method} {path} failed: {e}") from e

        if response.status_code < 400:
            try:
                return response.json()
            except ValueError as e:
                raise TransientStoreError(f"{method} {path} returned a non-JSON body: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        code = body.get("code", "")
        message = body.get("message") or response.text
        if response.status_code == 404 or code == "object_not_found" or code in not_found_codes:
            raise NotFoundError(message or f"{path} not found")
        raise TransientStoreError(f"{method} {path} failed ({response.status_code} {code}): {message}")

    def retrieve_container(self, container_id: str) -> Dict[str, Any]:
        # A page id answers with a validation error rather than a 404.
        return self._request("GET", f"/databases/{container_id}", not_found_codes=("validation_error",))

    def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/pages/{page_id}")

    def query_container(
        self,
        container_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        page_size: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        body: Dict[str, Any] = {}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts
        if page_size is not None:
            body["page_size"] = page_size
        data = self._request("POST", f"/databases/{container_id}/query", json=body)
        return data.get("results") or []

    def query_all_container_rows(self, container_id: str) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        while True:
            body: Dict[str, Any] = {"page_size": self.PAGE_SIZE}
            if cursor:
                body["start_cursor"] = cursor
            data = self._request("POST", f"/databases/{container_id}/query", json=body)
            results.extend(data.get("results") or [])
            if not data.get("has_more"):
                return results
            cursor = data.get("next_cursor")

    def list_children(self, page_id: str) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"page_size": self.PAGE_SIZE}
            if cursor:
                params["start_cursor"] = cursor
            data = self._request("GET", f"/blocks/{page_id}/children", params=params)
            results.extend(data.get("results") or [])
            if not data.get("has_more"):
                return results
            cursor = data.get("next_cursor")

    def create_container(self, parent_id: str, title: str, schema: Dict[str, Any]) -> str:
        data = self._request(
            "POST",
            "/databases",
            json={
                "parent": {"type": "page_id", "page_id": parent_id},
                "title": [{"type": "text", "text": {"content": title}}],
                "properties": schema,
            },
        )
        return data["id"]

    def create_row(self, container_id: str, fields: Dict[str, Any]) -> str:
        data = self._request(
            "POST",
            "/pages",
            json={"parent": {"database_id": container_id}, "properties": fields},
        )
        return data["id"]

    def update_row(self, row_id: str, fields: Dict[str, Any]) -> None:
        self._request("PATCH", f"/pages/{row_id}", json={"properties": fields})

    def update_container_schema(self, container_id: str, schema_patch: Dict[str, Any]) -> None:
        self._request("PATCH", f"/databases/{container_id}", json={"properties": schema_patch})

    def archive_row(self, row_id: str, archived: bool = True) -> None:
        self._request("PATCH", f"/pages/{row_id}", json={"archived": archived})
