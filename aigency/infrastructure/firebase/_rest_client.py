"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1 through
httpx.AsyncClient. Besides get/update/query it supports the two operations
task status propagation relies on:

- precondition updates (`currentDocument.updateTime`), which turn a
  read-then-write into a compare-and-set;
- batched writes through `:commit`, used to create a renewal's tasks at once.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import httpx

from aigency.infrastructure.firebase._rest_encoding import (
    decode_fields,
    encode_fields,
    encode_value,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"

_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "array-contains": "ARRAY_CONTAINS",
}


class DocumentExistsError(Exception):
    """Raised when a create hits an existing document id (ALREADY_EXISTS)."""


class PreconditionFailedError(Exception):
    """Raised when a write precondition no longer holds (document changed or missing)."""


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


def _error_status(resp: httpx.Response) -> str | None:
    """Return the google.rpc status name from an error body (e.g. FAILED_PRECONDITION)."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, list):
        body = body[0] if body else {}
    error = body.get("error") if isinstance(body, dict) else None
    return error.get("status") if isinstance(error, dict) else None


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: list[tuple[str, str]] | None = None,
) -> Any:
    """Perform an HTTP request against Firestore REST. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    resp = await client.request(method, url, headers=headers, json=body, params=params)
    if resp.status_code == 404:
        return None
    if resp.status_code >= 400:
        status = _error_status(resp)
        if status == "ALREADY_EXISTS":
            raise DocumentExistsError(f"Document already exists: {url}")
        if status in ("FAILED_PRECONDITION", "ABORTED"):
            raise PreconditionFailedError(f"Precondition failed ({status}): {url}")
        resp.raise_for_status()
    return resp.json() if resp.content else {}


class DocumentSnapshot:
    """Snapshot of a document: id, decoded data, and server update time."""

    def __init__(self, id_: str, data: dict, update_time: str | None = None):
        self.id = id_
        self._data = data
        # Kept verbatim (nanosecond precision) for use as a write precondition.
        self.update_time = update_time

    def to_dict(self) -> dict:
        return self._data

    @classmethod
    def from_document(cls, document: dict) -> DocumentSnapshot:
        name = document.get("name", "")
        return cls(
            name.split("/")[-1] if name else "",
            decode_fields(document),
            document.get("updateTime"),
        )


class DocumentReference:
    """Reference to a single document."""

    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self.path = path

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; None if it does not exist."""
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self.path}",
            access_token=await self._client.get_token(),
        )
        if not out:
            return None
        return DocumentSnapshot.from_document(out)

    async def update(
        self,
        data: dict[str, Any],
        *,
        last_update_time: str | None = None,
        must_exist: bool = True,
    ) -> DocumentSnapshot | None:
        """Update only the given fields of the document.

        With last_update_time the write succeeds only if the document was not
        modified since that snapshot; otherwise PreconditionFailedError. Without
        it, the document must exist (None if missing) unless must_exist is
        False, in which case a missing document is created.
        """
        params = [("updateMask.fieldPaths", key) for key in data]
        if last_update_time is not None:
            params.append(("currentDocument.updateTime", last_update_time))
        elif must_exist:
            params.append(("currentDocument.exists", "true"))
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self.path}",
            method="PATCH",
            body={"fields": encode_fields(data)},
            access_token=await self._client.get_token(),
            params=params,
        )
        if not out:
            return None
        return DocumentSnapshot.from_document(out)


class _Query:
    """Structured query over one collection (equality/comparison filters ANDed)."""

    def __init__(self, client: FirestoreRESTClient, parent: str, collection_id: str):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._filters: list[dict[str, Any]] = []

    def where(self, field: str, op: str, value: Any) -> _Query:
        self._filters.append(
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": _OP_MAP.get(op, op),
                    "value": encode_value(value),
                }
            }
        )
        return self

    def _structured_query(self) -> dict[str, Any]:
        structured: dict[str, Any] = {"from": [{"collectionId": self._collection_id}]}
        if len(self._filters) == 1:
            structured["where"] = self._filters[0]
        elif self._filters:
            structured["where"] = {
                "compositeFilter": {"op": "AND", "filters": self._filters}
            }
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Run the query and yield matching document snapshots."""
        resp = await _request_async(
            self._client._http,
            f"{_BASE}/{self._parent}:runQuery",
            method="POST",
            body={"structuredQuery": self._structured_query()},
            access_token=await self._client.get_token(),
        )
        for item in resp or []:
            if "document" in item:
                yield DocumentSnapshot.from_document(item["document"])


class CollectionReference:
    """Reference to a top-level collection."""

    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self._path = path.rstrip("/")

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    def where(self, field: str, op: str, value: Any) -> _Query:
        """Start a query; chain more .where() calls, then .stream()."""
        parent, _, collection_id = self._path.rpartition("/")
        return _Query(self._client, parent, collection_id).where(field, op, value)

    async def stream(self, page_size: int = 300) -> AsyncIterator[DocumentSnapshot]:
        """List every document in the collection, following page tokens."""
        page_token: str | None = None
        while True:
            params = [("pageSize", str(page_size))]
            if page_token:
                params.append(("pageToken", page_token))
            out = await _request_async(
                self._client._http,
                f"{_BASE}/{self._path}",
                access_token=await self._client.get_token(),
                params=params,
            )
            if not out:
                return
            for doc in out.get("documents", []):
                yield DocumentSnapshot.from_document(doc)
            page_token = out.get("nextPageToken")
            if not page_token:
                return


class FirestoreRESTClient:
    """Lightweight Firestore client using the REST API."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._prefix = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in a thread to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{collection_id}")

    async def create_all(self, documents: list[tuple[DocumentReference, dict[str, Any]]]) -> None:
        """Create several documents atomically; fails with DocumentExistsError if any exists."""
        writes = [
            {
                "update": {"name": ref.path, "fields": encode_fields(data)},
                "currentDocument": {"exists": False},
            }
            for ref, data in documents
        ]
        await _request_async(
            self._http,
            f"{_BASE}/{self._prefix}:commit",
            method="POST",
            body={"writes": writes},
            access_token=await self.get_token(),
        )
