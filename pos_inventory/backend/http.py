"""
REST document store client.

Talks to a JSON document service laid out as:

    GET    {base_url}/{collection}          -> list of documents
    POST   {base_url}/{collection}          -> stored document
    GET    {base_url}/{collection}/{id}     -> document (404 if absent)
    PATCH  {base_url}/{collection}/{id}     -> updated document (404 if absent)
    DELETE {base_url}/{collection}/{id}     -> 2xx (404 if absent)
"""

import logging
from typing import Any, Optional

import httpx

from ..errors import BackendError
from .base import BackingStore, DocumentDict

logger = logging.getLogger(__name__)


class HttpBackingStore(BackingStore):
    """Backing store over httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: Root URL of the document service
            timeout: Request timeout in seconds
            client: Preconfigured client (its base_url is used as-is)
        """
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def _request(
        self,
        method: str,
        path: str,
        collection: str,
        json: Any = None,
        allow_404: bool = False,
    ) -> Optional[httpx.Response]:
        logger.debug(f"{method} {path}")
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise BackendError(f"{method} {path} failed: {e}", collection) from e

        if allow_404 and response.status_code == 404:
            return None
        if response.is_error:
            raise BackendError(
                f"{method} {path} returned HTTP {response.status_code}", collection
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, collection: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Invalid JSON from document store: {e}", collection) from e

    async def fetch_all(self, collection: str) -> list[DocumentDict]:
        response = await self._request("GET", f"/{collection}", collection)
        payload = self._json(response, collection)
        if not isinstance(payload, list):
            raise BackendError(f"Expected a list for {collection}", collection)
        return payload

    async def fetch_by_id(self, collection: str, doc_id: str) -> Optional[DocumentDict]:
        response = await self._request(
            "GET", f"/{collection}/{doc_id}", collection, allow_404=True
        )
        if response is None:
            return None
        return self._json(response, collection)

    async def insert(self, collection: str, document: DocumentDict) -> DocumentDict:
        response = await self._request("POST", f"/{collection}", collection, json=document)
        return self._json(response, collection)

    async def update(
        self, collection: str, doc_id: str, fields: DocumentDict
    ) -> Optional[DocumentDict]:
        response = await self._request(
            "PATCH", f"/{collection}/{doc_id}", collection, json=fields, allow_404=True
        )
        if response is None:
            return None
        return self._json(response, collection)

    async def remove(self, collection: str, doc_id: str) -> bool:
        response = await self._request(
            "DELETE", f"/{collection}/{doc_id}", collection, allow_404=True
        )
        return response is not None

    async def close(self) -> None:
        await self._client.aclose()
