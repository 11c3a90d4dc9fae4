"""
HTTP delivery of serialized batches to the Better Stack ingestion endpoint.

One POST per call: no retry, no backoff and no timeout. Redelivery is the
durable queue's job.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable

import httpx

from ...core.errors import DeliveryError

DoneCallback = Callable[[httpx.Response], Any]


class DeliveryClient:
    """Thin wrapper around ``httpx.AsyncClient`` that posts JSON payloads."""

    def __init__(
        self,
        *,
        endpoint: str,
        token: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self._client = client
        self._owns_client = client is None

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=None)
        return self._client

    async def send(self, payload: str, done: DoneCallback | None = None) -> Any:
        """POST ``payload`` and return the response (or ``done``'s result).

        Raises:
            DeliveryError: If the endpoint answers with a non-2xx status.
            httpx.HTTPError: On transport failures, unmodified.
        """
        client = self._get_client()
        response = await client.post(
            self._endpoint,
            content=payload.encode("utf-8"),
            headers=self._headers,
        )
        if not response.is_success:
            snippet = None
            try:
                snippet = response.text[:256]
            except Exception:
                snippet = None
            raise DeliveryError(
                f"ingestion endpoint responded with status {response.status_code}",
                status_code=response.status_code,
                endpoint=self._endpoint,
                body=snippet,
            )
        if done is None:
            return response
        result = done(response)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


__all__ = ["DeliveryClient", "DoneCallback"]
