"""Thin async client for the store REST API.

Every response body is an envelope ``{success, message?, data,
pagination?}``.  A ``success=false`` envelope, a non-2xx status, an
unreadable body and a transport failure all surface as
``RemoteServiceError`` carrying the server's message when there is one.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
import pydantic

from storefront.domain.exceptions import RemoteServiceError
from storefront.infrastructure.http.schemas import ApiEnvelope

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)


class ApiClient:

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Requests -------------------------------------------------------------

    async def get(self, path: str, params: dict[str, Any] | None = None) -> ApiEnvelope:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: pydantic.BaseModel | None = None) -> ApiEnvelope:
        return await self.request("POST", path, body=body)

    async def put(self, path: str, body: pydantic.BaseModel | None = None) -> ApiEnvelope:
        return await self.request("PUT", path, body=body)

    async def delete(self, path: str) -> ApiEnvelope:
        return await self.request("DELETE", path)

    async def request(
        self,
        method: str,
        path: str,
        body: pydantic.BaseModel | None = None,
        params: dict[str, Any] | None = None,
    ) -> ApiEnvelope:
        payload = (
            body.model_dump(mode="json", by_alias=True, exclude_none=True)
            if body is not None else None
        )
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, json=payload, params=params)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise RemoteServiceError(f"Could not reach the store service ({exc})") from exc

        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except (ValueError, pydantic.ValidationError) as exc:
            if response.is_success:
                raise RemoteServiceError(
                    "Unexpected response from the store service", response.status_code
                ) from exc
            raise RemoteServiceError(None, response.status_code) from exc

        if not response.is_success or not envelope.success:
            logger.info(
                "%s %s rejected (%d): %s", method, path, response.status_code, envelope.message
            )
            raise RemoteServiceError(envelope.message, response.status_code)
        return envelope


def decode(model: type[M], data: Any) -> M:
    """Validate an envelope's ``data`` against *model*."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        raise RemoteServiceError("Unexpected response from the store service") from exc
