"""Async HTTP client for calling the next hop of the chain."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..outcomes import CallOutcome, Failure, Success
from .errors import ClientError, ServerError

logger = logging.getLogger(__name__)


class DownstreamClient:
    """Async client performing the outbound call to the next hop.

    Calling the client with an endpoint address produces a ``Success``
    carrying the response payload, or a ``Failure`` carrying the reason.
    It never raises for HTTP or transport errors, so it can be handed
    straight to ``CircuitBreaker.fire``.

    Usage::

        async with DownstreamClient() as client:
            outcome = await client("http://next-hop/chain?count=2")

    Args:
        timeout: Transport-level request timeout in seconds. The breaker's
            call timeout is normally much shorter and takes precedence.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._client = httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> DownstreamClient:
        """Enter the async context manager.

        Returns:
            The client instance.
        """
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit the async context manager, closing the underlying HTTP client."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __call__(self, endpoint: str) -> CallOutcome:
        """Call ``endpoint`` and wrap the result as a call outcome."""
        try:
            payload = await self.get(endpoint)
        except ClientError as e:
            return Failure(str(e))
        except httpx.HTTPError as e:
            logger.debug("Transport error calling %s: %r", endpoint, e)
            return Failure(f"{type(e).__name__}: {e}" if str(e) else type(e).__name__)
        return Success(payload)

    async def get(self, endpoint: str) -> Any:
        """Send a GET request and return the parsed response body.

        Args:
            endpoint: Absolute URL of the next hop.

        Returns:
            Parsed JSON body, or the raw text for non-JSON responses.

        Raises:
            ServerError: If the next hop responds with a 5xx status code.
            ClientError: For any other non-2xx status code.
            httpx.HTTPError: On transport failures.
        """
        response = await self._client.get(endpoint)

        if response.status_code >= 500:
            detail = self._extract_detail(response)
            raise ServerError(status_code=response.status_code, message=detail)

        if response.status_code >= 400:
            detail = self._extract_detail(response)
            raise ClientError(status_code=response.status_code, message=detail)

        return self._parse_body(response)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            return response.json()
        return response.text

    @staticmethod
    def _extract_detail(response: httpx.Response) -> str:
        """Extract a human-readable error detail from a response.

        Tries the ``error`` key of a chain envelope, then a ``detail`` key;
        falls back to the raw response text.

        Args:
            response: The HTTP response to extract detail from.

        Returns:
            The error detail string.
        """
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            for key in ("error", "detail"):
                if body.get(key):
                    return str(body[key])
        return response.text
