from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..core.errors import (
    ErrorCategory,
    UpstreamRejectedError,
    UpstreamTransientError,
    classify_http_status,
)
from ..core.retry import RetryConfig, retry_transient


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class HttpProvider(Provider):
    """Provider backed by a JSON REST API.

    All requests go through ``_request_json`` so that every dependency reports
    failures the same way: network errors, 429 and 5xx become
    ``UpstreamTransientError``; other non-2xx responses and payloads carrying an
    ``error`` field become ``UpstreamRejectedError``.
    """

    def __init__(self, retry_config: Optional[RetryConfig] = None) -> None:
        self.retry_config = retry_config or RetryConfig.from_settings()

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Provider not configured"}
        return {"status": "configured"}

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        retry: bool = False,
        allow_error_payload: bool = False,
        **kwargs: Any,
    ) -> Any:
        async def _once() -> Any:
            return await self._send(method, url, allow_error_payload=allow_error_payload, **kwargs)

        if retry:
            return await retry_transient(_once, self.retry_config, description=f"{self.name} {method} {url}")
        return await _once()

    async def _send(self, method: str, url: str, *, allow_error_payload: bool, **kwargs: Any) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise UpstreamTransientError(f"{self.name} unreachable: {exc}", provider=self.name) from exc

        payload = _safe_json(response)

        if response.status_code >= 400:
            detail = _error_detail(payload) or f"HTTP {response.status_code}"
            if classify_http_status(response.status_code) is ErrorCategory.UPSTREAM_TRANSIENT:
                raise UpstreamTransientError(
                    f"{self.name} temporarily unavailable: {detail}",
                    provider=self.name,
                    status_code=response.status_code,
                    retry_after=_retry_after(response),
                )
            raise UpstreamRejectedError(
                f"{self.name} rejected the request: {detail}",
                provider=self.name,
                status_code=response.status_code,
            )

        if payload is None:
            raise UpstreamRejectedError(f"{self.name} returned a non-JSON response", provider=self.name)

        if not allow_error_payload and isinstance(payload, dict) and payload.get("error"):
            raise UpstreamRejectedError(
                f"{self.name} error: {_error_detail(payload)}",
                provider=self.name,
                status_code=response.status_code,
            )

        return payload


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


# Honoured up to this many seconds; longer waits fall back to the linear backoff
MAX_RETRY_AFTER_S = 30.0


def _retry_after(response: httpx.Response) -> Optional[float]:
    """Seconds from a numeric ``Retry-After`` header, if present and sane."""
    value = response.headers.get("retry-after")
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    if seconds < 0 or seconds > MAX_RETRY_AFTER_S:
        return None
    return seconds


def _error_detail(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error") or payload.get("message") or payload.get("cause")
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(error) if error else None
