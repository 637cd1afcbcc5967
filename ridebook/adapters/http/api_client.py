"""
Backend HTTP Client

Thin async client shared by the fare and booking adapters. Handles the
backend's ``{success, data, error}`` envelope and turns every failure
(transport, timeout, HTTP status, malformed body, error envelope) into a
NetworkError subclass chosen by the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type

import httpx

from ...config import BackendConfig, get_config
from ...domain.errors import ConfigurationError, NetworkError

SESSION_EXPIRED = "Your session has expired. Please sign in again to continue."


class BackendClient:
    """Async JSON client for the pricing and booking backend."""

    def __init__(
        self,
        config: Optional[BackendConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Backend settings (base URL, timeout, paths)
            transport: Optional httpx transport, used by tests
        """
        self.config = config or get_config().backend
        if not self.config.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Backend URL must be http(s): {self.config.base_url!r}",
                setting_name="RIDEBOOK_API_BASE_URL",
            )
        self._logger = logging.getLogger(__name__)
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url.rstrip("/"),
            timeout=self.config.timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def post(
        self,
        path: str,
        payload: Dict[str, Any],
        error_type: Type[NetworkError] = NetworkError,
    ) -> Dict[str, Any]:
        """
        POST JSON and return the unwrapped response data.

        Args:
            path: API path appended to the base URL
            payload: JSON body
            error_type: NetworkError subclass raised on failure

        Returns:
            The ``data`` member of an envelope response, or the whole body
            when the backend answered without an envelope

        Raises:
            NetworkError: error_type on any failure
        """
        try:
            response = await self._client.post(path, json=payload)
        except httpx.TimeoutException as e:
            self._logger.warning("Backend request timed out", extra={"path": path})
            raise error_type("The request timed out. Please try again.", cause=e)
        except httpx.RequestError as e:
            self._logger.warning(
                "Backend request failed", extra={"path": path, "error": str(e)}
            )
            raise error_type("Unable to reach the booking service", cause=e)

        body = self._parse_json(response)

        if response.status_code == 401:
            raise error_type(SESSION_EXPIRED, status_code=401)
        if response.is_error:
            error = body.get("error") if isinstance(body, dict) else None
            raise self._error_from_envelope(
                error_type,
                error,
                default=f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        if not isinstance(body, dict):
            raise error_type(
                "Invalid response format from server",
                status_code=response.status_code,
            )

        if "success" in body:
            if not body["success"]:
                raise self._error_from_envelope(
                    error_type,
                    body.get("error"),
                    default="Request failed",
                    status_code=response.status_code,
                )
            data = body.get("data")
            return data if isinstance(data, dict) else {}

        if "error" in body:
            raise self._error_from_envelope(
                error_type,
                body["error"],
                default="Request failed",
                status_code=response.status_code,
            )

        return body

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _error_from_envelope(
        error_type: Type[NetworkError],
        error: Any,
        default: str,
        status_code: Optional[int],
    ) -> NetworkError:
        if not isinstance(error, dict):
            return error_type(default, status_code=status_code)
        return error_type(
            error.get("message") or default,
            status_code=status_code,
            code=error.get("code"),
            details=error.get("details"),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed
