"""
Plain endpoint client: a single httpx client with auth hook and retries.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

from .auth import apply_auth_hook
from .config import calculate_backoff_delay, is_retryable_error, is_retryable_status
from .types import AuthHook, RetryConfig

logger = logging.getLogger(__name__)


class EndpointClient(httpx.AsyncClient):
    """
    httpx.AsyncClient for endpoints that do not need address failover.

    Every outgoing request goes through the auth hook (which may mutate the
    request or return a replacement) and is retried on network errors and
    retryable statuses (429, 5xx including Proxmox's 596) with exponential
    backoff. Once retries are exhausted the last response is returned, or
    the last error raised.

    Example:
        client = EndpointClient(
            base_url='https://192.168.1.10:8006/api2/json',
            auth_hook=create_pve_auth_hook(token_id, secret),
            retry_config=RetryConfig(max_retries=3),
        )
        response = await client.get('/nodes')
    """

    def __init__(
        self,
        *,
        auth_hook: Optional[AuthHook] = None,
        retry_config: Optional[RetryConfig] = None,
        endpoint_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._auth_hook = auth_hook
        self._retry_config = retry_config or RetryConfig()
        self._endpoint_name = endpoint_name or str(self.base_url)

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry_config

    async def send(self, request: httpx.Request, **kwargs: Any) -> httpx.Response:
        config = self._retry_config
        retry = 0

        while True:
            prepared = await apply_auth_hook(self._auth_hook, request)
            try:
                response = await super().send(prepared, **kwargs)
            except httpx.HTTPError as e:
                if retry >= config.max_retries or not is_retryable_error(e):
                    raise
                cause = f"{type(e).__name__}: {e}"
            else:
                if retry >= config.max_retries or not is_retryable_status(response.status_code, config):
                    return response
                cause = f"status {response.status_code}"
                await response.aclose()

            retry += 1
            delay = calculate_backoff_delay(retry, config)
            logger.warning(
                f"EndpointClient.send: retrying {request.method} request for {self._endpoint_name} "
                f"(attempt {retry}) due to: {cause}"
            )
            await asyncio.sleep(delay)
