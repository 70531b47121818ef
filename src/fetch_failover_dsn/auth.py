"""
Token auth hooks for Proxmox VE and Proxmox Backup Server endpoints.
"""
import inspect
import logging
from typing import Callable, Optional

import httpx

from .types import AuthHook

logger = logging.getLogger(__name__)


def _mask_value(value: Optional[str], visible_chars: int = 10) -> str:
    """Mask sensitive value for logging, showing the first characters."""
    if not value:
        return "<empty>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


async def apply_auth_hook(auth_hook: Optional[AuthHook], request: httpx.Request) -> httpx.Request:
    """
    Run an auth hook on an outgoing request.

    Hooks may be sync or async, and may mutate the request in place or
    return a replacement. Exceptions raised by the hook propagate.
    """
    if auth_hook is None:
        return request
    result = auth_hook(request)
    if inspect.isawaitable(result):
        result = await result
    return result if isinstance(result, httpx.Request) else request


def _create_token_hook(
    scheme: str,
    separator: str,
    endpoint_name: str,
    token_id: Optional[str],
    token_secret: Optional[str],
) -> Callable[[httpx.Request], None]:
    def hook(request: httpx.Request) -> None:
        if not (token_id and token_secret):
            logger.error(
                f"auth: endpoint {endpoint_name} is missing required API token credentials "
                f"(token_id={_mask_value(token_id)}, token_secret={_mask_value(token_secret)})"
            )
            return
        request.headers["Authorization"] = f"{scheme}={token_id}{separator}{token_secret}"
        logger.debug(f"auth: {scheme} header set for {endpoint_name}, token_id={_mask_value(token_id)}")

    return hook


def create_pve_auth_hook(
    token_id: Optional[str],
    token_secret: Optional[str],
    endpoint_name: str = "pve",
) -> Callable[[httpx.Request], None]:
    """
    Auth hook for Proxmox VE: Authorization: PVEAPIToken=<token_id>=<secret>

    Example:
        hook = create_pve_auth_hook('root@pam!monitor', secret)
        client = FailoverClient(config, auth_hook=hook)
    """
    return _create_token_hook("PVEAPIToken", "=", endpoint_name, token_id, token_secret)


def create_pbs_auth_hook(
    token_id: Optional[str],
    token_secret: Optional[str],
    endpoint_name: str = "pbs",
) -> Callable[[httpx.Request], None]:
    """Auth hook for Proxmox Backup Server: Authorization: PBSAPIToken=<token_id>:<secret>"""
    return _create_token_hook("PBSAPIToken", ":", endpoint_name, token_id, token_secret)
