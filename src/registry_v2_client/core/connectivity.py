"""Registry availability checks against the ``/v2/`` base endpoint."""

import logging
from typing import Mapping

import aiohttp

from ..exceptions import HTTPStatusError, RegistryConnectionError
from ..transport.base import Request, Transport

LOGGER = logging.getLogger(__name__)

API_VERSION_HEADER = "Docker-Distribution-Api-Version"
API_VERSION = "registry/2.0"


def check_api_version_header(headers: Mapping[str, str]) -> bool:
    """Whether response headers advertise the v2 registry API."""
    return headers.get(API_VERSION_HEADER) == API_VERSION


async def ping(transport: Transport, base_url: str) -> None:
    """GET ``/v2/`` through the transport pipeline.

    Raises:
        HTTPStatusError: If the registry answers with an error status
    """
    async with await transport.send(Request.build("GET", f"{base_url}/v2/")) as response:
        LOGGER.debug(
            "registry.ping url=%s status=%s v2=%s",
            base_url,
            response.status,
            check_api_version_header(response.headers),
        )


async def check_connectivity(transport: Transport, base_url: str) -> bool:
    """Check that the registry is reachable and speaks the v2 API.

    Returns:
        True if the registry is accessible

    Raises:
        RegistryConnectionError: If the registry cannot be reached or rejects
            the ping
    """
    try:
        await ping(transport, base_url)
    except HTTPStatusError as e:
        raise RegistryConnectionError(
            f"Registry at {base_url} does not support v2 API: {e.status}"
        ) from e
    except aiohttp.ClientError as e:
        raise RegistryConnectionError(f"Cannot connect to registry at {base_url}: {e}") from e
    return True
