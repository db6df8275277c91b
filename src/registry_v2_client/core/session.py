"""aiohttp session creation and response decoding helpers."""

from typing import Any, Optional

import aiohttp

from ..exceptions import RegistryError
from .types import RegistryConfig


async def create_session(config: Optional[RegistryConfig] = None) -> aiohttp.ClientSession:
    """Create an aiohttp session for registry access.

    Args:
        config: Registry configuration; TLS verification and timeout are
            taken from it

    Returns:
        New client session, owned by the caller
    """
    insecure = config.insecure if config else False
    timeout = config.timeout if config else 30
    return aiohttp.ClientSession(
        connector=aiohttp.TCPConnector(ssl=not insecure),
        timeout=aiohttp.ClientTimeout(total=timeout),
    )


async def read_json(response: aiohttp.ClientResponse) -> Any:
    """Decode a response body as JSON regardless of its content type.

    Raises:
        RegistryError: If the body is not valid JSON
    """
    try:
        return await response.json(content_type=None)
    except ValueError as e:
        raise RegistryError(f"Invalid JSON response from {response.url}: {e}") from e
