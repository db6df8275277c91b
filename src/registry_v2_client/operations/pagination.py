"""Paginated GET requests following ``Link: <url>; rel="next"`` headers."""

import logging
from typing import Any, AsyncIterator, Optional, Union

import aiohttp
from yarl import URL

from ..core.session import read_json
from ..exceptions import RegistryError
from ..transport.base import Request, Transport

LOGGER = logging.getLogger(__name__)


def get_next_link(response: aiohttp.ClientResponse) -> Optional[URL]:
    """Return the ``rel="next"`` target of the response's Link headers.

    All Link headers are considered, parameter order and quoting do not
    matter and relative targets are resolved against the response URL.

    Returns:
        Next page URL, or None when there are no more pages
    """
    link = response.links.get("next")
    if link is None:
        return None
    return link.get("url")


async def get_paginated_json(
    transport: Transport, url: Union[str, URL]
) -> tuple[Any, Optional[URL]]:
    """GET one page.

    Returns:
        Tuple of the decoded body and the next page URL (None on the last page)
    """
    async with await transport.send(Request.build("GET", url)) as response:
        data = await read_json(response)
        return data, get_next_link(response)


async def iterate_pages(
    transport: Transport, url: Union[str, URL], max_pages: Optional[int] = None
) -> AsyncIterator[Any]:
    """Yield decoded pages until the registry stops sending a next link.

    Args:
        transport: Transport pipeline
        url: First page URL
        max_pages: Raise ``RegistryError`` instead of fetching more pages than
            this; None follows links without limit
    """
    next_url: Optional[Union[str, URL]] = url
    pages = 0
    while next_url is not None:
        if max_pages is not None and pages >= max_pages:
            raise RegistryError(f"Pagination exceeded {max_pages} pages at {next_url}")
        LOGGER.debug("registry.paginate url=%s page=%d", next_url, pages)
        data, next_url = await get_paginated_json(transport, next_url)
        pages += 1
        yield data


async def walk_pages(
    transport: Transport,
    url: Union[str, URL],
    key: str,
    max_pages: Optional[int] = None,
) -> list[Any]:
    """Collect the ``key`` list of every page, in page order."""
    items: list[Any] = []
    async for page in iterate_pages(transport, url, max_pages):
        if isinstance(page, dict):
            items.extend(page.get(key) or [])
    return items
