"""Requests and the base aiohttp transport."""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Optional, Protocol, Union

import aiohttp
from multidict import CIMultiDict
from yarl import URL

from ..core.session import create_session
from ..core.types import RegistryConfig
from ..exceptions import CannotReplayRequestBody

LOGGER = logging.getLogger(__name__)

# Zero-argument callable returning a fresh, unconsumed request payload
BodyFactory = Callable[[], Any]


@dataclass(frozen=True)
class Request:
    """An outgoing registry request.

    ``body`` is the payload for the first attempt. ``get_body`` produces a new
    copy of the same payload and is required to resend a request that has a
    body (see ``replay``).
    """

    method: str
    url: Union[str, URL]
    headers: CIMultiDict = field(default_factory=CIMultiDict)
    body: Any = None
    get_body: Optional[BodyFactory] = None

    @classmethod
    def build(
        cls,
        method: str,
        url: Union[str, URL],
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        get_body: Optional[BodyFactory] = None,
    ) -> "Request":
        if body is None and get_body is not None:
            body = get_body()
        return cls(method.upper(), url, CIMultiDict(headers or {}), body, get_body)

    @property
    def path(self) -> str:
        """Escaped path component of the request URL."""
        return URL(self.url).raw_path

    @property
    def replayable(self) -> bool:
        return self.body is None or self.get_body is not None

    def with_header(self, name: str, value: str) -> "Request":
        headers = CIMultiDict(self.headers)
        headers[name] = value
        return replace(self, headers=headers)

    def replay(self) -> "Request":
        """Copy of this request with a fresh body.

        Raises:
            CannotReplayRequestBody: If the request has a body but no factory
        """
        if self.body is None:
            return self
        if self.get_body is None:
            raise CannotReplayRequestBody(self.method, str(self.url))
        return replace(self, body=self.get_body())


class Transport(Protocol):
    """Anything able to send a request and return the raw response."""

    async def send(self, request: Request) -> aiohttp.ClientResponse: ...


async def drain(response: aiohttp.ClientResponse) -> bytes:
    """Read the whole response body and release the connection."""
    try:
        return await response.read()
    finally:
        response.release()


class SessionTransport:
    """Innermost transport: sends requests with an aiohttp session.

    The session is created on first use unless one is passed in. A session
    passed in is owned by the caller and is not closed by ``close``.
    """

    def __init__(
        self,
        config: RegistryConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.config = config
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = await create_session(self.config)
        return self._session

    async def send(self, request: Request) -> aiohttp.ClientResponse:
        session = await self._get_session()
        LOGGER.debug("transport.send method=%s url=%s", request.method, request.url)
        return await session.request(
            request.method,
            request.url,
            headers=request.headers,
            data=request.body,
        )

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None
