"""HTTP Basic authentication decorator."""

import aiohttp
from aiohttp import hdrs

from .base import Request, Transport


class BasicTransport:
    """Attach Basic credentials to every request when any are configured."""

    def __init__(self, transport: Transport, username: str = "", password: str = "") -> None:
        self.transport = transport
        self.username = username
        self.password = password

    async def send(self, request: Request) -> aiohttp.ClientResponse:
        if self.username or self.password:
            credentials = aiohttp.BasicAuth(self.username, self.password).encode()
            request = request.with_header(hdrs.AUTHORIZATION, credentials)
        return await self.transport.send(request)
