"""Translation of failed HTTP responses into exceptions."""

import aiohttp

from ..exceptions import HTTPStatusError
from .base import Request, Transport, drain


class ErrorTransport:
    """Raise ``HTTPStatusError`` for any response with status 400 or above.

    The failed response is read completely and released before raising, so
    its connection goes back to the pool.
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    async def send(self, request: Request) -> aiohttp.ClientResponse:
        response = await self.transport.send(request)
        if response.status >= 400:
            body = await drain(response)
            raise HTTPStatusError(response.status, body, str(response.url), request.method)
        return response
