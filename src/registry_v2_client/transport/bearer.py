"""Bearer token authentication decorator.

Implements the registry token authentication flow: a 401 response with a
``Bearer`` challenge triggers a token request against the challenge realm,
after which the original request is sent once more with the token.
"""

import logging
from typing import Optional

import aiohttp
from aiohttp import hdrs
from yarl import URL

from ..core.session import read_json
from ..exceptions import AuthenticationError, CannotReplayRequestBody, RegistryError
from .base import Request, Transport, drain
from .challenge import AuthChallenge, token_demand
from .tokens import TokenCache, repository_from_scope, scope_from_path

LOGGER = logging.getLogger(__name__)


class TokenTransport:
    """Obtain, cache and attach bearer tokens.

    Args:
        transport: Inner transport; token requests and retries go through it
        username: User for the token service, empty for anonymous tokens
        password: Password for the token service
        tokens: Token cache, a new one is created if omitted
    """

    def __init__(
        self,
        transport: Transport,
        username: str = "",
        password: str = "",
        tokens: Optional[TokenCache] = None,
    ) -> None:
        self.transport = transport
        self.username = username
        self.password = password
        self.tokens = tokens if tokens is not None else TokenCache()

    async def send(self, request: Request) -> aiohttp.ClientResponse:
        token = self.tokens.get(scope_from_path(request.path))
        if token:
            request = request.with_header(hdrs.AUTHORIZATION, f"Bearer {token}")

        response = await self.transport.send(request)
        challenge = token_demand(response)
        if challenge is None:
            return response

        await drain(response)
        return await self._auth_and_retry(challenge, request)

    async def _auth_and_retry(
        self, challenge: AuthChallenge, request: Request
    ) -> aiohttp.ClientResponse:
        if not request.replayable:
            raise CannotReplayRequestBody(request.method, str(request.url))

        auth_response = await self._request_token(challenge)
        if auth_response.status != 200:
            LOGGER.debug(
                "token.auth failed realm=%s status=%s",
                challenge.get("realm"),
                auth_response.status,
            )
            return auth_response
        token = await self._decode_token(auth_response)

        repository = repository_from_scope(challenge.get("scope"))
        if repository:
            self.tokens.set(repository, token)

        # A 401 on the retried request is returned as-is, not re-challenged
        retry = request.replay().with_header(hdrs.AUTHORIZATION, f"Bearer {token}")
        LOGGER.debug("token.retry method=%s url=%s", retry.method, retry.url)
        return await self.transport.send(retry)

    async def _request_token(self, challenge: AuthChallenge) -> aiohttp.ClientResponse:
        query = {"service": challenge.get("service")}
        scope = challenge.get("scope")
        if scope:
            query["scope"] = scope
        url = URL(challenge.get("realm")).update_query(query)

        headers = {}
        if self.username or self.password:
            headers[hdrs.AUTHORIZATION] = aiohttp.BasicAuth(
                self.username, self.password
            ).encode()

        LOGGER.debug("token.auth url=%s", url)
        return await self.transport.send(Request.build("GET", url, headers))

    async def _decode_token(self, response: aiohttp.ClientResponse) -> str:
        try:
            payload = await read_json(response)
        except RegistryError as e:
            raise AuthenticationError(f"Invalid token response: {e}") from e
        finally:
            response.release()

        token = None
        if isinstance(payload, dict):
            token = payload.get("token") or payload.get("access_token")
        if not token:
            raise AuthenticationError(f"Token response from {response.url} has no token")
        return token
