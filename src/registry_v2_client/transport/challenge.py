"""WWW-Authenticate challenge parsing.

https://distribution.github.io/distribution/spec/auth/token/
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import aiohttp
import www_authenticate
from aiohttp import hdrs
from multidict import CIMultiDictProxy

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthChallenge:
    """One authentication scheme offered by the server."""

    scheme: str
    parameters: dict[str, str] = field(default_factory=dict)

    def get(self, name: str, default: str = "") -> str:
        return self.parameters.get(name.lower(), default)


def parse_challenge_header(value: str) -> list[AuthChallenge]:
    """Parse one WWW-Authenticate header value.

    Args:
        value: Header value, e.g. ``Bearer realm="...",service="..."``

    Returns:
        Challenges in header order; empty if the value cannot be parsed
    """
    try:
        parsed = www_authenticate.parse(value)
    except ValueError:
        LOGGER.debug("Ignoring unparseable WWW-Authenticate value: %r", value)
        return []

    challenges = []
    for scheme, params in parsed.items():
        # token68 credentials and bare schemes carry no parameters
        parameters = (
            {key.lower(): val for key, val in params.items()}
            if isinstance(params, dict)
            else {}
        )
        challenges.append(AuthChallenge(scheme.lower(), parameters))
    return challenges


def parse_challenges(values: Iterable[str]) -> list[AuthChallenge]:
    """Parse every WWW-Authenticate value of a response."""
    challenges: list[AuthChallenge] = []
    for value in values:
        challenges.extend(parse_challenge_header(value))
    return challenges


def bearer_challenge(headers: CIMultiDictProxy) -> Optional[AuthChallenge]:
    """Return the first usable bearer challenge from response headers."""
    for challenge in parse_challenges(headers.getall(hdrs.WWW_AUTHENTICATE, [])):
        if challenge.scheme == "bearer" and challenge.get("realm"):
            return challenge
    return None


def token_demand(response: aiohttp.ClientResponse) -> Optional[AuthChallenge]:
    """Return the bearer challenge of a 401 response, or None."""
    if response.status != 401:
        return None
    return bearer_challenge(response.headers)
