"""Assembly of the authenticated transport stack."""

from typing import Optional

from ..core.types import RegistryConfig
from .base import Transport
from .basic import BasicTransport
from .bearer import TokenTransport
from .errors import ErrorTransport
from .tokens import TokenCache


def wrap_transport(
    transport: Transport,
    config: RegistryConfig,
    tokens: Optional[TokenCache] = None,
) -> Transport:
    """Build the transport stack around a base transport.

    Requests flow ``ErrorTransport -> BasicTransport -> TokenTransport ->
    transport``. Basic auth is left out when ``config.disable_basic_auth`` is
    set.
    """
    transport = TokenTransport(
        transport, username=config.username, password=config.password, tokens=tokens
    )
    if not config.disable_basic_auth:
        transport = BasicTransport(
            transport, username=config.username, password=config.password
        )
    return ErrorTransport(transport)
