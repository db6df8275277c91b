"""Authenticated transport pipeline."""

from .base import BodyFactory, Request, SessionTransport, Transport
from .basic import BasicTransport
from .bearer import TokenTransport
from .challenge import AuthChallenge, parse_challenge_header, parse_challenges
from .errors import ErrorTransport
from .pipeline import wrap_transport
from .tokens import TokenCache

__all__ = [
    "AuthChallenge",
    "BasicTransport",
    "BodyFactory",
    "ErrorTransport",
    "Request",
    "SessionTransport",
    "TokenCache",
    "TokenTransport",
    "Transport",
    "parse_challenge_header",
    "parse_challenges",
    "wrap_transport",
]
