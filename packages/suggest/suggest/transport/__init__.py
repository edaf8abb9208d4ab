"""Suggest transports: protocol, httpx, stub."""

from suggest.transport.base import SuggestTransport
from suggest.transport.http_client import HttpxTransport
from suggest.transport.stub import StubTransport

__all__ = [
    "SuggestTransport",
    "HttpxTransport",
    "StubTransport",
]
