"""Async client for calling the next hop of the chain."""

from .client import DownstreamClient
from .errors import ClientError, ServerError

__all__ = [
    "ClientError",
    "DownstreamClient",
    "ServerError",
]
