"""aiohttp integration for the BlueGreen router."""

from .routing_middleware import (
    BASE_RESPONSE_KEY,
    CORRELATION_ID_KEY,
    ROUTING_DECISION_KEY,
    create_routing_middleware,
)

__all__ = [
    "BASE_RESPONSE_KEY",
    "CORRELATION_ID_KEY",
    "ROUTING_DECISION_KEY",
    "create_routing_middleware",
]
