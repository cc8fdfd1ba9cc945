"""API gateway: contract plus the direct and proxy implementations."""

from .contract import ActionGateway, GatewayError, KeyValidation, UpdateResponse
from .proxy import ProxyGateway
from .upstream import SafetyCultureGateway

__all__ = [
    "ActionGateway",
    "GatewayError",
    "KeyValidation",
    "UpdateResponse",
    "ProxyGateway",
    "SafetyCultureGateway",
]
