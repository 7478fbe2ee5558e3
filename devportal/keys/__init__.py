"""API key registry (API Gateway) access."""

from devportal.keys.registry import ApiGatewayKeyRegistry, KeyRegistry

__all__ = ["ApiGatewayKeyRegistry", "KeyRegistry"]
