"""Tool clients: vehicle registry (egress restricted) and licence plate recognition."""

from chatflow.tools.alpr import AlprClient
from chatflow.tools.egress import EgressSafeTransport, LiteralAddressBackend
from chatflow.tools.registry import RegistryClient

__all__ = ["AlprClient", "EgressSafeTransport", "LiteralAddressBackend", "RegistryClient"]
