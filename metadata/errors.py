"""Error kinds raised by the GOG adapters and the resilience policies."""

from __future__ import annotations


class MetadataError(Exception):
    pass


class NetworkError(MetadataError):
    """Transport failure or an unexpected HTTP status."""


class ParseError(MetadataError):
    """Upstream payload could not be decoded into the expected shape."""


class NotFound(MetadataError):
    """Definitive absence reported by the upstream. Never retried."""


class RateLimitExceeded(MetadataError):
    pass


class CapacityExceeded(MetadataError):
    pass
