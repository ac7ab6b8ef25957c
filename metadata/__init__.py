from .types import CanonicalMetadata, Platform, RawCandidate, RawDetail

__all__ = ["CanonicalMetadata", "Platform", "RawCandidate", "RawDetail"]
