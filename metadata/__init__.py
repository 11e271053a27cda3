from .errors import (
    CredentialUnavailable,
    MalformedUpstreamResponse,
    MediaSearchError,
    NotRegistered,
    UpstreamError,
)
from .types import MediaDetails, MediaItem, SearchResult

__all__ = [
    "CredentialUnavailable",
    "MalformedUpstreamResponse",
    "MediaDetails",
    "MediaItem",
    "MediaSearchError",
    "NotRegistered",
    "SearchResult",
    "UpstreamError",
]
