"""Media catalogue collaborators."""

from contentkit.media.client import MediaApiAuth, MediaApiClient, create_client
from contentkit.media.memory import InMemoryMediaRepository
from contentkit.media.models import Collection, Media

__all__ = [
    "Collection",
    "InMemoryMediaRepository",
    "Media",
    "MediaApiAuth",
    "MediaApiClient",
    "create_client",
]
