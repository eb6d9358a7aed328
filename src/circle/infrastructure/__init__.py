"""Infrastructure layer: concrete implementations of application ports."""

from circle.infrastructure.codecs import CsvContactCodec, JsonContactCodec, default_codecs
from circle.infrastructure.http import (
    DEFAULT_BASE_URL,
    ApiTransport,
    AuthClient,
    DirectoryClient,
)
from circle.infrastructure.phone import normalize_phone
from circle.infrastructure.storage import InMemoryStorage, JsonFileStorage

__all__ = [
    "DEFAULT_BASE_URL",
    "ApiTransport",
    "AuthClient",
    "CsvContactCodec",
    "DirectoryClient",
    "InMemoryStorage",
    "JsonContactCodec",
    "JsonFileStorage",
    "default_codecs",
    "normalize_phone",
]
