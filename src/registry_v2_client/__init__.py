"""Registry API v2 Client - Async Python client for Docker Registry API v2."""

__version__ = "0.2.0"

from .core.registry_client import Registry
from .core.types import Descriptor, RegistryConfig, UploadSession
from .exceptions import (
    AuthenticationError,
    BlobUploadError,
    CannotReplayRequestBody,
    DigestMismatchError,
    HTTPStatusError,
    ManifestError,
    RegistryConnectionError,
    RegistryError,
)
from .media_types import DockerMediaTypes, MediaTypes
from .registry import (
    check_registry_connectivity,
    delete_image,
    delete_image_by_digest,
    get_manifest,
    get_manifest_digest,
    list_repositories,
    list_tags,
)
from .utils.body import bytes_body, file_body

__all__ = [
    "Registry",
    "RegistryConfig",
    "Descriptor",
    "UploadSession",
    "RegistryError",
    "RegistryConnectionError",
    "HTTPStatusError",
    "AuthenticationError",
    "CannotReplayRequestBody",
    "BlobUploadError",
    "ManifestError",
    "DigestMismatchError",
    "MediaTypes",
    "DockerMediaTypes",
    "bytes_body",
    "file_body",
    "check_registry_connectivity",
    "list_repositories",
    "list_tags",
    "get_manifest",
    "get_manifest_digest",
    "delete_image",
    "delete_image_by_digest",
]
