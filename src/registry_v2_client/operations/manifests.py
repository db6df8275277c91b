"""Manifest fetch, store and delete, including manifest-list resolution."""

import json
import logging
from typing import Any, Callable, Optional, Union

from aiohttp import hdrs

from ..core.session import read_json
from ..exceptions import ManifestError
from ..media_types import DockerMediaTypes, MediaTypes
from ..transport.base import Request, Transport
from ..utils.body import bytes_body
from ..utils.digest import calculate_digest, validate_digest

LOGGER = logging.getLogger(__name__)

CONTENT_DIGEST_HEADER = "Docker-Content-Digest"

SCHEMA1_MEDIA_TYPES = (
    DockerMediaTypes.DISTRIBUTION_MANIFEST_V1_SIGNED,
    DockerMediaTypes.DISTRIBUTION_MANIFEST_V1,
    MediaTypes.APPLICATION_JSON,
)


def _media_type(content_type: Optional[str]) -> str:
    return (content_type or "").split(";", 1)[0].strip()


async def fetch_manifest(
    transport: Transport, manifest_url: str, *accept: str
) -> tuple[str, Any]:
    """GET a manifest.

    Args:
        transport: Transport pipeline
        manifest_url: ``/v2/<name>/manifests/<reference>`` URL
        accept: Media types to offer in the Accept header

    Returns:
        Tuple of the response media type and the decoded manifest
    """
    headers = {hdrs.ACCEPT: ", ".join(accept)} if accept else None
    async with await transport.send(Request.build("GET", manifest_url, headers)) as response:
        media_type = _media_type(response.headers.get(hdrs.CONTENT_TYPE))
        return media_type, await read_json(response)


async def get_manifest_v1(transport: Transport, manifest_url: str) -> Any:
    """Fetch a schema1 manifest (signed or unsigned)."""
    media_type, manifest = await fetch_manifest(
        transport, manifest_url, *SCHEMA1_MEDIA_TYPES[:2]
    )
    if media_type not in SCHEMA1_MEDIA_TYPES:
        raise ManifestError(f"Unexpected schema1 manifest media type: {media_type}")
    return manifest


def validate_manifest_list(manifest_list: Any) -> list[dict]:
    """Check a decoded manifest list and return its entries.

    Raises:
        ManifestError: If the document is not a manifest list or lists nothing
    """
    if not isinstance(manifest_list, dict):
        raise ManifestError("Manifest list is not a JSON object")
    media_type = manifest_list.get("mediaType")
    if media_type != DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2:
        raise ManifestError(
            "mediaType in manifest list should be "
            f"'{DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2}' not '{media_type}'"
        )
    entries = manifest_list.get("manifests") or []
    if not entries:
        raise ManifestError("Manifest list contains no manifests")
    return entries


async def get_manifest_list(transport: Transport, manifest_url: str) -> dict:
    """Fetch a manifest list and validate its media type."""
    _, manifest_list = await fetch_manifest(
        transport, manifest_url, DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2
    )
    validate_manifest_list(manifest_list)
    return manifest_list


def select_platform_manifest(manifest_list: Any, architecture: str = "amd64") -> dict:
    """Pick the list entry to resolve for a single-platform request.

    The first entry whose ``platform.architecture`` equals ``architecture``
    wins; without a match the first entry is used.

    Raises:
        ManifestError: If the list is invalid or empty
    """
    entries = validate_manifest_list(manifest_list)
    for entry in entries:
        platform = entry.get("platform") or {}
        if platform.get("architecture") == architecture:
            return entry
    return entries[0]


async def resolve_manifest_v2(
    transport: Transport,
    manifest_url: Callable[[str], str],
    reference: str,
    architecture: str = "amd64",
) -> dict:
    """Fetch a schema2 manifest, resolving a manifest list to one platform.

    Args:
        transport: Transport pipeline
        manifest_url: Builds the manifest URL for a reference
        reference: Tag or digest
        architecture: Preferred platform architecture

    Raises:
        ManifestError: On an unexpected media type or an empty manifest list
    """
    media_type, manifest = await fetch_manifest(
        transport,
        manifest_url(reference),
        DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
        DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2,
    )
    if media_type == DockerMediaTypes.DISTRIBUTION_MANIFEST_V2:
        return manifest
    if media_type == DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2:
        entry = select_platform_manifest(manifest, architecture)
        LOGGER.debug(
            "registry.manifest.resolve reference=%s digest=%s architecture=%s",
            reference,
            entry.get("digest"),
            (entry.get("platform") or {}).get("architecture"),
        )
        return await resolve_manifest_v2(
            transport, manifest_url, entry["digest"], architecture
        )
    raise ManifestError(f"Unexpected manifest media type: {media_type}")


def manifest_payload(manifest: Union[bytes, str, dict]) -> bytes:
    """Serialize a manifest for upload; bytes are sent unchanged."""
    if isinstance(manifest, bytes):
        return manifest
    if isinstance(manifest, str):
        return manifest.encode("utf-8")
    return json.dumps(manifest).encode("utf-8")


async def put_manifest(
    transport: Transport,
    manifest_url: str,
    manifest: Union[bytes, str, dict],
    media_type: str = DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
) -> str:
    """Store a manifest.

    Returns:
        Digest reported by the registry, or the digest of the payload when the
        registry does not report one
    """
    payload = manifest_payload(manifest)
    request = Request.build(
        "PUT",
        manifest_url,
        {hdrs.CONTENT_TYPE: media_type},
        get_body=bytes_body(payload),
    )
    async with await transport.send(request) as response:
        digest = response.headers.get(CONTENT_DIGEST_HEADER)
    return digest or calculate_digest(payload)


async def delete_manifest(transport: Transport, manifest_url: str) -> None:
    async with await transport.send(Request.build("DELETE", manifest_url)):
        pass


async def get_manifest_digest(
    transport: Transport,
    manifest_url: str,
    media_type: str = DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
) -> str:
    """HEAD a manifest and return its ``Docker-Content-Digest``.

    Raises:
        ManifestError: If the header is missing or not a valid digest
    """
    request = Request.build("HEAD", manifest_url, {hdrs.ACCEPT: media_type})
    async with await transport.send(request) as response:
        digest = response.headers.get(CONTENT_DIGEST_HEADER, "")
    if not validate_digest(digest):
        raise ManifestError(f"Invalid or missing manifest digest header: {digest!r}")
    return digest
