"""Docker Registry API v2 async client implementation."""

import logging
from contextlib import asynccontextmanager
from os import PathLike
from typing import Any, AsyncIterator, Optional, Union

import aiohttp

from ..media_types import DockerMediaTypes
from ..operations import blobs, manifests
from ..operations import repositories as listing
from ..transport.base import BodyFactory, SessionTransport, Transport
from ..transport.pipeline import wrap_transport
from ..transport.tokens import TokenCache
from ..utils.body import file_body
from ..utils.digest import calculate_file_digest, validate_digest
from .connectivity import check_connectivity, ping
from .types import Descriptor, RegistryConfig, UploadSession

LOGGER = logging.getLogger(__name__)


def _check_digest(digest: str) -> None:
    if not validate_digest(digest):
        raise ValueError(f"Invalid digest format: {digest}")


class Registry:
    """Docker Registry API v2 async client.

    Every request goes through the authenticated transport pipeline: bearer
    tokens are obtained on demand and cached per repository for the lifetime
    of the client.

    Usage::

        config = RegistryConfig(url="https://registry-1.docker.io")
        async with Registry(config) as registry:
            tags = await registry.tags("library/nginx")
    """

    def __init__(
        self,
        config: RegistryConfig,
        session: Optional[aiohttp.ClientSession] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        """Initialize the registry client.

        Args:
            config: Registry configuration
            session: aiohttp session to use; created on first request if omitted
                and closed with the client
            transport: Base transport replacing the aiohttp session transport
        """
        self.config = config
        self.url = config.base_url
        self.tokens = TokenCache()
        self._base = transport or SessionTransport(config, session)
        self.transport = wrap_transport(self._base, config, self.tokens)

    async def __aenter__(self) -> "Registry":
        if self.config.do_initial_ping:
            try:
                await self.ping()
            except Exception:
                await self.close()
                raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the client session if the client owns it."""
        close = getattr(self._base, "close", None)
        if close is not None:
            await close()

    def _url(self, template: str, *args: Any) -> str:
        return self.url + "/v2" + template % args

    # Connectivity

    async def ping(self) -> None:
        """GET ``/v2/``; raises ``HTTPStatusError`` if the registry refuses."""
        LOGGER.info("registry.ping url=%s", self.url)
        await ping(self.transport, self.url)

    async def check_connectivity(self) -> bool:
        return await check_connectivity(self.transport, self.url)

    # Listing

    async def repositories(self, max_pages: Optional[int] = None) -> list[str]:
        """List all repositories of the registry, following pagination."""
        url = self._url("/_catalog")
        LOGGER.info("registry.repositories url=%s", url)
        return await listing.list_repositories(self.transport, url, max_pages)

    catalog = repositories

    async def tags(self, repository: str, max_pages: Optional[int] = None) -> list[str]:
        """List all tags of a repository, following pagination."""
        url = self._url("/%s/tags/list", repository)
        LOGGER.info("registry.tags url=%s repository=%s", url, repository)
        return await listing.list_tags(self.transport, url, max_pages)

    async def images(self, repository: str, max_pages: Optional[int] = None) -> list[str]:
        """List image digests of a repository.

        Relies on the ``manifest`` map Google Container Registry adds to tag
        listings; other registries return an empty list.
        """
        url = self._url("/%s/tags/list", repository)
        LOGGER.info("registry.images url=%s repository=%s", url, repository)
        return await listing.list_image_digests(self.transport, url, max_pages)

    # Manifests

    def _manifest_url(self, repository: str, reference: str) -> str:
        return self._url("/%s/manifests/%s", repository, reference)

    async def manifest(self, repository: str, reference: str) -> Any:
        """Fetch a schema1 manifest."""
        url = self._manifest_url(repository, reference)
        LOGGER.info(
            "registry.manifest.get url=%s repository=%s reference=%s",
            url,
            repository,
            reference,
        )
        return await manifests.get_manifest_v1(self.transport, url)

    async def manifest_v2(self, repository: str, reference: str) -> dict:
        """Fetch a schema2 manifest.

        A manifest list is resolved to the entry matching
        ``config.architecture``, or to its first entry when none matches.

        Raises:
            ManifestError: On an unexpected media type or an empty list
        """
        LOGGER.info(
            "registry.manifest.get url=%s repository=%s reference=%s",
            self._manifest_url(repository, reference),
            repository,
            reference,
        )
        return await manifests.resolve_manifest_v2(
            self.transport,
            lambda ref: self._manifest_url(repository, ref),
            reference,
            self.config.architecture,
        )

    async def manifest_list(self, repository: str, reference: str) -> dict:
        url = self._manifest_url(repository, reference)
        LOGGER.info(
            "registry.manifest-list.get url=%s repository=%s reference=%s",
            url,
            repository,
            reference,
        )
        return await manifests.get_manifest_list(self.transport, url)

    async def manifest_digest(self, repository: str, reference: str) -> str:
        """Digest of the schema2 manifest a reference points to."""
        url = self._manifest_url(repository, reference)
        LOGGER.info(
            "registry.manifest.head url=%s repository=%s reference=%s",
            url,
            repository,
            reference,
        )
        return await manifests.get_manifest_digest(self.transport, url)

    async def put_manifest(
        self,
        repository: str,
        reference: str,
        manifest: Union[bytes, str, dict],
        media_type: str = DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
    ) -> str:
        """Store a manifest under a tag or digest.

        Returns:
            Manifest digest
        """
        url = self._manifest_url(repository, reference)
        LOGGER.info(
            "registry.manifest.put url=%s repository=%s reference=%s",
            url,
            repository,
            reference,
        )
        return await manifests.put_manifest(self.transport, url, manifest, media_type)

    async def delete_manifest(self, repository: str, digest: str) -> None:
        _check_digest(digest)
        url = self._manifest_url(repository, digest)
        LOGGER.info(
            "registry.manifest.delete url=%s repository=%s digest=%s",
            url,
            repository,
            digest,
        )
        await manifests.delete_manifest(self.transport, url)

    # Blobs

    def _blob_url(self, repository: str, digest: str) -> str:
        return self._url("/%s/blobs/%s", repository, digest)

    async def has_blob(self, repository: str, digest: str) -> bool:
        """True if the blob exists, False if the registry answers 404."""
        url = self._blob_url(repository, digest)
        LOGGER.info(
            "registry.blob.check url=%s repository=%s digest=%s", url, repository, digest
        )
        return await blobs.has_blob(self.transport, url)

    async def blob_metadata(self, repository: str, digest: str) -> Descriptor:
        url = self._blob_url(repository, digest)
        LOGGER.info(
            "registry.blob.check url=%s repository=%s digest=%s", url, repository, digest
        )
        return await blobs.blob_metadata(self.transport, url, digest)

    @asynccontextmanager
    async def download_blob(
        self, repository: str, digest: str
    ) -> AsyncIterator[aiohttp.StreamReader]:
        """Stream a blob.

        Usage::

            async with registry.download_blob("library/nginx", digest) as stream:
                async for chunk in stream.iter_chunked(65536):
                    ...
        """
        url = self._blob_url(repository, digest)
        LOGGER.info(
            "registry.blob.download url=%s repository=%s digest=%s",
            url,
            repository,
            digest,
        )
        async with blobs.download_blob(self.transport, url) as stream:
            yield stream

    async def download_blob_to_file(
        self, repository: str, digest: str, path: Union[str, PathLike]
    ) -> Descriptor:
        """Download a blob to ``path`` and verify its digest.

        Raises:
            ValueError: If digest format is invalid
            DigestMismatchError: If the downloaded content does not match
        """
        _check_digest(digest)
        url = self._blob_url(repository, digest)
        LOGGER.info(
            "registry.blob.download url=%s repository=%s digest=%s path=%s",
            url,
            repository,
            digest,
            path,
        )
        return await blobs.download_blob_to_file(self.transport, url, digest, path)

    # Uploads

    async def initiate_upload(self, repository: str, digest: str) -> UploadSession:
        """Start an upload session.

        Raises:
            BlobUploadError: If the registry does not return an upload location
        """
        url = self._url("/%s/blobs/uploads/", repository)
        return await blobs.initiate_upload(self.transport, url, repository, digest)

    async def upload_blob(
        self,
        repository: str,
        digest: str,
        content: Any = None,
        get_body: Optional[BodyFactory] = None,
    ) -> None:
        """Upload a blob in a single PUT.

        Args:
            repository: Repository name
            digest: Blob digest
            content: Payload for the first attempt
            get_body: Factory for a fresh copy of the payload; required if the
                registry challenges the upload for authentication

        Raises:
            ValueError: If digest format is invalid
            BlobUploadError: If the upload session cannot be started
            CannotReplayRequestBody: If the upload is challenged and
                ``get_body`` was not given
        """
        _check_digest(digest)
        session = await self.initiate_upload(repository, digest)
        LOGGER.info(
            "registry.blob.upload url=%s repository=%s digest=%s",
            session.location,
            repository,
            digest,
        )
        await blobs.upload_blob(self.transport, session, content, get_body)

    async def upload_layer(
        self,
        repository: str,
        digest: str,
        content: Any = None,
        get_body: Optional[BodyFactory] = None,
    ) -> None:
        """Upload a blob with one PATCH and a finalizing PUT.

        Raises:
            ValueError: If digest format is invalid
            BlobUploadError: If the session cannot be started or the PATCH fails
        """
        _check_digest(digest)
        session = await self.initiate_upload(repository, digest)
        LOGGER.info(
            "registry.layer.upload url=%s repository=%s digest=%s",
            session.location,
            repository,
            digest,
        )
        await blobs.upload_layer(self.transport, session, repository, content, get_body)

    async def monolithic_upload_blob(
        self,
        repository: str,
        digest: str,
        content: Any = None,
        get_body: Optional[BodyFactory] = None,
    ) -> None:
        """Upload a blob in the initiating POST."""
        _check_digest(digest)
        url = self._url("/%s/blobs/uploads/", repository)
        LOGGER.info(
            "registry.blob.monolithic-upload url=%s repository=%s digest=%s",
            url,
            repository,
            digest,
        )
        await blobs.monolithic_upload_blob(
            self.transport, url, repository, digest, content, get_body
        )

    async def upload_blob_from_file(
        self,
        repository: str,
        path: Union[str, PathLike],
        digest: Optional[str] = None,
    ) -> Descriptor:
        """Upload a file as a blob without loading it into memory.

        Args:
            repository: Repository name
            path: File to upload
            digest: Known digest of the file; calculated if omitted

        Returns:
            Descriptor of the uploaded blob
        """
        calculated, size = await calculate_file_digest(path)
        if digest is None:
            digest = calculated
        await self.upload_blob(repository, digest, get_body=file_body(path))
        return Descriptor(digest=digest, size=size)
