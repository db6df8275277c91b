"""Blob existence checks, downloads and the upload protocol."""

import hashlib
import logging
from contextlib import asynccontextmanager
from os import PathLike
from typing import Any, AsyncIterator, Optional, Union
from urllib.parse import urljoin

import aiofiles
import aiofiles.os
import aiohttp
from aiohttp import hdrs

from ..core.types import Descriptor, UploadSession
from ..exceptions import BlobUploadError, DigestMismatchError, HTTPStatusError
from ..media_types import MediaTypes
from ..transport.base import BodyFactory, Request, Transport
from ..utils.digest import DEFAULT_CHUNK_SIZE, split_digest

LOGGER = logging.getLogger(__name__)

OCTET_STREAM = {hdrs.CONTENT_TYPE: MediaTypes.APPLICATION_OCTET_STREAM}


def _resolve_location(response: aiohttp.ClientResponse) -> Optional[str]:
    location = response.headers.get(hdrs.LOCATION)
    if not location:
        return None
    if not location.startswith("http"):
        location = urljoin(str(response.url), location)
    return location


async def has_blob(transport: Transport, blob_url: str) -> bool:
    """Check if a blob exists.

    Returns:
        True on 200, False when the registry answers 404

    Raises:
        HTTPStatusError: For any other failed status
    """
    try:
        async with await transport.send(Request.build("HEAD", blob_url)) as response:
            return response.status == 200
    except HTTPStatusError as e:
        if e.status == 404:
            return False
        raise


async def blob_metadata(transport: Transport, blob_url: str, digest: str) -> Descriptor:
    """Get blob size from a HEAD request.

    The size is -1 when the registry sends no Content-Length.
    """
    async with await transport.send(Request.build("HEAD", blob_url)) as response:
        size = response.content_length
        media_type = response.headers.get(hdrs.CONTENT_TYPE)
    return Descriptor(
        digest=digest, size=size if size is not None else -1, media_type=media_type
    )


@asynccontextmanager
async def download_blob(
    transport: Transport, blob_url: str
) -> AsyncIterator[aiohttp.StreamReader]:
    """Stream a blob; the connection is released when the context exits."""
    async with await transport.send(Request.build("GET", blob_url)) as response:
        yield response.content


async def _remove_partial(path: Union[str, PathLike]) -> None:
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass


async def download_blob_to_file(
    transport: Transport,
    blob_url: str,
    digest: str,
    path: Union[str, PathLike],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Descriptor:
    """Download a blob to disk, verifying its digest on the fly.

    Raises:
        DigestMismatchError: If the content does not match ``digest``; the
            written file is removed

    A download that fails part way also leaves no file behind.
    """
    algorithm, _ = split_digest(digest)
    hasher = hashlib.new(algorithm)
    size = 0

    async with download_blob(transport, blob_url) as stream:
        try:
            async with aiofiles.open(path, "wb") as f:
                async for chunk in stream.iter_chunked(chunk_size):
                    hasher.update(chunk)
                    size += len(chunk)
                    await f.write(chunk)
        except BaseException:
            await _remove_partial(path)
            raise

    actual = f"{algorithm}:{hasher.hexdigest()}"
    if actual != digest:
        await _remove_partial(path)
        raise DigestMismatchError(digest, actual)
    return Descriptor(digest=digest, size=size)


async def initiate_upload(
    transport: Transport, initiate_url: str, repository: str, digest: str
) -> UploadSession:
    """Start an upload session.

    Raises:
        BlobUploadError: If the registry does not return a Location header
    """
    request = Request.build("POST", initiate_url, OCTET_STREAM)
    async with await transport.send(request) as response:
        location = _resolve_location(response)
        status = response.status

    if not location:
        raise BlobUploadError(
            f"Registry returned no upload location for {repository} (status {status})",
            repository=repository,
            digest=digest,
            status=status,
        )
    return UploadSession(location=location, digest=digest)


async def upload_blob(
    transport: Transport,
    session: UploadSession,
    content: Any = None,
    get_body: Optional[BodyFactory] = None,
) -> None:
    """Single-shot upload: PUT the whole content to the session URL."""
    request = Request.build(
        "PUT", session.url_with_digest(), OCTET_STREAM, content, get_body
    )
    async with await transport.send(request) as response:
        LOGGER.debug(
            "registry.blob.upload done url=%s status=%s",
            session.location,
            response.status,
        )


async def upload_layer(
    transport: Transport,
    session: UploadSession,
    repository: str,
    content: Any = None,
    get_body: Optional[BodyFactory] = None,
) -> None:
    """Chunked upload: PATCH the content, then finalize with a bodiless PUT.

    A failed PATCH aborts the upload; the session has to be started again.

    Raises:
        BlobUploadError: If the PATCH fails or is not answered with 202
    """
    digest = session.digest
    request = Request.build("PATCH", session.location, OCTET_STREAM, content, get_body)
    try:
        response = await transport.send(request)
    except HTTPStatusError as e:
        raise BlobUploadError(
            f"Error while uploading layer to {repository}: {e.status}: digest: {digest}",
            repository=repository,
            digest=digest,
            status=e.status,
        ) from e
    except aiohttp.ClientError as e:
        raise BlobUploadError(
            f"Error while uploading layer to {repository}, digest: {digest}: {e}",
            repository=repository,
            digest=digest,
        ) from e

    async with response:
        if response.status != 202:
            raise BlobUploadError(
                f"Unexpected PATCH response while uploading layer to {repository}: "
                f"{response.status} {response.reason}: digest: {digest}",
                repository=repository,
                digest=digest,
                status=response.status,
            )
        location = _resolve_location(response) or session.location

    finalize = UploadSession(location=location, digest=digest)
    request = Request.build("PUT", finalize.url_with_digest(), OCTET_STREAM)
    async with await transport.send(request):
        pass


async def monolithic_upload_blob(
    transport: Transport,
    initiate_url: str,
    repository: str,
    digest: str,
    content: Any = None,
    get_body: Optional[BodyFactory] = None,
) -> None:
    """Upload a blob with the content in the initiating POST.

    Registries that do not accept the monolithic form answer 202 with an
    upload location; the content is then sent again with a single-shot PUT.

    Raises:
        BlobUploadError: On any other response, or when the content has to be
            resent but no body factory was given
    """
    url = f"{initiate_url}?digest={digest}"
    request = Request.build("POST", url, OCTET_STREAM, content, get_body)
    async with await transport.send(request) as response:
        status = response.status
        location = _resolve_location(response)

    if status == 201:
        return
    if status == 202 and location:
        if get_body is None:
            raise BlobUploadError(
                f"Registry declined monolithic upload to {repository} and the "
                "content cannot be resent",
                repository=repository,
                digest=digest,
                status=status,
            )
        LOGGER.debug("registry.blob.monolithic-upload fallback url=%s", location)
        await upload_blob(transport, UploadSession(location, digest), get_body=get_body)
        return
    raise BlobUploadError(
        f"Unexpected response to monolithic upload to {repository}: {status}",
        repository=repository,
        digest=digest,
        status=status,
    )
