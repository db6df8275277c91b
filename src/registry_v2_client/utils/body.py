"""Body factories for requests that may have to be sent twice.

A request challenged for authentication is replayed with a fresh body
obtained from its factory. In-memory factories keep the whole payload
alive for the duration of the call; use ``file_body`` for large content.
"""

from os import PathLike
from typing import AsyncIterator, Union

import aiofiles

from ..transport.base import BodyFactory
from .digest import DEFAULT_CHUNK_SIZE


def bytes_body(data: bytes) -> BodyFactory:
    """Factory returning the same immutable payload on every call."""
    payload = bytes(data)

    def get_body() -> bytes:
        return payload

    return get_body


def file_body(
    path: Union[str, PathLike], chunk_size: int = DEFAULT_CHUNK_SIZE
) -> BodyFactory:
    """Factory returning a new chunk stream that reads the file from the start."""

    async def read_chunks() -> AsyncIterator[bytes]:
        async with aiofiles.open(path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    return read_chunks
