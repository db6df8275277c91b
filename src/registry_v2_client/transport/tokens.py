"""Bearer token cache shared by all requests of one registry client."""

import re
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

SCOPE_PATH_PATTERN = re.compile(
    r"^/v2/(?P<name>[A-Za-z0-9._/-]+?)/(?:tags|manifests|blobs)(?:/|$)"
)


def scope_from_path(path: str) -> Optional[str]:
    """Extract the repository name from a registry API path.

    ``/v2/library/nginx/manifests/latest`` -> ``library/nginx``
    """
    match = SCOPE_PATH_PATTERN.match(path)
    return match.group("name") if match else None


def repository_from_scope(scope: str) -> Optional[str]:
    """Extract the repository name from a challenge scope.

    ``repository:library/nginx:pull`` -> ``library/nginx``
    """
    parts = scope.split(":")
    if len(parts) != 3 or not parts[1]:
        return None
    return parts[1]


class _ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def reading(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def writing(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class TokenCache:
    """Repository name -> last bearer token obtained for it.

    Entries live as long as the cache; a later token for the same repository
    replaces the earlier one.
    """

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}
        self._lock = _ReadWriteLock()

    def get(self, scope: Optional[str]) -> Optional[str]:
        if not scope:
            return None
        with self._lock.reading():
            return self._tokens.get(scope)

    def set(self, scope: str, token: str) -> None:
        with self._lock.writing():
            self._tokens[scope] = token

    def __len__(self) -> int:
        with self._lock.reading():
            return len(self._tokens)
