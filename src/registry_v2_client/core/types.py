"""Core data types for the registry client."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RegistryConfig:
    """Registry connection settings.

    Args:
        url: Registry URL (e.g., https://registry-1.docker.io)
        username: Registry user name, empty for anonymous access
        password: Registry password
        insecure: Disable TLS certificate verification
        timeout: Total request timeout in seconds, None to disable
        do_initial_ping: Ping the registry when the client is opened
        disable_basic_auth: Do not send Basic credentials on registry requests
            (some registries reject requests carrying both basic and token auth)
        architecture: Preferred platform when a manifest list is resolved
    """

    url: str
    username: str = ""
    password: str = ""
    insecure: bool = False
    timeout: Optional[float] = 30
    do_initial_ping: bool = False
    disable_basic_auth: bool = False
    architecture: str = "amd64"

    @property
    def base_url(self) -> str:
        """Registry URL without trailing slashes."""
        return self.url.rstrip("/")


@dataclass(frozen=True)
class Descriptor:
    """Identity of a blob or manifest."""

    digest: str
    size: int
    media_type: Optional[str] = None


@dataclass(frozen=True)
class UploadSession:
    """Upload session created by an upload initiation request."""

    location: str
    digest: str

    def url_with_digest(self) -> str:
        """Session URL with the digest query parameter appended."""
        separator = "&" if "?" in self.location else "?"
        return f"{self.location}{separator}digest={self.digest}"
