"""Async functional registry operations."""

from typing import Any

from .core.registry_client import Registry
from .core.types import RegistryConfig


def _config(registry_url: str, username: str, password: str, timeout: float) -> RegistryConfig:
    return RegistryConfig(
        url=registry_url, username=username, password=password, timeout=timeout
    )


async def check_registry_connectivity(
    registry_url: str, username: str = "", password: str = "", timeout: float = 10
) -> bool:
    """레지스트리 연결 상태를 확인합니다.

    Args:
        registry_url: 레지스트리 URL (예: "http://localhost:15000", "https://registry.example.com")
        username: 사용자 이름 (선택사항, 익명 접근 시 생략)
        password: 비밀번호 (선택사항)
        timeout: 요청 타임아웃 (초, 기본값: 10초)

    Returns:
        bool: 레지스트리 접근 가능 시 True

    Raises:
        RegistryConnectionError: 레지스트리에 연결할 수 없거나 v2 API를 지원하지 않는 경우

    Examples:
        # 로컬 레지스트리 연결 확인
        accessible = await check_registry_connectivity("http://localhost:15000")
    """
    async with Registry(_config(registry_url, username, password, timeout)) as registry:
        return await registry.check_connectivity()


async def list_repositories(
    registry_url: str, username: str = "", password: str = "", timeout: float = 10
) -> list[str]:
    """레지스트리의 모든 저장소 목록을 조회합니다.

    페이지네이션(Link 헤더)을 끝까지 따라가며 모든 페이지의 결과를 합칩니다.

    Args:
        registry_url: 레지스트리 URL (예: "http://localhost:15000")
        username: 사용자 이름 (선택사항)
        password: 비밀번호 (선택사항)
        timeout: 요청 타임아웃 (초, 기본값: 10초)

    Returns:
        list[str]: 저장소 이름 목록 (예: ["nginx", "myapp", "test/image"])

    Raises:
        HTTPStatusError: 레지스트리가 오류 상태 코드로 응답한 경우
        RegistryError: 요청 실패 시

    Examples:
        repos = await list_repositories("http://localhost:15000")
        print(f"발견된 저장소: {repos}")
    """
    async with Registry(_config(registry_url, username, password, timeout)) as registry:
        return await registry.repositories()


async def list_tags(
    registry_url: str,
    repository: str,
    username: str = "",
    password: str = "",
    timeout: float = 10,
) -> list[str]:
    """특정 저장소의 모든 태그 목록을 조회합니다.

    Args:
        registry_url: 레지스트리 URL (예: "http://localhost:15000")
        repository: 저장소 이름 (예: "nginx", "mycompany/myapp")
        username: 사용자 이름 (선택사항)
        password: 비밀번호 (선택사항)
        timeout: 요청 타임아웃 (초, 기본값: 10초)

    Returns:
        list[str]: 태그 이름 목록 (예: ["latest", "v1.0.0", "alpine"])

    Raises:
        HTTPStatusError: 저장소가 없거나 요청이 거부된 경우
        RegistryError: 요청 실패 시

    Examples:
        tags = await list_tags("https://registry-1.docker.io", "library/nginx")
        print(f"nginx 태그: {tags}")
    """
    async with Registry(_config(registry_url, username, password, timeout)) as registry:
        return await registry.tags(repository)


async def get_manifest(
    registry_url: str,
    repository: str,
    tag: str,
    username: str = "",
    password: str = "",
    timeout: float = 10,
) -> dict[str, Any]:
    """이미지의 매니페스트(schema2)를 조회합니다.

    매니페스트 리스트가 반환되면 amd64 플랫폼 항목(없으면 첫 번째 항목)을
    따라가 단일 플랫폼 매니페스트를 반환합니다.

    Args:
        registry_url: 레지스트리 URL (예: "http://localhost:15000")
        repository: 저장소 이름 (예: "nginx", "mycompany/myapp")
        tag: 태그 이름 또는 digest (예: "latest", "sha256:abc123...")
        username: 사용자 이름 (선택사항)
        password: 비밀번호 (선택사항)
        timeout: 요청 타임아웃 (초, 기본값: 10초)

    Returns:
        dict[str, Any]: 매니페스트 딕셔너리 (Docker Registry API v2 스키마)

    Raises:
        ManifestError: 예상하지 못한 미디어 타입이거나 매니페스트 리스트가 비어있는 경우
        RegistryError: 요청 실패 시

    Examples:
        manifest = await get_manifest("http://localhost:15000", "nginx", "latest")
        print(f"스키마 버전: {manifest['schemaVersion']}")
    """
    async with Registry(_config(registry_url, username, password, timeout)) as registry:
        return await registry.manifest_v2(repository, tag)


async def get_manifest_digest(
    registry_url: str,
    repository: str,
    tag: str,
    username: str = "",
    password: str = "",
    timeout: float = 10,
) -> str:
    """태그가 가리키는 매니페스트의 digest를 조회합니다.

    Args:
        registry_url: 레지스트리 URL (예: "http://localhost:15000")
        repository: 저장소 이름
        tag: 태그 이름 (예: "latest")
        username: 사용자 이름 (선택사항)
        password: 비밀번호 (선택사항)
        timeout: 요청 타임아웃 (초, 기본값: 10초)

    Returns:
        str: 매니페스트 digest (예: "sha256:abc123...")

    Raises:
        ManifestError: Docker-Content-Digest 헤더가 없거나 형식이 잘못된 경우
    """
    async with Registry(_config(registry_url, username, password, timeout)) as registry:
        return await registry.manifest_digest(repository, tag)


async def delete_image(
    registry_url: str,
    repository: str,
    tag: str,
    username: str = "",
    password: str = "",
    timeout: float = 10,
) -> str:
    """태그로 지정한 이미지를 삭제합니다.

    태그의 매니페스트 digest를 조회한 뒤 digest로 매니페스트를 삭제합니다.
    같은 매니페스트를 가리키는 다른 태그도 함께 삭제됩니다.

    Args:
        registry_url: 레지스트리 URL (예: "http://localhost:15000")
        repository: 저장소 이름
        tag: 삭제할 태그 이름
        username: 사용자 이름 (선택사항)
        password: 비밀번호 (선택사항)
        timeout: 요청 타임아웃 (초, 기본값: 10초)

    Returns:
        str: 삭제된 매니페스트의 digest

    Raises:
        HTTPStatusError: 레지스트리가 삭제를 허용하지 않는 경우 (예: 405)
        ManifestError: digest를 확인할 수 없는 경우

    Examples:
        digest = await delete_image("http://localhost:15000", "nginx", "old-tag")
    """
    async with Registry(_config(registry_url, username, password, timeout)) as registry:
        digest = await registry.manifest_digest(repository, tag)
        await registry.delete_manifest(repository, digest)
        return digest


async def delete_image_by_digest(
    registry_url: str,
    repository: str,
    digest: str,
    username: str = "",
    password: str = "",
    timeout: float = 10,
) -> None:
    """digest로 지정한 이미지 매니페스트를 삭제합니다.

    Args:
        registry_url: 레지스트리 URL (예: "http://localhost:15000")
        repository: 저장소 이름
        digest: 매니페스트 digest (예: "sha256:abc123...")
        username: 사용자 이름 (선택사항)
        password: 비밀번호 (선택사항)
        timeout: 요청 타임아웃 (초, 기본값: 10초)

    Raises:
        ValueError: digest 형식이 잘못된 경우
        HTTPStatusError: 매니페스트가 없거나 삭제가 거부된 경우
    """
    async with Registry(_config(registry_url, username, password, timeout)) as registry:
        await registry.delete_manifest(repository, digest)
