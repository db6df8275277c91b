"""Test configuration and fixtures."""

import asyncio
import os
import socket

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from registry_v2_client import Registry, RegistryConfig, check_registry_connectivity
from registry_v2_client.exceptions import RegistryError
from tests.helpers import TestContext


def is_port_open(host, port):
    """Check if a port is open."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(1)
            result = sock.connect_ex((host, port))
            return result == 0
    except OSError:
        return False


@pytest_asyncio.fixture
async def serve():
    """Serve an aiohttp application and return its base URL."""
    servers = []

    async def _serve(app: web.Application) -> str:
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return str(server.make_url("")).rstrip("/")

    yield _serve

    for server in servers:
        await server.close()


@pytest_asyncio.fixture
async def make_registry():
    """Create Registry clients that are closed after the test."""
    registries = []

    def _make(url: str, **options) -> Registry:
        registry = Registry(RegistryConfig(url=url, **options))
        registries.append(registry)
        return registry

    yield _make

    for registry in registries:
        await registry.close()


@pytest.fixture
def registry_port():
    """Get registry port for testing."""
    return int(os.getenv("REGISTRY_PORT", "15000"))


@pytest_asyncio.fixture
async def registry_url(registry_port):
    """Get registry URL and ensure it's available."""
    url = f"http://localhost:{registry_port}"

    # Wait for registry to be available (for CI)
    max_attempts = 30
    for attempt in range(max_attempts):
        if is_port_open("localhost", registry_port):
            try:
                if await check_registry_connectivity(url):
                    return url
            except RegistryError:
                pass

        if attempt < max_attempts - 1:
            await asyncio.sleep(1)

    pytest.skip(f"Registry not available at {url}")


@pytest_asyncio.fixture
async def test_context(registry_url):
    """Create isolated test context."""
    async with TestContext(registry_url) as ctx:
        yield ctx


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless a registry is available."""
    skip_integration = pytest.mark.skip(reason="Registry not available")

    for item in items:
        if (
            "integration" in item.keywords
            and os.getenv("REGISTRY_AVAILABLE", "false").lower() != "true"
        ):
            item.add_marker(skip_integration)
