"""Tests for manifest operations and manifest list resolution."""

import json

import pytest
from aiohttp import web

from registry_v2_client.exceptions import HTTPStatusError, ManifestError
from registry_v2_client.media_types import DockerMediaTypes
from registry_v2_client.operations.manifests import (
    manifest_payload,
    select_platform_manifest,
)
from registry_v2_client.utils.digest import calculate_digest

AMD64_DIGEST = "sha256:" + "1" * 64
ARM64_DIGEST = "sha256:" + "2" * 64


def schema2_manifest(config_digest):
    return {
        "schemaVersion": 2,
        "mediaType": DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
        "config": {
            "mediaType": DockerMediaTypes.CONTAINER_IMAGE_V1,
            "size": 1024,
            "digest": config_digest,
        },
        "layers": [],
    }


def manifest_list(*entries):
    return {
        "schemaVersion": 2,
        "mediaType": DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2,
        "manifests": [
            {
                "mediaType": DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
                "size": 528,
                "digest": digest,
                "platform": {"architecture": architecture, "os": "linux"},
            }
            for digest, architecture in entries
        ],
    }


def manifest_registry(documents, state=None):
    """Registry serving ``documents``: reference -> (media type, document)."""
    state = state if state is not None else {}
    state.setdefault("requests", [])

    async def get(request):
        reference = request.match_info["reference"]
        state["requests"].append(("GET", reference, request.headers.get("Accept")))
        if reference not in documents:
            return web.json_response({"errors": []}, status=404)
        media_type, document = documents[reference]
        return web.json_response(document, content_type=media_type)

    async def head(request):
        reference = request.match_info["reference"]
        state["requests"].append(("HEAD", reference, request.headers.get("Accept")))
        if reference not in documents:
            return web.Response(status=404)
        digest = state.get("digest", AMD64_DIGEST)
        return web.Response(headers={"Docker-Content-Digest": digest})

    async def put(request):
        reference = request.match_info["reference"]
        body = await request.read()
        state["requests"].append(("PUT", reference, request.content_type))
        state["put"] = body
        headers = {}
        if state.get("report_digest", True):
            headers["Docker-Content-Digest"] = calculate_digest(body)
        return web.Response(status=201, headers=headers)

    async def delete(request):
        reference = request.match_info["reference"]
        state["requests"].append(("DELETE", reference, None))
        return web.Response(status=202)

    app = web.Application()
    route = "/v2/app/manifests/{reference}"
    app.router.add_get(route, get, allow_head=False)
    app.router.add_head(route, head)
    app.router.add_put(route, put)
    app.router.add_delete(route, delete)
    return app


MULTI_ARCH = {
    "latest": (
        DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2,
        manifest_list((AMD64_DIGEST, "amd64"), (ARM64_DIGEST, "arm64")),
    ),
    AMD64_DIGEST: (
        DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
        schema2_manifest("sha256:" + "a" * 64),
    ),
    ARM64_DIGEST: (
        DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
        schema2_manifest("sha256:" + "b" * 64),
    ),
}


class TestSelectPlatformManifest:
    """Test the architecture selection rule."""

    def test_matching_architecture(self):
        entries = manifest_list((AMD64_DIGEST, "amd64"), (ARM64_DIGEST, "arm64"))
        assert select_platform_manifest(entries, "arm64")["digest"] == ARM64_DIGEST

    def test_default_amd64(self):
        entries = manifest_list((ARM64_DIGEST, "arm64"), (AMD64_DIGEST, "amd64"))
        assert select_platform_manifest(entries)["digest"] == AMD64_DIGEST

    def test_first_entry_fallback(self):
        entries = manifest_list((ARM64_DIGEST, "arm64"), (AMD64_DIGEST, "ppc64le"))
        assert select_platform_manifest(entries)["digest"] == ARM64_DIGEST

    def test_empty_list(self):
        with pytest.raises(ManifestError):
            select_platform_manifest(manifest_list())

    def test_wrong_media_type(self):
        document = manifest_list((AMD64_DIGEST, "amd64"))
        document["mediaType"] = DockerMediaTypes.DISTRIBUTION_MANIFEST_V2
        with pytest.raises(ManifestError):
            select_platform_manifest(document)


class TestManifestV2:
    """Test schema2 manifest fetch with manifest list resolution."""

    @pytest.mark.asyncio
    async def test_single_manifest(self, serve, make_registry):
        state = {}
        registry = make_registry(await serve(manifest_registry(MULTI_ARCH, state)))

        manifest = await registry.manifest_v2("app", AMD64_DIGEST)

        assert manifest["config"]["digest"] == "sha256:" + "a" * 64
        assert len(state["requests"]) == 1
        accept = state["requests"][0][2]
        assert DockerMediaTypes.DISTRIBUTION_MANIFEST_V2 in accept
        assert DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2 in accept

    @pytest.mark.asyncio
    async def test_list_resolved_to_amd64(self, serve, make_registry):
        state = {}
        registry = make_registry(await serve(manifest_registry(MULTI_ARCH, state)))

        manifest = await registry.manifest_v2("app", "latest")

        assert manifest["config"]["digest"] == "sha256:" + "a" * 64
        assert [ref for _, ref, _ in state["requests"]] == ["latest", AMD64_DIGEST]

    @pytest.mark.asyncio
    async def test_list_resolved_to_configured_architecture(self, serve, make_registry):
        state = {}
        registry = make_registry(
            await serve(manifest_registry(MULTI_ARCH, state)), architecture="arm64"
        )

        manifest = await registry.manifest_v2("app", "latest")

        assert manifest["config"]["digest"] == "sha256:" + "b" * 64
        assert [ref for _, ref, _ in state["requests"]] == ["latest", ARM64_DIGEST]

    @pytest.mark.asyncio
    async def test_list_without_match_uses_first_entry(self, serve, make_registry):
        state = {}
        registry = make_registry(
            await serve(manifest_registry(MULTI_ARCH, state)), architecture="s390x"
        )

        manifest = await registry.manifest_v2("app", "latest")

        assert manifest["config"]["digest"] == "sha256:" + "a" * 64

    @pytest.mark.asyncio
    async def test_empty_list(self, serve, make_registry):
        documents = {
            "latest": (DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2, manifest_list())
        }
        registry = make_registry(await serve(manifest_registry(documents)))

        with pytest.raises(ManifestError):
            await registry.manifest_v2("app", "latest")

    @pytest.mark.asyncio
    async def test_unexpected_media_type(self, serve, make_registry):
        documents = {"latest": ("application/vnd.oci.image.index.v1+json", {})}
        registry = make_registry(await serve(manifest_registry(documents)))

        with pytest.raises(ManifestError):
            await registry.manifest_v2("app", "latest")

    @pytest.mark.asyncio
    async def test_missing_manifest(self, serve, make_registry):
        registry = make_registry(await serve(manifest_registry({})))

        with pytest.raises(HTTPStatusError) as exc_info:
            await registry.manifest_v2("app", "latest")
        assert exc_info.value.status == 404


class TestOtherManifestOperations:
    """Test schema1, list, digest, put and delete operations."""

    @pytest.mark.asyncio
    async def test_schema1(self, serve, make_registry):
        documents = {
            "old": (
                DockerMediaTypes.DISTRIBUTION_MANIFEST_V1_SIGNED,
                {"schemaVersion": 1, "name": "app", "tag": "old"},
            )
        }
        registry = make_registry(await serve(manifest_registry(documents)))

        manifest = await registry.manifest("app", "old")

        assert manifest["schemaVersion"] == 1

    @pytest.mark.asyncio
    async def test_manifest_list(self, serve, make_registry):
        registry = make_registry(await serve(manifest_registry(MULTI_ARCH)))

        document = await registry.manifest_list("app", "latest")

        assert len(document["manifests"]) == 2

    @pytest.mark.asyncio
    async def test_manifest_digest(self, serve, make_registry):
        state = {}
        registry = make_registry(await serve(manifest_registry(MULTI_ARCH, state)))

        assert await registry.manifest_digest("app", "latest") == AMD64_DIGEST
        assert state["requests"][0][:2] == ("HEAD", "latest")

    @pytest.mark.asyncio
    async def test_manifest_digest_invalid_header(self, serve, make_registry):
        state = {"digest": "not-a-digest"}
        registry = make_registry(await serve(manifest_registry(MULTI_ARCH, state)))

        with pytest.raises(ManifestError):
            await registry.manifest_digest("app", "latest")

    @pytest.mark.asyncio
    async def test_put_manifest(self, serve, make_registry):
        state = {}
        registry = make_registry(await serve(manifest_registry({}, state)))
        manifest = schema2_manifest("sha256:" + "a" * 64)

        digest = await registry.put_manifest("app", "v1", manifest)

        assert json.loads(state["put"]) == manifest
        assert digest == calculate_digest(state["put"])
        assert state["requests"] == [
            ("PUT", "v1", DockerMediaTypes.DISTRIBUTION_MANIFEST_V2)
        ]

    @pytest.mark.asyncio
    async def test_put_manifest_digest_computed_locally(self, serve, make_registry):
        """Test the digest of the payload when the registry reports none."""
        state = {"report_digest": False}
        registry = make_registry(await serve(manifest_registry({}, state)))
        payload = b'{"schemaVersion": 2}'

        digest = await registry.put_manifest("app", "v1", payload)

        assert state["put"] == payload
        assert digest == calculate_digest(payload)

    @pytest.mark.asyncio
    async def test_delete_manifest(self, serve, make_registry):
        state = {}
        registry = make_registry(await serve(manifest_registry({}, state)))

        await registry.delete_manifest("app", AMD64_DIGEST)

        assert state["requests"] == [("DELETE", AMD64_DIGEST, None)]

    @pytest.mark.asyncio
    async def test_delete_manifest_invalid_digest(self, make_registry):
        registry = make_registry("http://localhost:1")

        with pytest.raises(ValueError):
            await registry.delete_manifest("app", "latest")


def test_manifest_payload():
    assert manifest_payload(b"raw") == b"raw"
    assert manifest_payload("text") == b"text"
    assert json.loads(manifest_payload({"schemaVersion": 2})) == {"schemaVersion": 2}
