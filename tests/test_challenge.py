"""Tests for WWW-Authenticate challenge parsing."""

from multidict import CIMultiDict, CIMultiDictProxy

from registry_v2_client.transport.challenge import (
    AuthChallenge,
    bearer_challenge,
    parse_challenge_header,
    parse_challenges,
)

DOCKER_HUB_CHALLENGE = (
    'Bearer realm="https://auth.docker.io/token",'
    'service="registry.docker.io",'
    'scope="repository:library/nginx:pull"'
)


class TestParseChallengeHeader:
    """Test single header value parsing."""

    def test_bearer_parameters(self):
        """Test realm, service and scope of a bearer challenge."""
        challenges = parse_challenge_header(DOCKER_HUB_CHALLENGE)

        assert len(challenges) == 1
        challenge = challenges[0]
        assert challenge.scheme == "bearer"
        assert challenge.get("realm") == "https://auth.docker.io/token"
        assert challenge.get("service") == "registry.docker.io"
        assert challenge.get("scope") == "repository:library/nginx:pull"

    def test_scheme_and_keys_case_insensitive(self):
        """Test that scheme and parameter names are lower-cased."""
        challenges = parse_challenge_header('BEARER Realm="https://auth.example.com"')

        assert challenges[0].scheme == "bearer"
        assert challenges[0].get("REALM") == "https://auth.example.com"

    def test_basic_challenge(self):
        """Test a basic challenge."""
        challenges = parse_challenge_header('Basic realm="Registry Realm"')

        assert challenges == [AuthChallenge("basic", {"realm": "Registry Realm"})]

    def test_missing_parameter_defaults_empty(self):
        """Test that missing parameters read as empty strings."""
        challenge = parse_challenge_header('Bearer realm="https://auth.example.com"')[0]

        assert challenge.get("scope") == ""
        assert challenge.get("service", "fallback") == "fallback"


class TestBearerChallenge:
    """Test bearer challenge selection from response headers."""

    def test_multiple_header_values(self):
        """Test that every WWW-Authenticate value is considered."""
        headers = CIMultiDict()
        headers.add("WWW-Authenticate", 'Basic realm="Registry Realm"')
        headers.add("WWW-Authenticate", DOCKER_HUB_CHALLENGE)

        challenges = parse_challenges(headers.getall("WWW-Authenticate"))
        assert [c.scheme for c in challenges] == ["basic", "bearer"]

        challenge = bearer_challenge(CIMultiDictProxy(headers))
        assert challenge is not None
        assert challenge.get("realm") == "https://auth.docker.io/token"

    def test_no_bearer(self):
        """Test headers without a bearer challenge."""
        headers = CIMultiDict({"WWW-Authenticate": 'Basic realm="Registry Realm"'})

        assert bearer_challenge(CIMultiDictProxy(headers)) is None

    def test_no_header(self):
        """Test headers without WWW-Authenticate."""
        assert bearer_challenge(CIMultiDictProxy(CIMultiDict())) is None
