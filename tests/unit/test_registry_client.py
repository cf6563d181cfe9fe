"""
Unit tests for the chemistry registry client.

The registry is replaced by an httpx MockTransport, so these tests exercise
the request shape and every failure mode without network access.
"""

import httpx
import pytest

from chem_inventory.dal.registry_client import ERROR_BODY_EXCERPT_LENGTH, RegistryClient
from chem_inventory.handlers.utils.errors import RegistryFetchError


class TestFetchSubstance:
    """Test cases for RegistryClient.fetch_substance."""

    def test_fetch_success(self, registry_client, registry_requests):
        """Test fetching a known registry number."""
        substance = registry_client.fetch_substance("71-43-2")

        assert substance.rn == "71-43-2"
        assert substance.name == "Benzene"
        assert len(substance.synonyms) == 3

        assert len(registry_requests) == 1
        request = registry_requests[0]
        assert request.method == "GET"
        assert request.url.path == "/api/detail"
        assert request.url.params["cas_rn"] == "71-43-2"
        assert request.headers["X-API-KEY"] == "test-api-key"
        assert "apikey" not in request.url.params

    def test_api_key_as_query_parameter(self, registry_http_client, registry_requests):
        client = RegistryClient(api_key="secret", api_key_location="query", http_client=registry_http_client)

        client.fetch_substance("71-43-2")

        request = registry_requests[0]
        assert request.url.params["apikey"] == "secret"
        assert "X-API-KEY" not in request.headers

    def test_error_status_includes_excerpt(self, registry_http_factory):
        """Test that a non-2xx status carries the status and a truncated body."""
        body = "x" * 500
        client = RegistryClient(
            api_key="k",
            http_client=registry_http_factory(lambda request: httpx.Response(403, text=body)),
        )

        with pytest.raises(RegistryFetchError) as exc_info:
            client.fetch_substance("71-43-2")

        error = exc_info.value
        assert error.status_code == 403
        assert error.body_excerpt == "x" * ERROR_BODY_EXCERPT_LENGTH
        assert "403" in error.message
        assert error.error_code == "REGISTRY_FETCH_ERROR"

    def test_unknown_identifier(self, registry_client):
        with pytest.raises(RegistryFetchError) as exc_info:
            registry_client.fetch_substance("0000-00-0")
        assert exc_info.value.status_code == 404

    def test_transport_failure(self, registry_http_factory):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        client = RegistryClient(api_key="k", http_client=registry_http_factory(handler))

        with pytest.raises(RegistryFetchError) as exc_info:
            client.fetch_substance("71-43-2")
        assert exc_info.value.status_code is None

    def test_body_not_json(self, registry_http_factory):
        client = RegistryClient(
            api_key="k",
            http_client=registry_http_factory(lambda request: httpx.Response(200, text="<html>maintenance</html>")),
        )

        with pytest.raises(RegistryFetchError) as exc_info:
            client.fetch_substance("71-43-2")
        assert "not JSON" in exc_info.value.message

    def test_body_not_an_object(self, registry_http_factory):
        client = RegistryClient(
            api_key="k",
            http_client=registry_http_factory(lambda request: httpx.Response(200, json=["71-43-2"])),
        )

        with pytest.raises(RegistryFetchError):
            client.fetch_substance("71-43-2")

    def test_schema_mismatch(self, registry_http_factory, benzene_payload):
        benzene_payload["experimentalProperties"] = "none"
        client = RegistryClient(
            api_key="k",
            http_client=registry_http_factory(lambda request: httpx.Response(200, json=benzene_payload)),
        )

        with pytest.raises(RegistryFetchError) as exc_info:
            client.fetch_substance("71-43-2")
        assert "invalid" in exc_info.value.message
