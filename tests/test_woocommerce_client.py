"""
Unit tests for the WooCommerce REST client, request signing and the
shared HTTP client's retry and circuit breaker behaviour.
"""

import base64

import httpx
import pytest

from conftest import API_ROOT, CONSUMER_KEY, CONSUMER_SECRET, STORE_URL
from woodash.clients.http_client import CircuitBreaker, CircuitOpenError, HTTPClient
from woodash.clients.woocommerce_client import WooCommerceClient
from woodash.core.auth import get_api_root, normalize_store_url, oauth_signed_params
from woodash.core.context import Credentials
from woodash.core.errors import (
    UpstreamAuthError,
    UpstreamForbiddenError,
    UpstreamRateLimitedError,
    UpstreamResponseError,
    UpstreamUnavailableError,
)

CREDENTIALS = Credentials(STORE_URL, CONSUMER_KEY, CONSUMER_SECRET)


def http_client_for(handler, settings, **kwargs):
    return HTTPClient(settings, transport=httpx.MockTransport(handler), **kwargs)


class TestAuthHelpers:

    def test_normalize_store_url(self):
        assert normalize_store_url("  https://shop.example.com/// ") == "https://shop.example.com"

    def test_api_root(self):
        assert get_api_root("https://shop.example.com/") == "https://shop.example.com/wp-json/wc/v3"

    def test_oauth_signature_is_deterministic(self):
        creds = Credentials("http://shop.example.com", CONSUMER_KEY, CONSUMER_SECRET)
        url = "http://shop.example.com/wp-json/wc/v3/orders"
        first = oauth_signed_params("GET", url, {"page": 1}, creds, timestamp=1700000000, nonce="abc")
        second = oauth_signed_params("get", url, {"page": 1}, creds, timestamp=1700000000, nonce="abc")

        assert first == second
        assert first["oauth_consumer_key"] == CONSUMER_KEY
        assert first["oauth_signature_method"] == "HMAC-SHA256"
        assert first["page"] == 1
        assert len(base64.b64decode(first["oauth_signature"])) == 32

    def test_oauth_signature_depends_on_secret_and_params(self):
        url = "http://shop.example.com/wp-json/wc/v3/orders"
        creds = Credentials("http://shop.example.com", CONSUMER_KEY, CONSUMER_SECRET)
        other = Credentials("http://shop.example.com", CONSUMER_KEY, "cs_other")
        base = oauth_signed_params("GET", url, {"page": 1}, creds, timestamp=1, nonce="n")

        assert base["oauth_signature"] != oauth_signed_params("GET", url, {"page": 1}, other, timestamp=1, nonce="n")["oauth_signature"]
        assert base["oauth_signature"] != oauth_signed_params("GET", url, {"page": 2}, creds, timestamp=1, nonce="n")["oauth_signature"]


class TestWooCommerceClient:

    @pytest.mark.asyncio
    async def test_https_uses_basic_auth(self, settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[{"id": 1}])

        http_client = http_client_for(handler, settings)
        client = WooCommerceClient(CREDENTIALS, http_client)

        assert await client.get_list("orders", {"page": 1, "status": None}) == [{"id": 1}]
        request = seen[0]
        expected = base64.b64encode(f"{CONSUMER_KEY}:{CONSUMER_SECRET}".encode()).decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert str(request.url).startswith(f"{API_ROOT}/orders")
        assert dict(request.url.params) == {"page": "1"}
        await http_client.close()

    @pytest.mark.asyncio
    async def test_http_signs_query_with_oauth(self, settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        http_client = http_client_for(handler, settings)
        client = WooCommerceClient(Credentials("http://shop.example.com", CONSUMER_KEY, CONSUMER_SECRET), http_client)

        await client.get_list("products", {"status": "publish"})
        params = seen[0].url.params
        assert "Authorization" not in seen[0].headers
        assert params["oauth_consumer_key"] == CONSUMER_KEY
        assert params["status"] == "publish"
        assert "oauth_signature" in params
        assert CONSUMER_SECRET not in str(seen[0].url)
        await http_client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status, error", [
        (401, UpstreamAuthError),
        (403, UpstreamForbiddenError),
        (429, UpstreamRateLimitedError),
        (404, UpstreamResponseError),
        (500, UpstreamResponseError),
    ])
    async def test_error_statuses_map_to_upstream_errors(self, settings, status, error):
        http_client = http_client_for(
            lambda request: httpx.Response(status, json={"code": "x", "message": "nope"}), settings,
        )
        client = WooCommerceClient(CREDENTIALS, http_client)

        with pytest.raises(error) as excinfo:
            await client.get_list("orders")
        assert excinfo.value.upstream_status == status
        assert excinfo.value.details["upstream_message"] == "nope"
        await http_client.close()

    @pytest.mark.asyncio
    async def test_connection_error_maps_to_unavailable(self, settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        http_client = http_client_for(handler, settings)
        client = WooCommerceClient(CREDENTIALS, http_client)

        with pytest.raises(UpstreamUnavailableError) as excinfo:
            await client.get_list("orders")
        assert excinfo.value.status_code == 503
        assert excinfo.value.upstream_status is None
        await http_client.close()

    @pytest.mark.asyncio
    async def test_non_list_body_rejected(self, settings):
        http_client = http_client_for(lambda request: httpx.Response(200, json={"orders": []}), settings)
        client = WooCommerceClient(CREDENTIALS, http_client)

        with pytest.raises(UpstreamResponseError):
            await client.get_list("orders")
        await http_client.close()


class TestHTTPClient:

    @pytest.mark.asyncio
    async def test_get_retries_transient_status(self, settings):
        settings = settings.model_copy(update={"http_max_retries": 2, "http_backoff_factor": 0})
        statuses = iter([503, 502, 200])
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(next(statuses), json=[])

        http_client = http_client_for(handler, settings)
        response = await http_client.get(f"{API_ROOT}/orders")

        assert response.status_code == 200
        assert len(calls) == 3
        await http_client.close()

    @pytest.mark.asyncio
    async def test_get_gives_up_after_max_retries(self, settings):
        settings = settings.model_copy(update={"http_max_retries": 1, "http_backoff_factor": 0})
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectTimeout("timed out", request=request)

        http_client = http_client_for(handler, settings)
        with pytest.raises(httpx.ConnectTimeout):
            await http_client.get(f"{API_ROOT}/orders")
        assert len(calls) == 2
        await http_client.close()

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self, settings):
        settings = settings.model_copy(update={"http_max_retries": 3, "http_backoff_factor": 0})
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401, json={"message": "bad key"})

        http_client = http_client_for(handler, settings)
        response = await http_client.get(f"{API_ROOT}/orders")

        assert response.status_code == 401
        assert len(calls) == 1
        await http_client.close()

    @pytest.mark.asyncio
    async def test_circuit_breaker_short_circuits_failing_host(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        http_client = http_client_for(handler, settings, breaker=CircuitBreaker(failure_threshold=2, reset_timeout=60))
        await http_client.get(f"{API_ROOT}/orders")
        await http_client.get(f"{API_ROOT}/orders")

        with pytest.raises(CircuitOpenError):
            await http_client.get(f"{API_ROOT}/orders")
        assert len(calls) == 2
        await http_client.close()

    @pytest.mark.asyncio
    async def test_open_circuit_surfaces_as_unavailable(self, settings):
        breaker = CircuitBreaker(failure_threshold=1, reset_timeout=60)
        breaker.record_failure("shop.example.com")
        http_client = http_client_for(lambda request: httpx.Response(200, json=[]), settings, breaker=breaker)
        client = WooCommerceClient(CREDENTIALS, http_client)

        with pytest.raises(UpstreamUnavailableError):
            await client.get_list("orders")
        await http_client.close()
