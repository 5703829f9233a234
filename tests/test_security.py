"""Tests for security features."""

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from starlette.requests import Request

from civic_reporter.config import settings
from civic_reporter.middleware.audit_logger import client_ip
from civic_reporter.models.account import Account
from civic_reporter.services.issue import IssueService
from tests.conftest import InMemoryRedis, log_in


@pytest.mark.asyncio
async def test_security_headers_present(client: AsyncClient):
    """Test that security headers are present in responses."""
    response = await client.get("/health")
    assert response.status_code == 200

    # Check security headers
    headers = response.headers
    assert headers["x-content-type-options"] == "nosniff"
    assert headers["x-frame-options"] == "DENY"
    assert "frame-ancestors 'none'" in headers["content-security-policy"]
    assert "no-store" in headers["cache-control"]


@pytest.mark.asyncio
async def test_no_hsts_outside_production(client: AsyncClient):
    """Test HSTS is only sent in production."""
    response = await client.get("/health")
    assert "strict-transport-security" not in response.headers


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient):
    """Test CORS preflight request handling."""
    response = await client.options(
        "/login",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    """Test that X-Request-ID is returned in responses."""
    response = await client.get("/profile")
    # Even on redirects, should have request ID
    assert "x-request-id" in response.headers


@pytest.mark.asyncio
async def test_request_id_is_reused(client: AsyncClient):
    """Test a caller supplied request ID is echoed back."""
    response = await client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["x-request-id"] == "trace-123"


@pytest.mark.asyncio
async def test_error_body_carries_request_id(client: AsyncClient):
    """Test error responses include the request ID."""
    response = await client.post(
        "/signup",
        data={"email": "x@example.com"},
        headers={"X-Request-ID": "trace-456"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["request_id"] == "trace-456"


@pytest.mark.asyncio
async def test_malformed_path_id(client: AsyncClient, fake_redis: InMemoryRedis, test_citizen: Account):
    """Test a non-UUID issue ID is a validation error."""
    await log_in(client, fake_redis, test_citizen)

    response = await client.post("/posts/not-a-uuid/endorse")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestChangeLanguage:
    """Tests for the language preference endpoint."""

    @pytest.mark.asyncio
    async def test_sets_cookie_and_returns_to_referer(self, client: AsyncClient):
        """Test the cookie is set and the caller goes back where they were."""
        response = await client.get(
            "/change-lang/hi",
            headers={"Referer": "http://test/profile"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "http://test/profile"
        set_cookie = response.headers["set-cookie"]
        assert f"{settings.language_cookie_name}=hi" in set_cookie
        assert "Max-Age=900" in set_cookie
        assert "HttpOnly" in set_cookie

    @pytest.mark.asyncio
    async def test_without_referer(self, client: AsyncClient):
        """Test the home page is the fallback target."""
        response = await client.get("/change-lang/kn")

        assert response.status_code == 303
        assert response.headers["location"] == "/"

    @pytest.mark.asyncio
    async def test_off_site_referer_is_ignored(self, client: AsyncClient):
        """Test redirects never leave the site."""
        response = await client.get(
            "/change-lang/en",
            headers={"Referer": "https://evil.example.com/phish"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/"

    @pytest.mark.asyncio
    async def test_unsupported_language(self, client: AsyncClient):
        """Test unknown languages are refused."""
        response = await client.get("/change-lang/xx")

        assert response.status_code == 400
        assert "set-cookie" not in response.headers


@pytest.mark.asyncio
async def test_database_failure_format(client: AsyncClient, monkeypatch):
    """Test storage errors become a 500 with the standard error body."""

    async def failing_list_all(self):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    monkeypatch.setattr(IssueService, "list_all", failing_list_all)

    response = await client.get("/")

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "INFRASTRUCTURE_ERROR"
    assert "connection lost" not in error["message"]
    assert "request_id" in error


def make_request(peer: str, headers: dict[str, str]) -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/login",
            "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
            "client": (peer, 50000),
        }
    )


class TestClientIp:
    """Tests for caller address resolution."""

    def test_untrusted_peer_ignores_forwarded_for(self, monkeypatch):
        monkeypatch.setattr(settings, "trusted_proxies", "")
        request = make_request("198.51.100.7", {"X-Forwarded-For": "203.0.113.5"})
        assert client_ip(request) == "198.51.100.7"

    def test_trusted_proxy_uses_last_untrusted_hop(self, monkeypatch):
        """Test client supplied hops in front of the real address are skipped."""
        monkeypatch.setattr(settings, "trusted_proxies", "10.0.0.1,10.0.0.2")
        request = make_request(
            "10.0.0.1",
            {"X-Forwarded-For": "1.2.3.4, 198.51.100.7, 10.0.0.2"},
        )
        assert client_ip(request) == "198.51.100.7"

    def test_trusted_proxy_falls_back_to_real_ip(self, monkeypatch):
        monkeypatch.setattr(settings, "trusted_proxies", "10.0.0.1")
        request = make_request("10.0.0.1", {"X-Real-IP": "198.51.100.7"})
        assert client_ip(request) == "198.51.100.7"
