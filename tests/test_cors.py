"""Tests for CORS middleware installed by the server."""

from dataclasses import dataclass

from wren.adapter import adapt
from wren.app import Server
from wren.config import ServerConfig
from wren.http.request import Request
from wren.middleware.cors import PERMISSIVE_CORS, CORSConfig
from wren.routing.route import Route
from wren.testing import TestClient, envelope_of


@dataclass(frozen=True, slots=True)
class DataReq:
    q: str = ""


def data(request: Request, req: DataReq) -> dict[str, str]:
    return {"message": "hello"}


def _make_cors_server(config: CORSConfig | None = PERMISSIVE_CORS) -> Server:
    """Helper: a server with one GET and one POST route under the given policy."""
    return Server(
        [
            Route("GET", "data", adapt("GET", data), version=1),
            Route("POST", "data", adapt("POST", data), version=1),
        ],
        config=ServerConfig(cors=config),
    )


def _names(response) -> set[str]:
    return {name for name, _ in response.headers}


class TestCORSNonCorsRequests:
    """Requests without an Origin header should pass through unaffected."""

    async def test_no_origin_header(self) -> None:
        async with TestClient(_make_cors_server()) as client:
            response = await client.get("/v1/data", req={})
        assert response.status == 200
        assert "access-control-allow-origin" not in _names(response)

    async def test_disabled(self) -> None:
        async with TestClient(_make_cors_server(None)) as client:
            response = await client.get("/v1/data", req={}, headers={"Origin": "https://a.com"})
        assert "access-control-allow-origin" not in _names(response)


class TestPermissiveDefault:
    async def test_echoes_origin_with_credentials(self) -> None:
        async with TestClient(_make_cors_server()) as client:
            response = await client.get("/v1/data", req={}, headers={"Origin": "https://a.com"})
        assert ("access-control-allow-origin", "https://a.com") in response.headers
        assert ("access-control-allow-credentials", "true") in response.headers
        assert ("vary", "Origin") in response.headers

    async def test_preflight_for_any_registered_path(self) -> None:
        async with TestClient(_make_cors_server()) as client:
            response = await client.options(
                "/v1/data",
                headers={
                    "Origin": "https://a.com",
                    "Access-Control-Request-Method": "PATCH",
                },
            )
        assert response.status == 204
        assert response.body_bytes == b""
        methods = response.header("access-control-allow-methods") or ""
        for method in ("HEAD", "GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"):
            assert method in methods
        assert response.header("access-control-allow-headers") == "Content-Type, Authorization"

    async def test_error_responses_get_headers(self) -> None:
        async with TestClient(_make_cors_server()) as client:
            response = await client.get("/v1/missing", headers={"Origin": "https://a.com"})
        assert response.status == 404
        assert ("access-control-allow-origin", "https://a.com") in response.headers


class TestCORSPolicies:
    async def test_disallowed_origin_no_cors_headers(self) -> None:
        config = CORSConfig(allow_origins=("https://example.com",))
        async with TestClient(_make_cors_server(config)) as client:
            response = await client.get("/v1/data", req={}, headers={"Origin": "https://evil.com"})
        assert response.status == 200
        assert "access-control-allow-origin" not in _names(response)

    async def test_wildcard_without_credentials(self) -> None:
        config = CORSConfig(allow_origins=("*",))
        async with TestClient(_make_cors_server(config)) as client:
            response = await client.get("/v1/data", req={}, headers={"Origin": "https://x.com"})
        assert ("access-control-allow-origin", "*") in response.headers
        assert ("vary", "Origin") not in response.headers

    async def test_preflight_max_age(self) -> None:
        config = CORSConfig(allow_origins=("*",), max_age=3600)
        async with TestClient(_make_cors_server(config)) as client:
            response = await client.options(
                "/v1/data",
                headers={"Origin": "https://x.com", "Access-Control-Request-Method": "GET"},
            )
        assert ("access-control-max-age", "3600") in response.headers

    async def test_expose_headers(self) -> None:
        config = CORSConfig(allow_origins=("*",), expose_headers=("X-Request-Id",))
        async with TestClient(_make_cors_server(config)) as client:
            response = await client.get("/v1/data", req={}, headers={"Origin": "https://x.com"})
        assert response.header("access-control-expose-headers") == "X-Request-Id"

    async def test_second_origin_allowed(self) -> None:
        config = CORSConfig(allow_origins=("https://a.com", "https://b.com"))
        async with TestClient(_make_cors_server(config)) as client:
            response = await client.get("/v1/data", req={}, headers={"Origin": "https://b.com"})
        assert ("access-control-allow-origin", "https://b.com") in response.headers


class TestPreflightChecks:
    async def test_missing_request_method(self) -> None:
        async with TestClient(_make_cors_server()) as client:
            response = await client.options("/v1/data", headers={"Origin": "https://a.com"})
        assert response.status == 400
        assert envelope_of(response).status_code == 400
        assert ("access-control-allow-origin", "https://a.com") in response.headers

    async def test_method_not_allowed(self) -> None:
        async with TestClient(_make_cors_server()) as client:
            response = await client.options(
                "/v1/data",
                headers={"Origin": "https://a.com", "Access-Control-Request-Method": "TRACE"},
            )
        assert response.status == 405
        assert response.header("allow") == "DELETE, GET, HEAD, OPTIONS, PATCH, POST, PUT"
        assert "access-control-allow-methods" not in _names(response)

    async def test_method_compared_case_insensitively(self) -> None:
        async with TestClient(_make_cors_server()) as client:
            response = await client.options(
                "/v1/data",
                headers={"Origin": "https://a.com", "Access-Control-Request-Method": "post"},
            )
        assert response.status == 204

    async def test_header_not_allowed(self) -> None:
        async with TestClient(_make_cors_server()) as client:
            response = await client.options(
                "/v1/data",
                headers={
                    "Origin": "https://a.com",
                    "Access-Control-Request-Method": "POST",
                    "Access-Control-Request-Headers": "content-type, X-Secret",
                },
            )
        assert response.status == 403
        assert envelope_of(response).error == "header not allowed: X-Secret"

    async def test_allowed_and_safelisted_headers(self) -> None:
        async with TestClient(_make_cors_server()) as client:
            response = await client.options(
                "/v1/data",
                headers={
                    "Origin": "https://a.com",
                    "Access-Control-Request-Method": "POST",
                    "Access-Control-Request-Headers": "authorization, Accept-Language",
                },
            )
        assert response.status == 204

    async def test_disallowed_origin_preflight_reaches_router(self) -> None:
        config = CORSConfig(allow_origins=("https://example.com",))
        async with TestClient(_make_cors_server(config)) as client:
            response = await client.options(
                "/v1/data",
                headers={"Origin": "https://evil.com", "Access-Control-Request-Method": "GET"},
            )
        assert response.status == 405
        assert "access-control-allow-origin" not in _names(response)
