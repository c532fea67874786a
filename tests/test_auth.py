"""Tests for wren.middleware.auth: bearer token gating of authenticated routes."""

from dataclasses import dataclass

import pytest

from wren.adapter import adapt
from wren.app import Server
from wren.http.request import Request
from wren.middleware.auth import BearerAuth, get_principal
from wren.registry import MiddlewareSet
from wren.routing.route import Route
from wren.testing import TestClient, envelope_of


@dataclass(frozen=True, slots=True)
class User:
    name: str


TOKENS = {"s3cret": User("ada")}


async def verify_async(token: str) -> User | None:
    return TOKENS.get(token)


def verify_sync(token: str) -> User | None:
    return TOKENS.get(token)


async def me(request: Request, req: dict) -> str:
    return get_principal().name


async def public(request: Request, req: dict) -> str:
    return "hello"


def _server(verify=verify_async) -> Server:
    return Server(
        [
            Route("GET", "me", adapt("GET", me), version=1, requires_auth=True),
            Route("GET", "public", adapt("GET", public), version=1),
        ],
        MiddlewareSet(auth=BearerAuth(verify)),
    )


class TestBearerAuth:
    @pytest.mark.parametrize("verify", [verify_async, verify_sync])
    async def test_valid_token(self, verify) -> None:
        async with TestClient(_server(verify)) as client:
            response = await client.get("/v1/me", req={}, headers={"Authorization": "Bearer s3cret"})
        assert response.status == 200
        assert envelope_of(response).data == "ada"

    async def test_missing_token(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/me", req={})
        assert response.status == 401
        assert envelope_of(response).error == "missing bearer token"
        assert response.header("www-authenticate") == "Bearer"

    async def test_invalid_token(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/me", req={}, headers={"Authorization": "Bearer nope"})
        assert response.status == 401
        assert envelope_of(response).error == "invalid bearer token"

    async def test_wrong_scheme(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/me", req={}, headers={"Authorization": "Basic s3cret"})
        assert response.status == 401

    async def test_scheme_case_insensitive(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/me", req={}, headers={"Authorization": "bearer s3cret"})
        assert response.status == 200

    async def test_public_route_not_gated(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/public", req={})
        assert response.status == 200

    def test_principal_outside_request(self) -> None:
        with pytest.raises(LookupError):
            get_principal()
