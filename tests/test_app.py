"""End-to-end tests for wren.app.Server through the ASGI interface."""

import asyncio
from dataclasses import dataclass
from typing import Any

import pytest

from wren.adapter import adapt
from wren.app import Server
from wren.classify import GENERIC_ERROR_MESSAGE
from wren.config import ServerConfig
from wren.context import g, get_request
from wren.errors import BadRequest, MissingAuthMiddlewareError
from wren.http.request import Request
from wren.http.response import JSON_CONTENT_TYPE
from wren.registry import MiddlewareSet
from wren.routing.route import Route
from wren.testing import TestClient, envelope_of


@dataclass(frozen=True, slots=True)
class PingReq:
    Msg: str = ""
    ReturnError: bool = False


@dataclass(frozen=True, slots=True)
class PingResp:
    Msg: str


async def ping(request: Request, req: PingReq) -> PingResp:
    if req.ReturnError:
        raise BadRequest("you asked for an error")
    return PingResp(Msg=f"You said: {req.Msg}")


def echo(request: Request, req: dict[str, Any]) -> dict[str, Any]:
    return {"echo": req, "trace": g.get("trace")}


def _server(**kwargs: Any) -> Server:
    return Server(
        [
            Route("GET", "ping", adapt("GET", ping), version=1),
            Route("POST", "echo", adapt("POST", echo), version=1),
        ],
        **kwargs,
    )


class TestPing:
    async def test_round_trip(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/ping", req={"Msg": "hi"})
        assert response.status == 200
        assert response.content_type == JSON_CONTENT_TYPE
        assert response.body_bytes == b'{"StatusCode":200,"Data":{"Msg":"You said: hi"}}'

    async def test_typed_envelope(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/ping", req=PingReq(Msg="hey"))
        env = envelope_of(response, PingResp)
        assert env.data == PingResp(Msg="You said: hey")

    async def test_raw_query_string(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get('/v1/ping?req={"Msg":"raw"}')
        assert envelope_of(response).data == {"Msg": "You said: raw"}

    async def test_raw_utf8_query_string(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get('/v1/ping?req={"Msg":"é"}')
        assert envelope_of(response).data == {"Msg": "You said: é"}

    async def test_business_error(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/ping", req={"Msg": "x", "ReturnError": True})
        assert response.status == 400
        assert envelope_of(response).error == "you asked for an error"

    async def test_missing_req(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/ping")
        assert response.status == 400
        assert envelope_of(response).error == "URL param 'req' is required"

    async def test_ambiguous_req(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/ping", query=[("req", "{}"), ("req", "{}")])
        assert response.status == 400


class TestPost:
    async def test_json_body(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.post("/v1/echo", json={"a": [1, 2]})
        assert response.status == 200
        assert envelope_of(response).data == {"echo": {"a": [1, 2]}, "trace": None}

    async def test_empty_body(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.post("/v1/echo")
        assert response.status == 400
        assert envelope_of(response).error == "request body is empty"


class TestRouting:
    async def test_unknown_path_is_404_envelope(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/v1/nope")
        assert response.status == 404
        assert envelope_of(response).status_code == 404

    async def test_wrong_method_is_405_with_allow(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.delete("/v1/ping")
        assert response.status == 405
        assert response.header("allow") == "GET"

    async def test_version_prefix_required(self) -> None:
        async with TestClient(_server()) as client:
            response = await client.get("/ping", req={"Msg": "x"})
        assert response.status == 404

    async def test_path_params_reach_request(self) -> None:
        async def show(request: Request, req: dict[str, Any]) -> str:
            return request.path_params["id"]

        server = Server([Route("GET", "items/{id:int}", adapt("GET", show), version=1)])
        async with TestClient(server) as client:
            response = await client.get("/v1/items/42", req={})
        assert envelope_of(response).data == "42"


class TestMiddleware:
    async def test_pre_and_post_order(self) -> None:
        calls: list[str] = []

        def tracer(name: str):
            async def mw(request, next):
                calls.append(name)
                return await next(request)

            return mw

        async def verify(request, next):
            calls.append("auth")
            return await next(request)

        server = Server(
            [Route("GET", "ping", adapt("GET", ping), version=1, requires_auth=True)],
            MiddlewareSet(pre=(tracer("pre1"), tracer("pre2")), auth=verify, post=(tracer("post"),)),
        )
        async with TestClient(server) as client:
            await client.get("/v1/ping", req={})
        assert calls == ["pre1", "pre2", "auth", "post"]

    async def test_pre_middleware_sets_g(self) -> None:
        async def trace(request, next):
            g.trace = request.headers.get("x-trace-id")
            return await next(request)

        server = _server(middleware=MiddlewareSet(pre=(trace,)))
        async with TestClient(server) as client:
            response = await client.post("/v1/echo", json={}, headers={"X-Trace-Id": "t-1"})
        assert envelope_of(response).data["trace"] == "t-1"

    async def test_request_context(self) -> None:
        async def whoami(request: Request, req: dict[str, Any]) -> bool:
            return get_request() is not None

        server = Server([Route("GET", "me", adapt("GET", whoami), version=1)])
        async with TestClient(server) as client:
            response = await client.get("/v1/me", req={})
        assert envelope_of(response).data is True

    def test_build_errors_raise_at_construction(self) -> None:
        with pytest.raises(MissingAuthMiddlewareError):
            Server([Route("GET", "me", adapt("GET", ping), requires_auth=True)])


class TestFailures:
    async def test_middleware_crash_is_generic_500(self) -> None:
        async def explode(request, next):
            raise RuntimeError("secret internals")

        server = _server(middleware=MiddlewareSet(pre=(explode,)))
        async with TestClient(server) as client:
            response = await client.get("/v1/ping", req={})
        assert response.status == 500
        assert envelope_of(response).error == GENERIC_ERROR_MESSAGE
        assert b"secret" not in response.body_bytes

    async def test_unencodable_error_sends_fallback(self) -> None:
        from wren.errors import HTTPError

        class Weird(HTTPError):
            def __init__(self) -> None:
                super().__init__(status=400, detail=object())  # type: ignore[arg-type]

        async def weird(request: Request, req: dict[str, Any]) -> None:
            raise Weird()

        server = Server([Route("GET", "weird", adapt("GET", weird), version=1)])
        async with TestClient(server) as client:
            response = await client.get("/v1/weird", req={})
        assert response.status == 500
        assert envelope_of(response).status_code == 500

    async def test_concurrent_requests(self) -> None:
        async def slow(request: Request, req: PingReq) -> str:
            await asyncio.sleep(0.01)
            return req.Msg

        server = Server([Route("GET", "slow", adapt("GET", slow), version=1)])
        async with TestClient(server) as client:
            responses = await asyncio.gather(
                *(client.get("/v1/slow", req={"Msg": str(i)}) for i in range(10))
            )
        assert [envelope_of(r).data for r in responses] == [str(i) for i in range(10)]


class TestServer:
    def test_introspection(self) -> None:
        server = _server()
        assert len(server.routes) == 2
        assert {(e.method, e.path) for e in server.endpoints} == {
            ("GET", "/v1/ping"),
            ("POST", "/v1/echo"),
        }
        assert server.router.compiled

    async def test_lifespan(self) -> None:
        server = _server()
        events: list[str] = []

        @server.on_startup
        async def start() -> None:
            events.append("start")

        @server.on_shutdown
        def stop() -> None:
            events.append("stop")

        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return incoming.pop(0)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await server({"type": "lifespan"}, receive, send)
        assert events == ["start", "stop"]
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_lifespan_startup_failure(self) -> None:
        server = _server()

        @server.on_startup
        def boom() -> None:
            raise RuntimeError("no database")

        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return {"type": "lifespan.startup"}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await server({"type": "lifespan"}, receive, send)
        assert sent == [{"type": "lifespan.startup.failed", "message": "no database"}]

    async def test_test_client_runs_hooks(self) -> None:
        server = _server()
        events: list[str] = []
        server.on_startup(lambda: events.append("start"))
        server.on_shutdown(lambda: events.append("stop"))
        async with TestClient(server):
            assert events == ["start"]
        assert events == ["start", "stop"]

    def test_cors_can_be_disabled(self) -> None:
        server = _server(config=ServerConfig(cors=None))
        assert server._outer == ()
