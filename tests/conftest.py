import asyncio
from typing import Any, Callable, Optional

import pytest
import pytest_asyncio
from aiohttp import web

from fakes import FakeTransport


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


class PortalStub:
    """Scriptable stand-in for the portal's HTTP endpoints."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.command_responses: list[Any] = []
        self.login_result: dict[str, Any] = {"result": 1, "msg": "OK"}
        self.session_cookie: Optional[str] = "session-abc"
        self.share_key = "share-123"
        self.logout_status = 200
        self.command_handler: Optional[Callable[[dict[str, str]], Any]] = None

    def next_command_response(self, form: dict[str, str]) -> Any:
        if self.command_handler is not None:
            return self.command_handler(form)
        if len(self.command_responses) > 1:
            return self.command_responses.pop(0)
        if self.command_responses:
            return self.command_responses[0]
        return {"success": True, "msg": "1"}


@pytest_asyncio.fixture
async def portal_server(unused_tcp_port_factory):
    stub = PortalStub()

    async def record(request: web.Request) -> dict[str, str]:
        form = dict(await request.post())
        stub.requests.append(
            {
                "method": request.method,
                "path": request.path,
                "form": form,
                "headers": dict(request.headers),
            }
        )
        return form

    async def login_handler(request: web.Request) -> web.StreamResponse:
        await record(request)
        response = web.json_response(stub.login_result)
        if stub.session_cookie:
            response.set_cookie("JSESSIONID", stub.session_cookie)
        return response

    async def demo_handler(request: web.Request) -> web.StreamResponse:
        await record(request)
        response = web.Response(text="<html></html>", content_type="text/html")
        if stub.session_cookie:
            response.set_cookie("JSESSIONID", stub.session_cookie)
        return response

    async def share_handler(request: web.Request) -> web.StreamResponse:
        await record(request)
        if request.match_info["key"] != stub.share_key:
            return web.Response(status=302, headers={"Location": "/errorMess?code=2"})
        response = web.Response(status=302, headers={"Location": "/index"})
        if stub.session_cookie:
            response.set_cookie("JSESSIONID", stub.session_cookie)
        return response

    async def logout_handler(request: web.Request) -> web.StreamResponse:
        await record(request)
        return web.Response(text="bye", status=stub.logout_status)

    async def command_handler(request: web.Request) -> web.StreamResponse:
        form = await record(request)
        payload = stub.next_command_response(form)
        if isinstance(payload, web.StreamResponse):
            return payload
        if asyncio.iscoroutine(payload):
            payload = await payload
        return web.json_response(payload)

    async def error_page(request: web.Request) -> web.StreamResponse:
        return web.Response(text="session expired", content_type="text/html")

    async def expired_handler(request: web.Request) -> web.StreamResponse:
        await record(request)
        raise web.HTTPFound("/errorMess?code=1")

    app = web.Application()
    app.router.add_post("/login", login_handler)
    app.router.add_get("/login/toViewExamlePlant", demo_handler)
    app.router.add_get("/login/toSharePlant/{key}", share_handler)
    app.router.add_get("/logout", logout_handler)
    app.router.add_post("/tcpSet.do", command_handler)
    app.router.add_post("/ftp.do", command_handler)
    app.router.add_post("/expired.do", expired_handler)
    app.router.add_get("/errorMess", error_page)

    runner = web.AppRunner(app)
    await runner.setup()

    port = unused_tcp_port_factory()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()

    stub.url = f"http://127.0.0.1:{port}"

    try:
        yield stub
    finally:
        await runner.cleanup()
