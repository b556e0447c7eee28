"""Fixtures de sincronización: API de GeoBrain falsa sobre aiohttp.web, en proceso.

FakeGeoBrain sirve /public-api/auth/login y /public-api/empreendimentos con
comportamiento configurable por test (401s, status de error, demoras, meta).
"""

import asyncio
import math
import time

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from jose import jwt


def build_token(exp=None, **claims) -> str:
    payload = dict(claims)
    if exp is not None:
        payload["exp"] = exp
    return jwt.encode(payload, "fake-secret", algorithm="HS256")


class FakeGeoBrain:
    PREFIX = "/public-api"

    def __init__(self):
        self.base_url = ""

        # Login
        self.tokens: list[str] = []  # se consumen en orden; vacío = JWT válido por 1h
        self.login_statuses: list[int] = []  # se consumen en orden; vacío = 200
        self.token_field = "token"
        self.login_delay = 0.0
        self.login_calls = 0
        self.login_payloads: list[dict] = []

        # Catálogo
        self.records: list[dict] = []
        self.with_meta = True
        self.unauthorized_responses = 0
        self.page_status: dict[int, int] = {}
        self.page_delay = 0.0
        self.page_requests: list[int] = []
        self.auth_headers: list[str] = []

        self.app = web.Application()
        self.app.router.add_post(f"{self.PREFIX}/auth/login", self._login)
        self.app.router.add_get(f"{self.PREFIX}/empreendimentos", self._catalog)

    async def _login(self, request: web.Request) -> web.Response:
        self.login_calls += 1
        self.login_payloads.append(await request.json())
        if self.login_delay:
            await asyncio.sleep(self.login_delay)

        status = self.login_statuses.pop(0) if self.login_statuses else 200
        if status != 200:
            return web.json_response({"message": "Invalid credentials"}, status=status)

        if self.tokens:
            token = self.tokens.pop(0)
        else:
            token = build_token(exp=int(time.time()) + 3600, jti=str(self.login_calls))
        return web.json_response({self.token_field: token, "token_type": "bearer"})

    async def _catalog(self, request: web.Request) -> web.Response:
        page = int(request.query["page"])
        per_page = int(request.query["per_page"])
        self.page_requests.append(page)
        self.auth_headers.append(request.headers.get("Authorization", ""))

        if self.page_delay:
            await asyncio.sleep(self.page_delay)

        if self.unauthorized_responses > 0:
            self.unauthorized_responses -= 1
            return web.json_response({"message": "Unauthenticated."}, status=401)

        if page in self.page_status:
            return web.json_response({"message": "Server Error"}, status=self.page_status[page])

        start = (page - 1) * per_page
        body = {"data": self.records[start:start + per_page]}
        if self.with_meta:
            body["meta"] = {
                "current_page": page,
                "per_page": per_page,
                "total": len(self.records),
                "last_page": max(1, math.ceil(len(self.records) / per_page)),
            }
        return web.json_response(body)


class FakeClock:
    """Reloj controlable en epoch segundos."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
async def geobrain():
    api = FakeGeoBrain()
    server = TestServer(api.app)
    await server.start_server()
    api.base_url = f"http://{server.host}:{server.port}{FakeGeoBrain.PREFIX}"
    yield api
    await server.close()


@pytest.fixture
async def http():
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_token():
    return build_token


@pytest.fixture
def raw_projects():
    """Fábrica de registros crudos como los devuelve GeoBrain."""

    def _make(count: int, start: int = 1) -> list[dict]:
        return [
            {
                "id": start + i,
                "nome": f"Empreendimento {start + i}",
                "cidade": "Campinas",
                "estado": "SP",
                "vgv_total": 1_000_000 * (start + i),
                "quartos": 2,
            }
            for i in range(count)
        ]

    return _make
