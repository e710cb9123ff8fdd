# in-memory commerce API served through httpx.MockTransport, plus a base test case
import json
import os
import sys
import tempfile
import unittest
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import database as db_database  # noqa: E402
from utils.config import Settings  # noqa: E402
from utils.state import GlobalState  # noqa: E402

API_URL = "http://market.test/api"

Handler = Callable[[httpx.Request], Any]

CUSTOMER = {"id": 7, "name": "Cara", "email": "cara@example.com", "role": "CUSTOMER"}
VENDOR = {"id": 8, "name": "Vic", "email": "vic@example.com", "role": "VENDOR"}
ADMIN = {"id": 1, "name": "Ada", "email": "ada@example.com", "role": "ADMIN"}


def envelope(data: Any, message: str = "OK") -> Dict[str, Any]:
    return {"status": 200, "message": message, "data": data}


class FakeApi:
    """
    Routes keyed by (method, path below /api). A route is either a fixed
    (status, body) pair or a callable taking the request; callables may be
    async to simulate slow responses.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        body: Any = None,
        status: int = 200,
        handler: Optional[Handler] = None,
    ) -> None:
        if handler is None:

            def handler(request: httpx.Request) -> httpx.Response:
                if body is None:
                    return httpx.Response(status)
                return httpx.Response(status, json=body)

        self.routes[(method, path)] = handler

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        handler = self.routes.get((request.method, path))
        if handler is None:
            return httpx.Response(404, json={"message": f"No route for {path}"})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method and r.url.path.removeprefix("/api") == path
        ]

    def json_of(self, method: str, path: str) -> Any:
        """Body of the last matching request."""
        return json.loads(self.calls(method, path)[-1].content)


class MarketTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the DB to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        self.api = FakeApi()
        self.notes: List[Tuple[str, str]] = []
        self.state = GlobalState.create(
            Settings(api_url=API_URL, db_path=self.db_path, http_timeout=2.0),
            notify=self.record_note,
            transport=self.api.transport(),
        )

    async def asyncTearDown(self):
        await self.state.close()

    def tearDown(self):
        self.temp_dir.cleanup()
        db_database._initialized = False

    def record_note(self, message: str, severity: str = "information") -> None:
        self.notes.append((message, severity))

    async def login_as(self, user: Dict[str, Any], **profile) -> None:
        self.api.on("GET", "/users/me", envelope({**user, **profile}))
        await self.state.session.login("token-" + str(user["id"]))


def always(answer: bool):
    async def confirm(caption: str) -> bool:
        return answer

    return confirm
