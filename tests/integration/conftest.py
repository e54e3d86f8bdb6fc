"""
Fixtures for SDK integration tests.

Provides an in-memory CouchDB stand-in served through httpx.MockTransport,
so the client runs its real HTTP code path without a server.
"""

import json
import uuid
from urllib.parse import unquote

import httpx
import pytest
import pytest_asyncio

from sdk.couchdoc_sdk.client import CouchClient

BASE_URL = "http://couch.test:5984/"

NO_DB = {"error": "not_found", "reason": "Database does not exist."}
MISSING = {"error": "not_found", "reason": "missing"}
FILE_EXISTS = {
    "error": "file_exists",
    "reason": "The database could not be created, the file already exists.",
}


class FakeCouch:
    """Minimal CouchDB: databases, POST create, GET by id.

    Attributes:
        databases: db name -> {doc id -> doc}
        requests: every request received, in order
    """

    def __init__(self) -> None:
        self.databases: dict[str, dict[str, dict]] = {}
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> list[tuple[str, str]]:
        """(method, raw path) of every request received."""
        return [(r.method, r.url.raw_path.decode()) for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.raw_path.decode().lstrip("/")
        db, _, key = path.partition("/")

        if not db:
            return httpx.Response(200, json={"couchdb": "Welcome", "version": "3.3.3"})

        if not key:
            return self._database(request, db)

        if request.method == "GET":
            if db not in self.databases:
                return httpx.Response(404, json=NO_DB)
            doc = self.databases[db].get(unquote(key))
            if doc is None:
                return httpx.Response(404, json=MISSING)
            return httpx.Response(200, json=doc)

        return httpx.Response(405, json={"error": "method_not_allowed", "reason": "Only GET"})

    def _database(self, request: httpx.Request, db: str) -> httpx.Response:
        if request.method == "PUT":
            if db in self.databases:
                return httpx.Response(412, json=FILE_EXISTS)
            self.databases[db] = {}
            return httpx.Response(201, json={"ok": True})

        if request.method == "DELETE":
            if db not in self.databases:
                return httpx.Response(404, json=NO_DB)
            del self.databases[db]
            return httpx.Response(200, json={"ok": True})

        if request.method == "POST":
            if db not in self.databases:
                return httpx.Response(404, json=NO_DB)
            doc = json.loads(request.content)
            doc_id = doc.get("_id") or uuid.uuid4().hex
            rev = "1-" + uuid.uuid4().hex
            self.databases[db][doc_id] = {**doc, "_id": doc_id, "_rev": rev}
            return httpx.Response(201, json={"ok": True, "id": doc_id, "rev": rev})

        return httpx.Response(405, json={"error": "method_not_allowed", "reason": "Bad method"})


@pytest.fixture
def couch():
    """Fresh fake CouchDB."""
    return FakeCouch()


@pytest_asyncio.fixture
async def db(couch):
    """Connected client talking to the fake CouchDB."""
    client = CouchClient(BASE_URL, transport=httpx.MockTransport(couch))
    await client.connect()
    yield client
    await client.close()
