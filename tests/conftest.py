import asyncio
import json

import httpx
import pytest

from rollover.core.http import CoreHTTP
from rollover.schemas.class_schema import ClassOut
from rollover.schemas.student import StudentOut

BASE_URL = "http://core.test"


class FakeBackend:
    """Route table behind an httpx.MockTransport; unknown routes answer 404."""

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.queries = []

    def on(self, method, path, status=200, json=None, error=None):
        self.routes[(method.upper(), path)] = (status, json, error)
        return self

    def called(self, method, path):
        return [c for c in self.calls if c[0] == method.upper() and c[1] == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, request.url.path, body))
        self.queries.append(dict(request.url.params))
        status, payload, error = self.routes.get(
            (request.method, request.url.path),
            (404, {"message": "Route not found"}, None),
        )
        if error is not None:
            raise error(f"{request.method} {request.url.path} failed", request=request)
        return httpx.Response(status, json=payload)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http(backend):
    client = CoreHTTP(base_url=BASE_URL, token="secret-token", transport=backend.transport)
    yield client
    run(client.aclose())


def make_class(id, name, section=""):
    return ClassOut.model_validate({"_id": id, "name": name, "section": section})


def make_student(id, name="Student", session_id="", class_id="c9"):
    return StudentOut.model_validate(
        {"_id": id, "firstName": name, "classId": class_id, "sessionId": session_id}
    )


@pytest.fixture
def graded_classes():
    return [make_class("c9", "9"), make_class("c10", "10")]


@pytest.fixture
def sectioned_classes():
    return [make_class("c9a", "9A"), make_class("c9b", "9B")]
