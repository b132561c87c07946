import json

import httpx
import pytest


class Recorder:
    """httpx handler that records requests and answers with a canned response."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = None
        self.content = b""
        self.headers = {}

    def respond(self, status_code=200, body=None, headers=None, content=b""):
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}
        self.content = content
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is not None:
            return httpx.Response(self.status_code, json=self.body, headers=self.headers)
        return httpx.Response(self.status_code, content=self.content, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def transport(recorder):
    return httpx.MockTransport(recorder)
