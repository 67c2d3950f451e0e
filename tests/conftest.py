"""Shared fixtures: a fake shortening service, an in-memory clipboard, and a workflow."""

import asyncio
import json
from typing import AsyncGenerator, Callable, List

import httpx
import pytest
import pytest_asyncio
from prompt_toolkit.clipboard import InMemoryClipboard

from insta_short.client import HttpClient
from insta_short.utils import Config
from insta_short.workflow import ShortenWorkflow

API_URL = "https://short.test/api"
API_KEY = "test-key"
SHORT_URL = "https://x.fly/ab12"


def json_reply(payload, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=json.dumps(payload))
    return handler


class FakeService:
    """Answers with ``handler`` and remembers every request it saw."""

    def __init__(self, handler=None):
        self.handler = handler or json_reply({"status": "success", "shortenedUrl": SHORT_URL})
        self.requests: List[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        if asyncio.iscoroutine(response):
            response = await response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def cfg() -> Config:
    return Config(api_key=API_KEY, api_url=API_URL, timeout=5, copy_window=0.05)


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def clipboard() -> InMemoryClipboard:
    return InMemoryClipboard()


@pytest_asyncio.fixture
async def workflow(cfg, service, clipboard) -> AsyncGenerator[ShortenWorkflow, None]:
    flow = ShortenWorkflow(HttpClient(cfg, transport=service.transport), clipboard, copy_window=cfg.copy_window)
    yield flow
    await flow.close()
