import logging

import httpx
import pytest


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point HOME at an empty temporary directory."""
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def clean_root_logger():
    """Drop handlers added to the root logger during a test."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield root
    for h in root.handlers[:]:
        if h not in before:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


class Site:
    """Stateful test webserver: serves `bodies` in order, repeating the last one."""

    def __init__(self, *bodies):
        self.bodies = list(bodies)
        self.hits = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = self.bodies[min(self.hits, len(self.bodies) - 1)]
        self.hits += 1
        if isinstance(body, Exception):
            raise body
        return httpx.Response(200, content=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class FakeMailer:
    """Stands in for send_mail; records every attempt."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def __call__(self, cfg):
        self.calls.append(cfg)
        if self.error is not None:
            raise self.error


@pytest.fixture
def make_site():
    return Site


@pytest.fixture
def make_mailer():
    return FakeMailer
