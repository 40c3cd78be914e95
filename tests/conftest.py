"""Pytest configuration and shared fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.container import Container, reset_container, set_container
from src.infrastructure.streaming.frame_decoder import format_frame
from src.main import app


class FakeBackend:
    """Stands in for HttpChatTransport: streams queued frame text, one reply per call."""

    def __init__(self):
        self.replies: list[str] = []
        self.calls: list[tuple[str, dict]] = []

    def queue_text(self, content: str) -> None:
        self.replies.append(format_frame("text", {"content": content}) + format_frame("done", {}))

    def stream(self, message, **body_extra):
        self.calls.append((message, body_extra))
        reply = self.replies.pop(0) if self.replies else format_frame("done", {})

        async def gen():
            yield reply

        return gen()

    async def close(self):
        pass


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def container(backend):
    """Fresh container per test with the chat backend replaced."""
    c = Container()
    c.__dict__["transport"] = backend
    set_container(c)
    yield c
    reset_container()


@pytest.fixture
async def client(container):
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
