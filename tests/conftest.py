import asyncio
import json
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app import db
from app.main import app
from app.services.gemini_client import get_generation_client


def envelope(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class FakeGenerator:
    """Stands in for GeminiClient; replies are consumed in order."""

    def __init__(self) -> None:
        self.replies: List[Any] = []
        self.prompts: List[str] = []
        # seconds to wait inside generate, to let concurrent callers interleave
        self.delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0

    def reply_json(self, data: Any, fenced: bool = False) -> None:
        text = json.dumps(data)
        self.replies.append(f"```json\n{text}\n```" if fenced else text)

    async def generate(self, prompt: str) -> Dict[str, Any]:
        self.prompts.append(prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            reply = self.replies.pop(0)
        finally:
            self.in_flight -= 1
        if isinstance(reply, Exception):
            raise reply
        return envelope(reply)


@pytest.fixture
def database(tmp_path):
    db.configure_engine(f"sqlite:///{tmp_path / 'test_workouts.db'}")
    yield tmp_path / "test_workouts.db"


@pytest_asyncio.fixture
async def session(database):
    await db.init_db()
    async with db.get_session() as s:
        yield s


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def client(database, generator):
    app.dependency_overrides[get_generation_client] = lambda: generator
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()
