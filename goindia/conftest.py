# goindia/conftest.py
import os
import sys
import json
from pathlib import Path
from typing import Callable, List, Optional

import httpx
import pytest

# Make `import goindia` work without an editable install
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SKIP_ENV_VALIDATION", "1")

from goindia.core.config import Settings, settings  # noqa: E402
from goindia.core.database import create_all_tables, dispose_engine, init_engine  # noqa: E402
from goindia.features.profiles.session import UserSession  # noqa: E402
from goindia.features.profiles.store import InMemoryProfileStore, SqlProfileStore, clear_store  # noqa: E402
from goindia.features.trips import service as trips_service  # noqa: E402
from goindia.models.profile import UserProfile  # noqa: E402


@pytest.fixture(scope="function", autouse=True)
def no_database(monkeypatch):
    """
    Run every test against the in-memory stores unless it opts into SQL.

    Tests that need SQLAlchemy use the `sql_store` fixture, which points
    the engine at a throwaway SQLite file.
    """
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("TEST_DATABASE_URL", raising=False)
    monkeypatch.setattr(settings, "DATABASE_URL", None)
    dispose_engine()
    clear_store()
    trips_service.clear_store()
    yield
    dispose_engine()
    clear_store()
    trips_service.clear_store()


@pytest.fixture
def sql_store(tmp_path):
    init_engine(f"sqlite:///{tmp_path / 'goindia.db'}")
    create_all_tables()
    yield SqlProfileStore()
    dispose_engine()


@pytest.fixture
def memory_store():
    return InMemoryProfileStore()


@pytest.fixture
def make_session(memory_store) -> Callable[..., UserSession]:
    """Create a stored profile and return a loaded session for it."""

    def _make(user_id: str = "traveller-1", store=None, **fields) -> UserSession:
        target = store or memory_store
        target.create(UserProfile(id=user_id, **fields))
        session = UserSession(user_id, target)
        session.load()
        return session

    return _make


@pytest.fixture
def ai_settings():
    return Settings(
        _env_file=None,
        OPENROUTER_API_KEY="sk-or-test-key",
        AI_API_URL="https://openrouter.test/api/v1/chat/completions",
        AI_MODEL="test/model",
    )


def chat_body(content: Optional[str], finish_reason: str = "stop") -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}, "finish_reason": finish_reason}]}


@pytest.fixture
def chat_transport():
    """
    Build an httpx.MockTransport for the chat-completions endpoint.

    Returns (transport, sent) where `sent` collects the url, headers and
    decoded JSON body of every request.
    """

    def _build(
        *responses,
        status_code: int = 200,
        json_body=None,
        text: Optional[str] = None,
        exc: Optional[Exception] = None,
    ):
        sent: List[dict] = []
        queue = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append({
                "url": str(request.url),
                "headers": request.headers,
                "json": json.loads(request.content or b"{}"),
            })
            if exc is not None:
                raise exc
            if text is not None:
                return httpx.Response(status_code, text=text)
            if json_body is not None:
                return httpx.Response(status_code, json=json_body)
            content = queue.pop(0) if len(queue) > 1 else (queue[0] if queue else "")
            return httpx.Response(status_code, json=chat_body(content))

        return httpx.MockTransport(handler), sent

    return _build


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from goindia.main import app

    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def override_gateway(ai_settings, chat_transport):
    """Route /v1/ai calls through a mock chat transport; returns `sent`."""
    from fastapi import Depends
    from goindia.api.ai import get_gateway
    from goindia.core.auth import get_user_session
    from goindia.features.ai.gateway import AIGateway
    from goindia.main import app

    def _install(*responses, **kwargs):
        transport, sent = chat_transport(*responses, **kwargs)

        # Keep the real identity dependency in the chain
        def _gateway(session: UserSession = Depends(get_user_session)) -> AIGateway:
            return AIGateway(ai_settings, session=session, transport=transport)

        app.dependency_overrides[get_gateway] = _gateway
        return sent

    return _install
