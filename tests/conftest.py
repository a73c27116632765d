from collections.abc import AsyncGenerator, Iterator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from studio.core.config import settings

# Override settings for tests
settings.app_env = "development"
settings.log_json = False

from studio.core.dependencies import get_gateway_client, get_store  # noqa: E402
from studio.db.session import create_db_engine, create_session_factory, init_db  # noqa: E402
from studio.db.store import PersistenceStore  # noqa: E402
from studio.gateway.types import NormalizedResponse  # noqa: E402
from studio.main import app  # noqa: E402

ORIGIN_IMAGE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="


def make_response(content: str = "Done, here is your image", tokens_used: int = 42) -> NormalizedResponse:
    return NormalizedResponse(content=content, tokens_used=tokens_used, model="gpt-4o", finish_reason="stop")


@pytest.fixture
def store() -> Iterator[PersistenceStore]:
    """Fresh in-memory SQLite store per test."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield PersistenceStore(create_session_factory(engine), lock_timeout=1.0)
    engine.dispose()


@pytest.fixture
def configured_store(store: PersistenceStore) -> PersistenceStore:
    with store.exclusive() as tx:
        tx.save_setting("https://api.example.com/v1", "sk-test", "gpt-4o")
    return store


@pytest.fixture
def gateway() -> AsyncMock:
    """Gateway double; ``call`` resolves to a successful response by default."""
    double = AsyncMock()
    double.call = AsyncMock(return_value=make_response())
    return double


@pytest.fixture
async def client(store, gateway) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_gateway_client] = lambda: gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
