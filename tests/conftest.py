from pathlib import Path

import httpx
import pytest

from book_inventory.app import create_app
from book_inventory.config import Settings
from book_inventory.db import run_migrations


@pytest.fixture()
def anyio_backend() -> str:
    # The suite drives concurrency with asyncio.gather, so run on asyncio only.
    return "asyncio"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'books.db'}",
        pool_size=5,
        pool_timeout=5.0,
        migrate_on_startup=False,
    )


@pytest.fixture()
def app(settings):
    # ASGITransport does not drive the lifespan, so migrate up front.
    run_migrations(settings.database_url)
    app = create_app(settings)
    yield app
    app.state.database.dispose()


@pytest.fixture()
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
