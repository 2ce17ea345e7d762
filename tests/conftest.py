import asyncio
import inspect
import pathlib
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from portfolio_tracker.api.dependencies import get_db_session, get_price_resolver  # noqa: E402
from portfolio_tracker.api.errors import register_exception_handlers  # noqa: E402
from portfolio_tracker.api.routes import api_router  # noqa: E402
from portfolio_tracker.db.base import Base  # noqa: E402
from portfolio_tracker.services.pricing import PriceResolver  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            argnames = pyfuncitem._fixtureinfo.argnames
            loop.run_until_complete(test_function(**{name: pyfuncitem.funcargs[name] for name in argnames}))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture
def api_client():
    """Return a context manager yielding an HTTP client bound to a fresh in-memory database."""

    @asynccontextmanager
    async def _open(resolver: PriceResolver, session_dependency=None) -> AsyncIterator[AsyncClient]:
        engine = create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        factory = async_sessionmaker(engine, expire_on_commit=False)

        async def _session():
            async with factory() as session:
                yield session

        app = FastAPI()
        register_exception_handlers(app)
        app.include_router(api_router)
        app.dependency_overrides[get_db_session] = session_dependency or _session
        app.dependency_overrides[get_price_resolver] = lambda: resolver

        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
        finally:
            await engine.dispose()

    return _open
