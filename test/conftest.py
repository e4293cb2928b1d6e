"""
Test Configuration and Fixtures

This module provides:
- Environment setup (sqlite database file, test secret, sweeper off)
- A fresh schema per integration test
- A TestClient per e2e test with its own empty database

Architecture:
- Unit tests (test/**/unit/): in-memory fakes, no database
- Integration tests (test/**/integration/): real SQLAlchemy stack on sqlite+aiosqlite
- E2E tests (test/e2e/): full FastAPI app through TestClient
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# settings is instantiated at import time of src.platform.config.core_setting
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> Path:
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    db_dir = Path(tempfile.mkdtemp(prefix=f'marketplace_test_{worker_id}_'))
    db_file = db_dir / 'marketplace.db'

    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{db_file}'
    os.environ['AUTO_CREATE_TABLES'] = 'true'
    os.environ['SWEEPER_ENABLED'] = 'false'
    os.environ['SECRET_KEY'] = 'marketplace_test_secret_key'
    os.environ['DEBUG'] = 'false'
    os.environ.setdefault('PAYMENT_DEADLINE_MINUTES', '120')
    return db_file


TEST_DB_FILE = _early_setup_test_environment()

from collections.abc import AsyncGenerator, Generator  # noqa: E402
from typing import Any, Callable  # noqa: E402
import uuid  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from src.platform.database.orm_db_setting import (  # noqa: E402
    Base,
    dispose_engine,
    get_engine,
    get_session_maker,
)
from src.service.marketplace.driven_adapter import model  # noqa: E402,F401
from src.service.marketplace.driven_adapter.model.profile_model import ProfileModel  # noqa: E402
from src.service.marketplace.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)


def _remove_test_database() -> None:
    for suffix in ('', '-journal', '-wal', '-shm'):
        Path(f'{TEST_DB_FILE}{suffix}').unlink(missing_ok=True)


# =============================================================================
# Pytest Hooks
# =============================================================================
def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        path = str(item.fspath)
        if '/integration/' in path:
            item.add_marker(pytest.mark.integration)
        elif '/e2e/' in path:
            item.add_marker(pytest.mark.e2e)


# =============================================================================
# Integration Test Fixtures
# =============================================================================
@pytest.fixture(scope='function')
async def sqlite_database() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Empty schema on a fresh database file, engine bound to the test's event loop"""
    await dispose_engine()
    _remove_test_database()
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield get_session_maker()

    await dispose_engine()


# =============================================================================
# E2E Fixtures
# =============================================================================
@pytest.fixture(scope='function')
def client() -> Generator[TestClient, None, None]:
    _remove_test_database()
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> Callable[[uuid.UUID], dict[str, str]]:
    jwt_auth = JwtAuth()

    def _headers(user_id: uuid.UUID) -> dict[str, str]:
        return {'Authorization': f'Bearer {jwt_auth.create_jwt_token(user_id)}'}

    return _headers


async def _insert_profile(user_id: uuid.UUID, role: str) -> None:
    async with get_session_maker()() as session:
        session.add(ProfileModel(user_id=user_id, role=role))
        await session.commit()


@pytest.fixture
def create_user(client: TestClient) -> Callable[..., uuid.UUID]:
    """Register a profile row through the app's own event loop"""

    def _create(role: str = 'customer') -> uuid.UUID:
        user_id = uuid.uuid4()
        portal: Any = client.portal
        portal.call(_insert_profile, user_id, role)
        return user_id

    return _create


@pytest.fixture
def context() -> dict[str, Any]:
    """Shared state between BDD steps of one scenario"""
    return {}


# =============================================================================
# BDD Steps
# =============================================================================
from test.bdd_steps_loader import *  # noqa: E402, F401, F403
