# FILE: tests/conftest.py
"""
Pytest configuration for UIGen test suite.

Configures:
- pytest-asyncio for async test support
- project root on sys.path (flat layout: main.py, config/, uigen/)
"""
import sys
from pathlib import Path

import pytest

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def scopes():
    """Process-wide scope registry."""
    from uigen.preview.scope import get_scope_registry
    return get_scope_registry()


@pytest.fixture
def restricted(scopes):
    return scopes.restricted


@pytest.fixture
def expanded(scopes):
    return scopes.expanded


@pytest.fixture
def db_session():
    """In-memory database shared across threads (TestClient runs sync routes in a pool)."""
    from sqlalchemy.orm import sessionmaker

    from uigen.db import create_db_engine, init_db

    engine = create_db_engine("sqlite://")
    init_db(engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()
