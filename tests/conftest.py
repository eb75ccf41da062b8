"""
Shared test configuration.

The environment is set before shortbox is imported: settings and the
database engine are created at import time.
"""

import os
import sqlite3
import tempfile

import pytest

TEST_DB_DIR = tempfile.mkdtemp(prefix="shortbox-tests-")
TEST_DB_PATH = os.path.join(TEST_DB_DIR, "links.db")
TEST_ADMIN_KEY = "test-admin-key-0123456789abcdef"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["ADMIN_KEY"] = TEST_ADMIN_KEY
os.environ["CREATE_TABLES"] = "true"
os.environ.pop("BASE_URL", None)


def clear_links_table() -> None:
    connection = sqlite3.connect(TEST_DB_PATH)
    try:
        connection.execute("DELETE FROM links")
        connection.commit()
    except sqlite3.OperationalError:
        # Table not created yet
        pass
    finally:
        connection.close()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {TEST_ADMIN_KEY}"}


@pytest.fixture
def client():
    """TestClient with startup run (links table created) and an empty store."""
    from fastapi.testclient import TestClient
    from shortbox.main import app

    clear_links_table()
    with TestClient(app) as test_client:
        yield test_client
    clear_links_table()


@pytest.fixture
def empty_links_table():
    clear_links_table()
    yield
    clear_links_table()
