import pytest
import pytest_asyncio
from tortoise import Tortoise
from crumbs.core.db import init_db

TENANT = "tenant-a"
OTHER_TENANT = "tenant-b"


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database with all tables for one test."""
    await init_db("sqlite://:memory:")
    yield
    await Tortoise.close_connections()


@pytest.fixture
def tenant():
    return TENANT


@pytest.fixture
def other_tenant():
    return OTHER_TENANT
