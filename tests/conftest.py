from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from stockroom.allocation.adapters.db import DB


@pytest.fixture
async def db(tmp_path: Path) -> AsyncGenerator[DB, None]:
    db = DB(f"sqlite+aiosqlite:///{tmp_path / 'allocation.db'}")
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
async def session(db: DB) -> AsyncGenerator[AsyncSession, Any]:
    session = db.session_factory()
    yield session
    await session.close()
