from __future__ import annotations

import abc
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from stockroom.allocation.adapters.db import DB
from stockroom.allocation.adapters.repository import AbstractBatchRepository, SqlAlchemyBatchRepository


class AbstractUnitOfWork(abc.ABC):
    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.rollback()

    @property
    @abc.abstractmethod
    def batches(self) -> AbstractBatchRepository:
        raise NotImplementedError

    @abc.abstractmethod
    async def commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, db: DB) -> None:
        self._db = db
        self._session: AsyncSession | None = None
        self._batches: SqlAlchemyBatchRepository | None = None

    @property
    def batches(self) -> AbstractBatchRepository:
        if self._batches is None:
            raise RuntimeError("Unit of work is not started; use it as 'async with uow:'")
        return self._batches

    async def __aenter__(self) -> AbstractUnitOfWork:
        self._session = self._db.session_factory()
        self._batches = SqlAlchemyBatchRepository(self._session)
        return await super().__aenter__()

    async def __aexit__(self, *args: Any) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self._session is not None:
                await self._session.close()
            self._session = None
            self._batches = None

    async def commit(self) -> None:
        if self._session is not None:
            await self._session.commit()

    async def rollback(self) -> None:
        if self._session is not None:
            await self._session.rollback()
