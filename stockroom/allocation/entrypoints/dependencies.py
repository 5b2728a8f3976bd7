import functools

from fastapi import Depends

from stockroom.allocation.adapters.db import DB
from stockroom.allocation.service_layer.unit_of_work import AbstractUnitOfWork, SqlAlchemyUnitOfWork
from stockroom.config import get_config


@functools.lru_cache
def db() -> DB:
    return DB(get_config().PG_DSN)


def batch_uow(db: DB = Depends(db)) -> AbstractUnitOfWork:
    return SqlAlchemyUnitOfWork(db)
