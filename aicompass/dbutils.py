from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import cache

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from aicompass.config import Config, get_config
from aicompass.log import logger
from aicompass.orm import Base


@cache
def get_engine(db_url: str) -> AsyncEngine:
    if db_url.startswith("sqlite"):
        # Connections must not outlive the event loop that opened them
        return create_async_engine(db_url, poolclass=NullPool)
    return create_async_engine(db_url, pool_pre_ping=True)


@cache
def _get_sessionmaker(db_url: str) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(db_url), expire_on_commit=False)


def get_sync_engine(config: Config) -> Engine:
    return create_engine(config.get_db_url(async_mode=False))


@asynccontextmanager
async def init_engine(config: Config) -> AsyncIterator[AsyncEngine]:
    engine = get_engine(config.get_db_url())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database engine initialized")
    yield engine
    await engine.dispose()
    logger.info("Database engine disposed")


@asynccontextmanager
async def open_db_session(config: Config) -> AsyncIterator[AsyncSession]:
    async with _get_sessionmaker(config.get_db_url())() as session:
        yield session


async def get_db_session(config: Config = Depends(get_config)) -> AsyncIterator[AsyncSession]:
    async with open_db_session(config) as session:
        yield session
