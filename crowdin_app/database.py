"""Async database engine handle and FastAPI session dependency."""

from __future__ import annotations

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import AppSettings


class Database:
    """Owns the engine and session factory for one application instance.

    Opened by the application lifespan and disposed at shutdown.
    """

    def __init__(self, url: str, echo: bool = False, engine: AsyncEngine | None = None):
        self.url = url
        self.engine = engine or create_async_engine(url, echo=echo)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "Database":
        return cls(settings.database_url, echo=settings.echo_sql)

    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.url

    async def create_all(self) -> None:
        from .models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async session."""
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        yield session


def get_settings(request: Request) -> AppSettings:
    """FastAPI dependency returning the settings the app was created with."""
    return request.app.state.settings
