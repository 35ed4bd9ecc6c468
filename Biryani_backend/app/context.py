from dataclasses import dataclass, field
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.orm import sessionmaker

from app.config import Settings
from app.database import open_database
from app.services.store import PostStore
from app.ws import ConnectionManager


@dataclass
class AppContext:
    """Everything a request handler needs, built once per application."""

    settings: Settings
    manager: ConnectionManager = field(default_factory=ConnectionManager)
    engine: Optional[AsyncEngine] = None
    store: Optional[PostStore] = None

    async def start(self):
        self.engine = await open_database(self.settings.DATABASE_PATH, echo=self.settings.DATABASE_ECHO)
        session_factory = sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)
        self.store = PostStore(session_factory, anonymous_name=self.settings.ANONYMOUS_USER_NAME)

    async def close(self):
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None


def get_context(request: Request) -> AppContext:
    return request.app.state.context
