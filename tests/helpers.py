"""Shared fixtures: in-memory database and a silent catalog"""

from unittest.mock import AsyncMock, MagicMock

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shelfarr import models  # noqa: F401
from shelfarr.database import Base
from shelfarr.services.external_apis import ExternalApiResponse


def make_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def silent_catalog():
    """Catalog collaborator that never finds anything"""
    catalog = MagicMock()
    catalog.best_match = AsyncMock(return_value=None)
    catalog.get_details = AsyncMock(return_value=ExternalApiResponse(success=False, error="offline"))
    return catalog
