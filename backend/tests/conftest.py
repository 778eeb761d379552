"""
Fixtures partagees : base SQLite en memoire, canal de diffusion en memoire.
"""
import os

# Configuration de test avant tout import de l'app
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BROADCAST_BACKEND", "memory")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import app.domain.entities  # noqa: F401  (enregistre les tables)
from app.domain.services.broadcast_channel import InMemoryBroadcastChannel


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def broadcaster():
    channel = InMemoryBroadcastChannel()
    yield channel
    channel.close()
