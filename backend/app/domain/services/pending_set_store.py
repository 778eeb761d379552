"""
Stockage local durable des séries en attente (SQLite sur l'appareil).

Une seule table `pending_sets` dont les colonnes reprennent exactement
PendingSet. L'ordre d'insertion est celui du rowid SQLite. Version de schéma
unique (PRAGMA user_version = 1).
"""
import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import (
    Column, Float, Integer, MetaData, String, Table, create_engine, delete, func, select, text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from app.domain.entities.set_log import PendingSet

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_metadata = MetaData()

pending_sets_table = Table(
    "pending_sets",
    _metadata,
    Column("id", String, primary_key=True),
    Column("session_id", String, nullable=False),
    Column("exercise", String, nullable=False),
    Column("weight", Float, nullable=False),
    Column("reps", Integer, nullable=False),
    Column("rpe", Float, nullable=True),
    Column("tempo", String, nullable=True),
    Column("velocity", Float, nullable=True),
    Column("created_at", String, nullable=False),
)


class StoreUnavailableError(Exception):
    """Stockage local indisponible (ouverture impossible ou store fermé)."""


class SqlitePendingSetStore:
    """File locale injectable ; cycle de vie explicite open() / close()."""

    def __init__(self, path: str):
        self.path = path
        self._engine: Optional[Engine] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> None:
        if self._engine is not None:
            return
        if self.path == ":memory:":
            engine = create_engine("sqlite://", poolclass=StaticPool)
        else:
            engine = create_engine(f"sqlite:///{self.path}")
        try:
            with engine.begin() as conn:
                _metadata.create_all(conn)
                conn.execute(text(f"PRAGMA user_version = {SCHEMA_VERSION}"))
        except SQLAlchemyError as exc:
            engine.dispose()
            logger.error(f"Stockage local indisponible ({self.path}): {exc}")
            raise StoreUnavailableError(str(exc)) from exc
        self._engine = engine
        logger.info(f"File locale ouverte: {self.path}")

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def _require_engine(self) -> Engine:
        if self._engine is None:
            raise StoreUnavailableError("Store not open")
        return self._engine

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def insert(self, pending_set: PendingSet) -> bool:
        """Ajoute la série ; False si l'id est déjà en file (position conservée)."""
        row = {
            "id": str(pending_set.id),
            "session_id": str(pending_set.session_id),
            "exercise": pending_set.exercise,
            "weight": pending_set.weight,
            "reps": pending_set.reps,
            "rpe": pending_set.rpe,
            "tempo": pending_set.tempo,
            "velocity": pending_set.velocity,
            "created_at": pending_set.created_at.isoformat(),
        }
        try:
            with self._require_engine().begin() as conn:
                conn.execute(pending_sets_table.insert().values(**row))
        except IntegrityError:
            return False
        except SQLAlchemyError as exc:
            raise self._unavailable("insert", exc) from exc
        return True

    def first(self) -> Optional[PendingSet]:
        """Plus ancienne série en file, None si la file est vide."""
        query = select(pending_sets_table).order_by(text("rowid")).limit(1)
        try:
            with self._require_engine().connect() as conn:
                row = conn.execute(query).mappings().first()
        except SQLAlchemyError as exc:
            raise self._unavailable("first", exc) from exc
        return _row_to_pending_set(row) if row is not None else None

    def list_all(self) -> List[PendingSet]:
        query = select(pending_sets_table).order_by(text("rowid"))
        try:
            with self._require_engine().connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as exc:
            raise self._unavailable("list", exc) from exc
        return [_row_to_pending_set(row) for row in rows]

    def delete(self, set_id: UUID) -> None:
        try:
            with self._require_engine().begin() as conn:
                conn.execute(delete(pending_sets_table).where(pending_sets_table.c.id == str(set_id)))
        except SQLAlchemyError as exc:
            raise self._unavailable("delete", exc) from exc

    def clear(self) -> int:
        try:
            with self._require_engine().begin() as conn:
                result = conn.execute(delete(pending_sets_table))
        except SQLAlchemyError as exc:
            raise self._unavailable("clear", exc) from exc
        return result.rowcount

    def count(self) -> int:
        try:
            with self._require_engine().connect() as conn:
                return conn.execute(select(func.count()).select_from(pending_sets_table)).scalar_one()
        except SQLAlchemyError as exc:
            raise self._unavailable("count", exc) from exc

    def _unavailable(self, operation: str, exc: SQLAlchemyError) -> StoreUnavailableError:
        logger.error(f"Stockage local en erreur ({operation} sur {self.path}): {exc}")
        return StoreUnavailableError(str(exc))


def _row_to_pending_set(row) -> PendingSet:
    return PendingSet(
        id=UUID(row["id"]),
        session_id=UUID(row["session_id"]),
        exercise=row["exercise"],
        weight=row["weight"],
        reps=row["reps"],
        rpe=row["rpe"],
        tempo=row["tempo"],
        velocity=row["velocity"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )
