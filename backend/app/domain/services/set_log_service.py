"""
Service des séries côté serveur : upsert idempotent par id client.
Une série renvoyée après une réponse perdue met à jour la ligne existante
au lieu d'en créer une seconde.
"""
import logging
from datetime import datetime
from typing import List, Tuple
from uuid import UUID

from sqlmodel import Session, select

from app.domain.entities.set_log import SetLog, SetLogUpsert

logger = logging.getLogger(__name__)


class SetLogService:

    def upsert(self, session: Session, set_id: UUID, data: SetLogUpsert) -> Tuple[SetLog, bool]:
        """Insère ou met à jour la série ; retourne (série, créée?)."""
        existing = session.get(SetLog, set_id)
        if existing:
            for key, value in data.model_dump().items():
                setattr(existing, key, value)
            existing.updated_at = datetime.utcnow()
            session.add(existing)
            session.commit()
            session.refresh(existing)
            logger.info(f"Serie {set_id} deja presente, mise a jour (renvoi idempotent)")
            return existing, False

        record = SetLog(id=set_id, **data.model_dump())
        session.add(record)
        session.commit()
        session.refresh(record)
        logger.info(f"Serie {set_id} enregistree (seance {record.session_id})")
        return record, True

    def list_for_session(self, session: Session, session_id: UUID) -> List[SetLog]:
        return session.exec(
            select(SetLog).where(SetLog.session_id == session_id).order_by(SetLog.created_at)
        ).all()


set_log_service = SetLogService()
