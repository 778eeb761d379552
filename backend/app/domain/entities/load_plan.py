"""
Entité LoadPlan - Domain Layer
Programme actif d'un athlète : arbre programme → blocs → séances → exercices.
Les charges cibles (target_load) sont portées par les exercices, ou par
leurs séries détaillées (champ libre "sets" par exemple).

L'arbre est stocké en JSON ; les nœuds typés ci-dessous conservent tous les
champs inconnus (extra="allow") pour que la réécriture ne perde rien.
"""
from sqlmodel import SQLModel, Field, JSON, Column
from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict, Any
from uuid import UUID, uuid4
from datetime import datetime


class PlanNode(BaseModel):
    """Nœud de base de l'arbre de programme."""
    model_config = ConfigDict(extra="allow")

    # Données saisies par le constructeur de programme : aucun type imposé
    name: Optional[Any] = None


class ExerciseNode(PlanNode):
    # Seules les valeurs numériques sont mises à l'échelle ("bodyweight" est conservé)
    target_load: Optional[Any] = None


class SessionNode(PlanNode):
    exercises: Optional[List[ExerciseNode]] = None


class BlockNode(PlanNode):
    sessions: Optional[List[SessionNode]] = None


class ProgramNode(PlanNode):
    blocks: Optional[List[BlockNode]] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ProgramNode":
        return cls.model_validate(data or {})

    def to_json(self) -> Dict[str, Any]:
        """Sérialise sans ajouter les champs absents du JSON d'origine."""
        return self.model_dump(mode="json", exclude_unset=True)


class LoadPlan(SQLModel, table=True):
    """Programme d'un athlète ; au plus un programme actif par athlète."""
    __tablename__ = "load_plan"

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    athlete_id: UUID = Field(index=True)
    name: Optional[str] = None
    is_active: bool = Field(default=True, index=True)
    tree: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON),
        description="Arbre programme → blocs → séances → exercices"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
