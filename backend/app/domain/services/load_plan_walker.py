"""
Parcours et réécriture de l'arbre de programme (programme → blocs → séances → exercices).

Le visiteur reconstruit l'arbre niveau par niveau ; chaque nœud est copié
(model_copy) et seul le champ ciblé change. Un nœud dont rien ne change est
renvoyé tel quel.

Les champs libres d'un nœud (séries détaillées, variantes...) passent par
visit_extra, qui descend dans les listes et dictionnaires imbriqués.
"""
import logging
import math
from typing import Any, Callable, Dict, Iterator, Optional

from app.domain.entities.load_plan import PlanNode, ProgramNode, BlockNode, SessionNode, ExerciseNode

logger = logging.getLogger(__name__)

TARGET_LOAD_KEY = "target_load"


def is_numeric_load(value: Any) -> bool:
    """Vrai pour un nombre fini ; bool, texte ("bodyweight") et None sont ignorés."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class PlanVisitor:
    """Visiteur générique : surcharger visit_exercise / visit_extra (ou un autre niveau)."""

    def visit_program(self, node: ProgramNode) -> ProgramNode:
        return self._rebuild(node, "blocks", self.visit_block)

    def visit_block(self, node: BlockNode) -> BlockNode:
        return self._rebuild(node, "sessions", self.visit_session)

    def visit_session(self, node: SessionNode) -> SessionNode:
        return self._rebuild(node, "exercises", self.visit_exercise)

    def visit_exercise(self, node: ExerciseNode) -> ExerciseNode:
        return self._rebuild(node)

    def visit_extra(self, key: Optional[str], value: Any) -> Any:
        """Valeur d'un champ libre ; inchangée par défaut."""
        return value

    def _rebuild(
        self,
        node: PlanNode,
        children_field: Optional[str] = None,
        visit_child: Optional[Callable[[Any], Any]] = None,
    ) -> PlanNode:
        update: Dict[str, Any] = {}
        if children_field:
            children = getattr(node, children_field)
            if children:
                update[children_field] = [visit_child(child) for child in children]
        for key, value in (node.model_extra or {}).items():
            new_value = self.visit_extra(key, value)
            if new_value is not value:
                update[key] = new_value
        return node.model_copy(update=update) if update else node


class TargetLoadScaler(PlanVisitor):
    """Multiplie chaque target_load numérique par `factor`, plancher à 0, où qu'il soit."""

    def __init__(self, factor: float):
        self.factor = factor
        self.leaves_updated = 0

    def _scale(self, load: float) -> float:
        self.leaves_updated += 1
        return max(0.0, load * self.factor)

    def visit_exercise(self, node: ExerciseNode) -> ExerciseNode:
        node = super().visit_exercise(node)
        if not is_numeric_load(node.target_load):
            return node
        return node.model_copy(update={"target_load": self._scale(node.target_load)})

    def visit_extra(self, key: Optional[str], value: Any) -> Any:
        if key == TARGET_LOAD_KEY and is_numeric_load(value):
            return self._scale(value)
        if isinstance(value, dict):
            return {k: self.visit_extra(k, v) for k, v in value.items()}
        if isinstance(value, list):
            return [self.visit_extra(None, item) for item in value]
        return value


def iter_exercises(program: ProgramNode) -> Iterator[ExerciseNode]:
    for block in program.blocks or []:
        for session in block.sessions or []:
            yield from session.exercises or []


def scale_target_loads(tree: Dict[str, Any], delta: float) -> Dict[str, Any]:
    """Applique (1 + delta) à toutes les charges cibles d'un arbre JSON, renvoie le nouvel arbre."""
    program = ProgramNode.from_json(tree)
    scaler = TargetLoadScaler(1 + delta)
    scaled = scaler.visit_program(program)
    logger.debug(f"{scaler.leaves_updated} charges cibles mises a l'echelle (facteur {1 + delta:.3f})")
    return scaled.to_json()
