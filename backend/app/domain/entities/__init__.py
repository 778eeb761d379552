"""
Initialisation des entités du domaine
"""

from .readiness import DailyMetric, SorenessEntry, JumpTest, MetricSnapshot, ReadinessRead
from .training_session import TrainingSession
from .load_plan import LoadPlan, ProgramNode, BlockNode, SessionNode, ExerciseNode
from .adjustment import (
    LiveMetric, LiveMetricSample, AdjustmentDecision, AdjustmentEvent, AdjustmentEventRead,
    AdjustSetRequest, AppliedAdjustment, NoAdjustment,
)
from .set_log import PendingSet, SetLog, SetLogUpsert, SetLogRead

__all__ = [
    "DailyMetric", "SorenessEntry", "JumpTest", "MetricSnapshot", "ReadinessRead",
    "TrainingSession",
    "LoadPlan", "ProgramNode", "BlockNode", "SessionNode", "ExerciseNode",
    "LiveMetric", "LiveMetricSample", "AdjustmentDecision", "AdjustmentEvent", "AdjustmentEventRead",
    "AdjustSetRequest", "AppliedAdjustment", "NoAdjustment",
    "PendingSet", "SetLog", "SetLogUpsert", "SetLogRead",
]
