"""
Règle de décision des ajustements live.

Seuillage direct, sans lissage ni hystérésis :
  - perte de vitesse > 15 %  → -5 % de charge
  - dérive cardiaque > 10 %  → -5 % de charge
Les seuils sont exclusifs (une valeur égale au seuil ne déclenche rien).
"""
from typing import Dict, Optional

from app.domain.entities.adjustment import AdjustmentDecision, LiveMetric, LiveMetricSample

VELOCITY_LOSS_THRESHOLD = 0.15
HR_DRIFT_THRESHOLD = 0.10
LOAD_REDUCTION_DELTA = -0.05

THRESHOLDS: Dict[LiveMetric, float] = {
    LiveMetric.VELOCITY_LOSS: VELOCITY_LOSS_THRESHOLD,
    LiveMetric.HR_DRIFT: HR_DRIFT_THRESHOLD,
}

METRIC_LABELS: Dict[LiveMetric, str] = {
    LiveMetric.VELOCITY_LOSS: "velocity loss",
    LiveMetric.HR_DRIFT: "heart rate drift",
}


def evaluate(sample: LiveMetricSample) -> Optional[AdjustmentDecision]:
    """Retourne une décision si l'échantillon dépasse son seuil, sinon None."""
    metric = LiveMetric(sample.metric)
    threshold = THRESHOLDS[metric]
    if sample.value > threshold:
        return AdjustmentDecision(metric=metric, trigger_value=sample.value, delta=LOAD_REDUCTION_DELTA)
    return None


def build_prompt_text(decision: AdjustmentDecision) -> str:
    """Message lisible affiché au coach et à l'athlète."""
    label = METRIC_LABELS[decision.metric]
    reduction_pct = abs(decision.delta * 100)
    return (
        f"Detected high {label} ({decision.trigger_value * 100:.1f}%). "
        f"Automatically reduced target load by {reduction_pct:g}% "
        f"to optimize performance and prevent overexertion."
    )
