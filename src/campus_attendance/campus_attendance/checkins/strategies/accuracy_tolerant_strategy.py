from __future__ import annotations

from typing import Optional

from ...core.enums import CheckInOutcome
from .base import GeofenceStrategy, OutcomeDecision


class AccuracyTolerantStrategy(GeofenceStrategy):
    """Give the device's reported accuracy the benefit of the doubt.

    Opt-in only (GEOFENCE_POLICY=accuracy_tolerant); non-positive accuracy
    counts as zero.
    """

    name = "accuracy_tolerant"

    def decide(self, *, distance_m: float, radius_m: float, accuracy_m: Optional[float]) -> OutcomeDecision:
        slack = max(float(accuracy_m or 0.0), 0.0)
        if distance_m - slack <= radius_m:
            return OutcomeDecision(outcome=CheckInOutcome.ACCEPTED)
        return OutcomeDecision(
            outcome=CheckInOutcome.FLAGGED,
            note=f"{distance_m:.1f}m from anchor (accuracy {slack:.1f}m), radius {radius_m:.1f}m",
        )
