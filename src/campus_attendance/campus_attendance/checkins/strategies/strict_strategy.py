from __future__ import annotations

from typing import Optional

from ...core.enums import CheckInOutcome
from .base import GeofenceStrategy, OutcomeDecision


class StrictRadiusStrategy(GeofenceStrategy):
    """Anchor-to-report distance only; the boundary itself is inside."""

    name = "strict"

    def decide(self, *, distance_m: float, radius_m: float, accuracy_m: Optional[float]) -> OutcomeDecision:
        if distance_m <= radius_m:
            return OutcomeDecision(outcome=CheckInOutcome.ACCEPTED)
        return OutcomeDecision(
            outcome=CheckInOutcome.FLAGGED,
            note=f"{distance_m:.1f}m from anchor, radius {radius_m:.1f}m",
        )
