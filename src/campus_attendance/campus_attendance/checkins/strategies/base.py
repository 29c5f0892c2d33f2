from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import CheckInOutcome


@dataclass(frozen=True)
class OutcomeDecision:
    outcome: CheckInOutcome
    note: Optional[str] = None


class GeofenceStrategy(ABC):
    """Strategy Pattern: decide whether a reported position counts as inside the geofence."""

    name: str = ""

    @abstractmethod
    def decide(self, *, distance_m: float, radius_m: float, accuracy_m: Optional[float]) -> OutcomeDecision:
        raise NotImplementedError
