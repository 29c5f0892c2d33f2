from __future__ import annotations

from dataclasses import dataclass

from .strategies.accuracy_tolerant_strategy import AccuracyTolerantStrategy
from .strategies.base import GeofenceStrategy
from .strategies.strict_strategy import StrictRadiusStrategy


@dataclass
class GeofenceStrategyFactory:
    """Factory Pattern: choose the accept/flag rule from configuration."""

    policy: str = StrictRadiusStrategy.name

    def create(self) -> GeofenceStrategy:
        name = (self.policy or "").strip().lower()
        if name == StrictRadiusStrategy.name:
            return StrictRadiusStrategy()
        if name == AccuracyTolerantStrategy.name:
            return AccuracyTolerantStrategy()
        raise ValueError(f"Unknown geofence policy: {self.policy!r}")
