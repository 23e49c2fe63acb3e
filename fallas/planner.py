"""Budgeted walking route over visible fallas."""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from .config import CONFIG
from .geo import as_coordinates, distance_meters, is_valid_coordinates
from .models import Falla, Origin, Route, VisitState
from .util import clamp_num, to_number


@dataclass(frozen=True)
class RouteBudget:
    """Time allowance and walking speed, both already clamped"""
    minutes: float
    speed_kmh: float

    @classmethod
    def from_inputs(cls, minutes: Any = None, speed_kmh: Any = None) -> "RouteBudget":
        """Clamp raw user input; anything non-numeric becomes the default"""
        return cls(
            minutes=clamp_num(minutes, CONFIG["min_minutes"], CONFIG["max_minutes"],
                              CONFIG["default_minutes"]),
            speed_kmh=clamp_num(speed_kmh, CONFIG["min_speed_kmh"], CONFIG["max_speed_kmh"],
                                CONFIG["default_speed_kmh"]),
        )

    @property
    def meters_per_minute(self) -> float:
        return self.speed_kmh * 1000 / 60

    @property
    def max_meters(self) -> float:
        return self.minutes * self.meters_per_minute

    def estimate_minutes(self, meters: float) -> int:
        return int(math.floor(meters / self.meters_per_minute + 0.5))


def exclude_visited(candidates: Iterable[Falla], states: Mapping[int, VisitState]) -> list[Falla]:
    """Drop candidates already marked visited"""
    return [f for f in candidates if not (f.number in states and states[f.number].visited)]


class RouteBuilder:
    """Greedy nearest-neighbour ordering with a distance budget.

    Always walks to the closest remaining falla. When that leg would push the
    total past the budget the route ends there; no farther-but-shorter
    alternative is searched for.
    """

    @staticmethod
    def build(origin: Origin, candidates: Iterable[Falla],
              budget_meters: Optional[float] = None) -> Route:
        if not isinstance(origin, Origin):
            origin = Origin(*as_coordinates(origin))
        if not is_valid_coordinates(origin):
            raise ValueError(f"Route origin must have finite coordinates, got {origin!r}")

        # Anything but a finite positive number means no limit
        budget_meters = to_number(budget_meters)
        limited = budget_meters is not None and budget_meters > 0

        remaining = list(candidates)
        route = Route(origin=origin)
        current = origin.coordinates

        while remaining:
            best_idx = 0
            best_dist = math.inf
            for i, falla in enumerate(remaining):
                d = distance_meters(current, falla)
                # Strict comparison keeps the earliest candidate on ties
                if d < best_dist:
                    best_dist = d
                    best_idx = i

            if limited and route.used_meters + best_dist > budget_meters:
                break

            chosen = remaining.pop(best_idx)
            route.stops.append(chosen)
            route.legs.append(best_dist)
            route.used_meters += best_dist
            current = chosen.coordinates

        return route
