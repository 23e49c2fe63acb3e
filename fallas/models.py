"""Data classes for Fallas."""

from dataclasses import dataclass, asdict, field
from typing import Optional

from .config import CONFIG
from .util import clamp_int

# Status filter values
STATUS_ALL = "ALL"
STATUS_VISITED = "VISITED"
STATUS_NOT_VISITED = "NOT_VISITED"
STATUS_WISHLIST = "WISH"
STATUS_CHOICES = (STATUS_ALL, STATUS_VISITED, STATUS_NOT_VISITED, STATUS_WISHLIST)


@dataclass
class Location:
    """A position sample from a GPS source"""
    lat: float
    lon: float
    accuracy: Optional[float] = None
    timestamp: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Location":
        return cls(**d)


@dataclass(frozen=True)
class Falla:
    """A catalog point of interest"""
    number: int  # falla_number, primary key
    name: str
    section: str
    lat: float
    lon: float
    sketch_url: Optional[str] = None

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.lat, self.lon)


@dataclass
class VisitState:
    """Per-falla user annotation; ratings are always ints in [0, 10]"""
    visited: bool = False
    wishlisted: bool = False
    rating_major: int = 0
    rating_child: int = 0

    def __post_init__(self):
        self.visited = bool(self.visited)
        self.wishlisted = bool(self.wishlisted)
        self.rating_major = clamp_int(self.rating_major, CONFIG["rating_min"], CONFIG["rating_max"], 0)
        self.rating_child = clamp_int(self.rating_child, CONFIG["rating_min"], CONFIG["rating_max"], 0)

    def to_dict(self) -> dict:
        """Serialize using the persisted key names"""
        return {
            "visited": self.visited,
            "wish": self.wishlisted,
            "rating_major": self.rating_major,
            "rating_child": self.rating_child,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "VisitState":
        return cls(
            visited=d.get("visited", False),
            wishlisted=d.get("wish", False),
            rating_major=d.get("rating_major", 0),
            rating_child=d.get("rating_child", 0),
        )


@dataclass(frozen=True)
class FilterSelection:
    """Active filters. sections=None means every section."""
    sections: Optional[frozenset[str]] = None
    text: str = ""
    status: str = STATUS_ALL

    def __post_init__(self):
        if self.sections is not None:
            # A bare string is one section name, not a set of characters
            raw = [self.sections] if isinstance(self.sections, str) else self.sections
            sections = frozenset(raw)
            # Selecting nothing would hide everything; fall back to all
            object.__setattr__(self, "sections", sections or None)
        if self.text is None:
            object.__setattr__(self, "text", "")
        if self.status not in STATUS_CHOICES:
            raise ValueError(f"Unknown status filter: {self.status!r}")

    @property
    def all_sections(self) -> bool:
        return self.sections is None


@dataclass(frozen=True)
class Origin:
    """Route starting point"""
    lat: float
    lon: float
    label: str = "manual"  # "manual" (picked on the map) or "gps"

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.lat, self.lon)


@dataclass
class Route:
    """Ordered stops from an origin plus cumulative leg distance"""
    origin: Origin
    stops: list[Falla] = field(default_factory=list)
    legs: list[float] = field(default_factory=list)  # meters, one per stop
    used_meters: float = 0.0

    def __len__(self) -> int:
        return len(self.stops)

    @property
    def is_empty(self) -> bool:
        return not self.stops

    def path(self) -> list[tuple[float, float]]:
        """Coordinates from the origin through every stop"""
        return [self.origin.coordinates] + [f.coordinates for f in self.stops]
