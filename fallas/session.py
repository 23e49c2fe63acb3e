"""Per-session UI state: active filters, visible set and route origin."""

from dataclasses import dataclass, field
from typing import Optional

from .models import Falla, FilterSelection, Location, Origin, Route

# Origin pick mode
ORIGIN_IDLE = "IDLE"
ORIGIN_PICKING = "PICKING"
ORIGIN_FIXED = "FIXED"


@dataclass
class Session:
    """Mutable session context, changed only through the methods below"""
    selection: FilterSelection = field(default_factory=FilterSelection)
    visible: list[Falla] = field(default_factory=list)
    route: Optional[Route] = None
    origin_mode: str = ORIGIN_IDLE
    fixed_origin: Optional[Origin] = None
    live_position: Optional[Location] = None

    def request_pick_start(self):
        """Wait for the next point selection to become the fixed origin"""
        self.origin_mode = ORIGIN_PICKING

    def select_point(self, lat: float, lon: float) -> bool:
        """Handle a map click. Returns True if it fixed the route origin."""
        if self.origin_mode != ORIGIN_PICKING:
            return False
        self.fixed_origin = Origin(lat=lat, lon=lon, label="manual")
        self.origin_mode = ORIGIN_FIXED
        return True

    def update_position(self, location: Location):
        self.live_position = location

    def current_origin(self) -> Optional[Origin]:
        """Fixed origin if one was picked, else the latest GPS sample"""
        # A previously picked point stays authoritative while a new pick is pending
        if self.fixed_origin:
            return self.fixed_origin
        if self.live_position:
            return Origin(lat=self.live_position.lat, lon=self.live_position.lon, label="gps")
        return None

    def clear_route(self):
        self.route = None
