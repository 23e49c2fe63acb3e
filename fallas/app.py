"""Main Fallas application: explicit commands over catalog, store and session."""

from dataclasses import dataclass, replace
from typing import Any, Optional

from .catalog import CatalogLoader, available_sections
from .filters import FilterEngine, normalize_sections
from .geo import retry_with_backoff
from .logger import Logger
from .models import Falla, FilterSelection, Location, Route, VisitState
from .planner import RouteBudget, RouteBuilder, exclude_visited
from .render import create_map, route_gpx, route_summary
from .session import Session
from .state import StateStore

# Route outcome statuses
ROUTE_OK = "ok"
ROUTE_NO_ORIGIN = "no_origin"
ROUTE_NO_CANDIDATES = "no_candidates"
ROUTE_NOTHING_FITS = "nothing_fits"


@dataclass
class RouteOutcome:
    status: str
    budget: RouteBudget
    ignore_visited: bool = False
    route: Optional[Route] = None

    @property
    def ok(self) -> bool:
        return self.status == ROUTE_OK

    def message(self) -> str:
        if self.status == ROUTE_NO_ORIGIN:
            return "Choose a start: use your GPS position or pick a start point."
        if self.status == ROUTE_NO_CANDIDATES:
            return "No fallas available for a route (check filters or ignore-visited)."
        if self.status == ROUTE_NOTHING_FITS:
            return "No falla fits in that time. Add minutes or loosen the filters."
        return route_summary(self.route, self.budget.estimate_minutes(self.route.used_meters),
                             self.ignore_visited)


class FallasApp:
    """Main application"""

    def __init__(self, loader: CatalogLoader, store: StateStore,
                 logger: Optional[Logger] = None):
        self.loader = loader
        self.store = store
        self.logger = logger or Logger(echo=False)
        self.session = Session()
        self.catalog: list[Falla] = []
        self.gps_source = None

    def load(self):
        """Load the catalog and show everything"""
        self.catalog = self.loader.load()
        self.logger.log("Catalog loaded", {
            "source": self.loader.source,
            "fallas": len(self.catalog),
            "sections": len(self.sections()),
        })
        self.apply_filters(FilterSelection())

    def reload_catalog(self):
        """Re-read the catalog and re-apply the current filters"""
        self.catalog = self.loader.reload()
        self.logger.log("Catalog reloaded", {"fallas": len(self.catalog)})
        self.apply_filters(self.session.selection)

    def sections(self) -> list[str]:
        return available_sections(self.catalog)

    def make_selection(self, sections: Optional[list[str]] = None, text: str = "",
                       status: str = "ALL") -> FilterSelection:
        """Build a selection, treating "no sections" and "every section" as all"""
        return FilterSelection(
            sections=normalize_sections(sections, self.sections()),
            text=text,
            status=status,
        )

    def apply_filters(self, selection: FilterSelection, clear_route: bool = True) -> list[Falla]:
        self.session.selection = selection
        self.session.visible = FilterEngine.apply(self.catalog, selection, self.store)
        if clear_route:
            self.session.clear_route()
        self.logger.log("Filters applied", {
            "sections": sorted(selection.sections) if selection.sections else "ALL",
            "text": selection.text,
            "status": selection.status,
            "visible": len(self.session.visible),
        })
        return self.session.visible

    def set_sections(self, sections: Optional[list[str]]) -> list[Falla]:
        """Change the section choice; the current route is kept"""
        selection = replace(self.session.selection,
                            sections=normalize_sections(sections, self.sections()))
        return self.apply_filters(selection, clear_route=False)

    def set_text(self, text: str) -> list[Falla]:
        """Change the search text; the current route is kept"""
        return self.apply_filters(replace(self.session.selection, text=text), clear_route=False)

    def set_status(self, status: str) -> list[Falla]:
        """Change the status filter; this clears the current route"""
        return self.apply_filters(replace(self.session.selection, status=status), clear_route=True)

    def marker_states(self) -> list[tuple[Falla, bool]]:
        """Visible fallas with their visited flag, for icon styling"""
        states = self.store.load_all()
        return [(f, f.number in states and states[f.number].visited) for f in self.session.visible]

    def save_visit_state(self, number: int, visited: Any = False, wishlisted: Any = False,
                         rating_major: Any = 0, rating_child: Any = 0) -> VisitState:
        """Replace the stored state of one falla; ratings are clamped to 0-10"""
        state = self.store.set(number, VisitState(
            visited=visited,
            wishlisted=wishlisted,
            rating_major=rating_major,
            rating_child=rating_child,
        ))
        self.logger.log("Visit state saved", {"falla": number, **state.to_dict()})
        # A status filter may now hide or show this falla
        self.apply_filters(self.session.selection, clear_route=False)
        return state

    def set_gps_source(self, source):
        """Set GPS source (GPS, GPSRecorder or GPSPlayback)"""
        self.gps_source = source

    def locate(self, max_time: float = 30.0) -> Optional[Location]:
        """Take one position sample from the GPS source"""
        if self.gps_source is None:
            return None

        def try_gps():
            loc = self.gps_source.get_location()
            if loc:
                self.logger.log("GPS fix obtained", {"lat": loc.lat, "lon": loc.lon,
                                                     "accuracy": loc.accuracy})
            else:
                self.logger.log("GPS attempt failed")
            return loc

        location = retry_with_backoff(try_gps, max_time=max_time, description="GPS fix")
        if location:
            self.session.update_position(location)
        return location

    def pick_start(self, lat: float, lon: float) -> bool:
        """Enter pick mode and select a point in one step"""
        self.session.request_pick_start()
        fixed = self.session.select_point(lat, lon)
        if fixed:
            self.logger.log("Start point fixed", {"lat": lat, "lon": lon})
        return fixed

    def build_route(self, minutes: Any = None, speed_kmh: Any = None,
                    ignore_visited: bool = False) -> RouteOutcome:
        budget = RouteBudget.from_inputs(minutes, speed_kmh)
        outcome = RouteOutcome(status=ROUTE_OK, budget=budget, ignore_visited=ignore_visited)

        origin = self.session.current_origin()
        if origin is None:
            outcome.status = ROUTE_NO_ORIGIN
            self.logger.log("Route not built: no origin")
            return outcome

        candidates = list(self.session.visible)
        if ignore_visited:
            candidates = exclude_visited(candidates, self.store.load_all())
        if not candidates:
            outcome.status = ROUTE_NO_CANDIDATES
            self.logger.log("Route not built: no candidates")
            return outcome

        route = RouteBuilder.build(origin, candidates, budget.max_meters)
        if route.is_empty:
            outcome.status = ROUTE_NOTHING_FITS
            self.logger.log("Route not built: nothing fits", {"max_meters": budget.max_meters})
            return outcome

        outcome.route = route
        self.session.route = route
        self.logger.log("Route built", {
            "origin": origin.label,
            "stops": len(route),
            "used_meters": round(route.used_meters, 1),
            "max_meters": round(budget.max_meters, 1),
        })
        return outcome

    def write_map(self, path: str):
        """Render the visible fallas and the current route to an HTML file"""
        m = create_map(self.session.visible, self.store.load_all(), route=self.session.route)
        m.save(path)
        self.logger.log("Map saved", {"path": path})

    def write_gpx(self, path: str) -> bool:
        if not self.session.route:
            return False
        with open(path, "w", encoding="utf-8") as f:
            f.write(route_gpx(self.session.route))
        self.logger.log("GPX saved", {"path": path})
        return True
