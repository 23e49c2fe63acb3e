"""Fallas - explore the falla catalog, track visits and plan walking routes."""

from .config import CONFIG
from .models import (
    Location,
    Falla,
    VisitState,
    FilterSelection,
    Origin,
    Route,
    STATUS_ALL,
    STATUS_VISITED,
    STATUS_NOT_VISITED,
    STATUS_WISHLIST,
)
from .logger import Logger
from .geo import haversine_distance, distance_meters, retry_with_backoff
from .catalog import CatalogError, CatalogLoader, parse_catalog, available_sections
from .state import StateStore, MemoryStateStore, JSONStateStore, SQLiteStateStore
from .filters import FilterEngine, normalize_sections
from .planner import RouteBudget, RouteBuilder, exclude_visited
from .session import Session
from .gps import GPS, GPSRecorder, GPSPlayback
from .app import FallasApp, RouteOutcome

__all__ = [
    "CONFIG",
    "Location",
    "Falla",
    "VisitState",
    "FilterSelection",
    "Origin",
    "Route",
    "STATUS_ALL",
    "STATUS_VISITED",
    "STATUS_NOT_VISITED",
    "STATUS_WISHLIST",
    "Logger",
    "haversine_distance",
    "distance_meters",
    "retry_with_backoff",
    "CatalogError",
    "CatalogLoader",
    "parse_catalog",
    "available_sections",
    "StateStore",
    "MemoryStateStore",
    "JSONStateStore",
    "SQLiteStateStore",
    "FilterEngine",
    "normalize_sections",
    "RouteBudget",
    "RouteBuilder",
    "exclude_visited",
    "Session",
    "GPS",
    "GPSRecorder",
    "GPSPlayback",
    "FallasApp",
    "RouteOutcome",
]
