#!/usr/bin/env python3
"""
Fallas - Explore the falla catalog, track visits and plan a walking route

Usage:
    python -m fallas [options]

Options:
    --catalog SRC       Catalog JSON file or http(s) URL
    --db FILE           SQLite visit-state database (default: fallas_state.db)
    --state-json FILE   Use a JSON file for visit state instead of SQLite
    --section NAME      Show only this section (repeatable)
    --search TEXT       Free-text search over name, number and section
    --status STATUS     ALL, VISITED, NOT_VISITED or WISH
    --list              Print the visible fallas
    --save NUMBER       Save visit state for a falla (with --visited/--wish/--major/--child)
    --route             Build a walking route over the visible fallas
    --minutes MIN       Time budget in minutes (1-600, default 45)
    --speed KMH         Walking speed in km/h (2-10, default 4.5)
    --ignore-visited    Leave visited fallas out of the route
    --lat LAT           Fixed start latitude
    --lon LON           Fixed start longitude
    --gps               Use the device GPS (Termux) as start
    --record FILE       Record GPS samples to a JSON trace
    --playback FILE     Use a recorded GPS trace as start
    --html FILE         Write an interactive map
    --gpx FILE          Export the route to GPX
    --stats             Print visit statistics and exit
"""

import argparse
import math
import sys
from datetime import datetime
from pathlib import Path

from .app import FallasApp
from .catalog import CatalogError, CatalogLoader
from .config import CONFIG
from .gps import GPS, GPSPlayback, GPSRecorder
from .logger import Logger
from .models import STATUS_ALL, STATUS_CHOICES
from .state import JSONStateStore, SQLiteStateStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fallas - explore the catalog, track visits and plan a walking route"
    )
    parser.add_argument("--catalog", default=CONFIG["catalog_path"], metavar="SRC",
                        help=f"Catalog JSON file or URL (default: {CONFIG['catalog_path']})")
    store_group = parser.add_mutually_exclusive_group()
    store_group.add_argument("--db", default=CONFIG["state_db_path"], metavar="FILE",
                             help=f"SQLite visit-state database (default: {CONFIG['state_db_path']})")
    store_group.add_argument("--state-json", metavar="FILE",
                             help="Store visit state in a JSON file instead of SQLite")
    parser.add_argument("--log", metavar="FILE",
                        help="Log file path (default: fallas_TIMESTAMP.log)")

    # Filters
    parser.add_argument("--section", action="append", metavar="NAME",
                        help="Show only this section (repeatable)")
    parser.add_argument("--search", default="", metavar="TEXT",
                        help="Search name, number and section (accent-insensitive)")
    parser.add_argument("--status", default=STATUS_ALL, choices=STATUS_CHOICES,
                        help="Visit status filter (default: ALL)")
    parser.add_argument("--list", action="store_true",
                        help="Print the visible fallas")
    parser.add_argument("--stats", action="store_true",
                        help="Print visit statistics and exit")

    # Visit state
    parser.add_argument("--save", type=int, metavar="NUMBER",
                        help="Replace the visit state of this falla")
    parser.add_argument("--visited", action="store_true", help="Mark as visited (with --save)")
    parser.add_argument("--wish", action="store_true", help="Add to wishlist (with --save)")
    parser.add_argument("--major", default="0", metavar="N",
                        help="Major rating 0-10 (with --save)")
    parser.add_argument("--child", default="0", metavar="N",
                        help="Child rating 0-10 (with --save)")

    # Route
    parser.add_argument("--route", action="store_true",
                        help="Build a walking route over the visible fallas")
    parser.add_argument("--minutes", metavar="MIN",
                        help=f"Time budget in minutes (default: {CONFIG['default_minutes']})")
    parser.add_argument("--speed", metavar="KMH",
                        help=f"Walking speed in km/h (default: {CONFIG['default_speed_kmh']})")
    parser.add_argument("--ignore-visited", action="store_true",
                        help="Leave visited fallas out of the route")
    parser.add_argument("--lat", type=float, metavar="LAT", help="Fixed start latitude")
    parser.add_argument("--lon", type=float, metavar="LON", help="Fixed start longitude")
    parser.add_argument("--gps", action="store_true",
                        help="Use the device GPS as start (Termux)")
    parser.add_argument("--record", metavar="FILE",
                        help="Record GPS samples to a JSON trace (with --gps)")
    parser.add_argument("--playback", metavar="FILE",
                        help="Use a recorded GPS trace as start")

    # Output
    parser.add_argument("--html", metavar="FILE", help="Write an interactive map")
    parser.add_argument("--gpx", metavar="FILE", help="Export the route to GPX")
    return parser


def _print_fallas(app: FallasApp):
    states = app.store.load_all()
    for falla, visited in app.marker_states():
        state = states.get(falla.number)
        marks = "V" if visited else " "
        marks += "W" if state and state.wishlisted else " "
        print(f"[{marks}] {falla.number:>4}  {falla.name}  ({falla.section})")
    print(f"{len(app.session.visible)} of {len(app.catalog)} fallas visible")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate lat/lon - must provide both or neither
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be used together")
    if args.lat is not None and not (math.isfinite(args.lat) and math.isfinite(args.lon)):
        parser.error("--lat and --lon must be finite numbers")
    if args.record and not args.gps:
        parser.error("--record requires --gps")
    if args.playback and not Path(args.playback).exists():
        print(f"Playback file not found: {args.playback}")
        return 1

    store = JSONStateStore(args.state_json) if args.state_json else SQLiteStateStore(args.db)

    if args.stats:
        if isinstance(store, SQLiteStateStore):
            stats = store.get_stats()
        else:
            states = store.load_all()
            stats = {
                "visited": sum(1 for s in states.values() if s.visited),
                "wishlisted": sum(1 for s in states.values() if s.wishlisted),
            }
        for key, value in stats.items():
            print(f"{key}: {value}")
        store.close()
        return 0

    log_path = args.log
    if not log_path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = f"fallas_{timestamp}.log"
    logger = Logger(log_path, echo=False)

    app = FallasApp(CatalogLoader(args.catalog), store, logger=logger)
    try:
        app.load()
    except CatalogError as e:
        print(f"Error: {e}")
        logger.close()
        store.close()
        return 1

    try:
        if args.save is not None:
            state = app.save_visit_state(args.save, visited=args.visited, wishlisted=args.wish,
                                         rating_major=args.major, rating_child=args.child)
            print(f"Saved falla {args.save}: {state.to_dict()}")

        app.apply_filters(app.make_selection(args.section, args.search, args.status))

        if args.list:
            _print_fallas(app)

        if args.route:
            if args.lat is not None:
                app.pick_start(args.lat, args.lon)
            elif args.playback:
                app.set_gps_source(GPSPlayback(args.playback))
                app.locate(max_time=0)
            elif args.gps:
                gps = GPS()
                source = GPSRecorder(gps, args.record) if args.record else gps
                app.set_gps_source(source)
                app.locate()
                if args.record:
                    source.save()

            outcome = app.build_route(args.minutes, args.speed, args.ignore_visited)
            print(outcome.message())
            if args.gpx and not app.write_gpx(args.gpx):
                print("No route to export")

        if args.html:
            app.write_map(args.html)
            print(f"Map saved to: file://{Path(args.html).absolute()}")
    finally:
        logger.close()
        store.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
