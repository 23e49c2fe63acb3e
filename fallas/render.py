"""Map rendering (folium), GPX export and route summaries."""

import html
from typing import Iterable, Mapping, Optional

import folium
from folium import plugins

from .config import CONFIG
from .geo import padded_bounds
from .models import Falla, Route, VisitState

ORIGIN_LABELS = {"manual": "Manual start", "gps": "GPS"}


def section_code(section: Optional[str]) -> str:
    """Short badge text for a section ("1ªA" -> "1A")"""
    if not section:
        return "X"
    lowered = section.lower()
    if "especial" in lowered:
        return "E"
    if "fuera" in lowered and "concurso" in lowered:
        return "FC"
    return section.replace("ª", "").strip()


def marker_icon(falla: Falla, visited: bool) -> folium.DivIcon:
    code = section_code(falla.section)
    color = CONFIG["visited_marker_color"] if visited else CONFIG["marker_color"]
    css_class = f"falla-marker sec-{html.escape(code)}" + (" falla-visited" if visited else "")
    return folium.DivIcon(
        html=f"""
            <div class="{css_class}" style="
                width: 34px; height: 34px; line-height: 34px;
                border-radius: 50%; border: 2px solid white;
                background: {color}; color: white;
                font: bold 12px Arial; text-align: center;
                opacity: {0.6 if visited else 1};
            ">{html.escape(code)}</div>
        """,
        icon_size=(34, 34),
        icon_anchor=(17, 17),
    )


def popup_html(falla: Falla, state: VisitState) -> str:
    sketch = ""
    if falla.sketch_url:
        sketch = f'<img src="{html.escape(falla.sketch_url)}" alt="Sketch" style="max-width:220px"><br>'
    return f"""
        <b>{falla.number}</b> | {html.escape(falla.name)}<br>
        Section: <b>{html.escape(falla.section)}</b><br>
        <hr>
        {sketch}
        Visited: {"yes" if state.visited else "no"}<br>
        Wishlist: {"yes" if state.wishlisted else "no"}<br>
        Major rating: {state.rating_major}/10<br>
        Child rating: {state.rating_child}/10
    """


def create_map(visible: Iterable[Falla], states: Mapping[int, VisitState],
               route: Optional[Route] = None,
               center: Optional[tuple[float, float]] = None) -> folium.Map:
    """Interactive map of the visible fallas and, when given, the route"""
    visible = list(visible)
    m = folium.Map(
        location=list(center or CONFIG["default_center"]),
        zoom_start=CONFIG["map_zoom"],
        tiles="OpenStreetMap",
    )

    falla_layer = folium.FeatureGroup(name="Fallas", show=True)
    default = VisitState()
    for falla in visible:
        state = states.get(falla.number, default)
        folium.Marker(
            [falla.lat, falla.lon],
            popup=folium.Popup(popup_html(falla, state), max_width=260),
            tooltip=f"{falla.number} | {falla.name}",
            icon=marker_icon(falla, state.visited),
        ).add_to(falla_layer)
    falla_layer.add_to(m)

    bounds = padded_bounds(visible)
    if route is not None and not route.is_empty:
        route_layer = folium.FeatureGroup(name="Route", show=True)
        folium.PolyLine(
            route.path(),
            color=CONFIG["route_color"],
            weight=CONFIG["route_weight"],
            opacity=CONFIG["route_opacity"],
            tooltip=f"{len(route)} stops, {route.used_meters:.0f}m",
        ).add_to(route_layer)
        folium.Marker(
            list(route.origin.coordinates),
            popup=ORIGIN_LABELS.get(route.origin.label, route.origin.label),
            icon=folium.Icon(color="blue", icon="flag"),
        ).add_to(route_layer)
        route_layer.add_to(m)
        bounds = padded_bounds(route.path(), pad=0.05)

    if bounds:
        m.fit_bounds(bounds)

    folium.LayerControl().add_to(m)
    plugins.Fullscreen().add_to(m)
    plugins.LocateControl().add_to(m)

    return m


def route_summary(route: Route, estimated_minutes: int, ignore_visited: bool) -> str:
    """Plain-text description of a built route"""
    lines = [
        "Route created:",
        f"  Start: {ORIGIN_LABELS.get(route.origin.label, route.origin.label)}",
        f"  Stops: {len(route)}",
        f"  Ignore visited: {'yes' if ignore_visited else 'no'}",
        f"  Distance: ~{round(route.used_meters)} m",
        f"  Estimated time: ~{estimated_minutes} min",
    ]
    for i, (falla, leg) in enumerate(zip(route.stops, route.legs), 1):
        lines.append(f"  {i:>3}. {falla.number} {falla.name} ({leg:.0f}m)")
    return "\n".join(lines)


def route_gpx(route: Route) -> str:
    """GPX document with one waypoint per stop and the walking track"""
    gpx_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<gpx version="1.1" creator="Fallas"',
        '     xmlns="http://www.topografix.com/GPX/1/1">',
    ]
    for falla in route.stops:
        gpx_lines.append(f'  <wpt lat="{falla.lat:.6f}" lon="{falla.lon:.6f}">')
        gpx_lines.append(f'    <name>{html.escape(f"{falla.number} {falla.name}")}</name>')
        gpx_lines.append('  </wpt>')
    gpx_lines.append('  <trk>')
    gpx_lines.append('    <name>Fallas Route</name>')
    gpx_lines.append('    <trkseg>')
    for lat, lon in route.path():
        gpx_lines.append(f'      <trkpt lat="{lat:.6f}" lon="{lon:.6f}"/>')
    gpx_lines.append('    </trkseg>')
    gpx_lines.append('  </trk>')
    gpx_lines.append('</gpx>')
    return "\n".join(gpx_lines)
