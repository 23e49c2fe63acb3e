"""Configuration settings for Fallas."""

CONFIG = {
    "default_center": (39.4699, -0.3763),  # Valencia
    "earth_radius": 6371000,  # meters
    # Catalog source
    "catalog_path": "data/fallas.json",
    "catalog_timeout": 15,  # seconds for HTTP catalog fetch
    # Persistence
    "state_db_path": "fallas_state.db",
    "state_json_path": "fallas_state_v1.json",
    "state_key_prefix": "falla_",
    # Ratings (both major and child)
    "rating_min": 0,
    "rating_max": 10,
    # Route budget
    "default_minutes": 45,
    "min_minutes": 1,
    "max_minutes": 600,
    "default_speed_kmh": 4.5,
    "min_speed_kmh": 2,
    "max_speed_kmh": 10,
    # Map rendering
    "map_zoom": 13,
    "route_color": "#ff2d55",
    "route_weight": 4,
    "route_opacity": 0.8,
    "marker_color": "#e4572e",
    "visited_marker_color": "#8a8a8a",
}
