import json
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from fallas.models import Falla  # noqa: E402
from fallas.state import MemoryStateStore  # noqa: E402

RAW_CATALOG = [
    {"falla_number": 1, "name": "Plaza del Pilar", "section": "Especial",
     "lat": "39,4733", "lng": "-0,3814", "sketch_url": "sketches/1.jpg"},
    {"falla_number": 2, "name": "Na Jordana", "section": "Especial", "lat": "39.4790", "lng": "-0.3812"},
    {"falla_number": 6, "name": "Plaça de l'Àngel", "section": "1ªA", "lat": "39.4777", "lng": "-0.3790"},
    {"falla_number": 7, "name": "Exposició-Misser Mascó", "section": "1ªA", "lat": 39.4735, "lng": -0.3600},
    {"falla_number": 8, "name": "Duque de Gaeta", "section": "1ªB", "lat": "39.4652", "lng": "-0.3595"},
]


@pytest.fixture
def line_catalog():
    """A at the origin, B ~111 m north, C ~1111 m north"""
    return [
        Falla(number=1, name="A", section="Especial", lat=0.000, lon=0.0),
        Falla(number=2, name="B", section="1ªA", lat=0.001, lon=0.0),
        Falla(number=3, name="C", section="1ªA", lat=0.010, lon=0.0),
    ]


@pytest.fixture
def store():
    return MemoryStateStore()


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "fallas.json"
    path.write_text(json.dumps(RAW_CATALOG), encoding="utf-8")
    return path
