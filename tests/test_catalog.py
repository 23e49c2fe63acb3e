import json

import pytest
import requests

from fallas.catalog import (
    CatalogError, CatalogLoader, available_sections, parse_catalog, parse_record,
)
from fallas.models import Falla


def test_parse_record_accepts_decimal_comma():
    falla = parse_record({"falla_number": "12", "name": "Na Jordana", "section": "Especial",
                          "lat": "39,479", "lng": "-0,3812"})
    assert falla == Falla(number=12, name="Na Jordana", section="Especial",
                          lat=39.479, lon=-0.3812, sketch_url=None)


@pytest.mark.parametrize("record", [
    {"name": "no id", "lat": 1, "lng": 1},
    {"falla_number": "abc", "lat": 1, "lng": 1},
    {"falla_number": 0, "lat": 1, "lng": 1},
    {"falla_number": 3.5, "lat": 1, "lng": 1},
    {"falla_number": 3, "lat": "north", "lng": 1},
    {"falla_number": 3, "lat": 1, "lng": ""},
    {"falla_number": 3, "lat": "NaN", "lng": 1},
    {"falla_number": 3, "lat": 1, "lng": float("inf")},
    {"falla_number": 3, "lat": 1},
    "not a record",
])
def test_parse_record_rejects_malformed(record):
    assert parse_record(record) is None


def test_parse_catalog_keeps_order_and_drops_duplicates(capsys):
    fallas = parse_catalog([
        {"falla_number": 5, "name": "first", "section": "A", "lat": 1, "lng": 1},
        {"falla_number": 2, "name": "second", "section": "B", "lat": 2, "lng": 2},
        {"falla_number": 5, "name": "dupe", "section": "A", "lat": 3, "lng": 3},
        {"falla_number": "x", "name": "bad", "section": "A", "lat": 3, "lng": 3},
    ])

    assert [(f.number, f.name) for f in fallas] == [(5, "first"), (2, "second")]
    assert "Skipped 2" in capsys.readouterr().out


def test_sketch_url_is_optional():
    falla = parse_record({"falla_number": 1, "lat": 1, "lng": 1, "sketch_url": ""})
    assert falla.sketch_url is None
    assert falla.name == "" and falla.section == ""


def test_available_sections(line_catalog):
    catalog = line_catalog + [Falla(number=9, name="Z", section="", lat=0, lon=0)]
    assert available_sections(catalog) == ["1ªA", "Especial"]


def test_load_local_file(catalog_file):
    fallas = CatalogLoader(str(catalog_file)).load()

    assert [f.number for f in fallas] == [1, 2, 6, 7, 8]
    assert fallas[0].coordinates == (39.4733, -0.3814)
    assert fallas[0].sketch_url == "sketches/1.jpg"


def test_load_wrapped_catalog(tmp_path):
    path = tmp_path / "wrapped.json"
    path.write_text(json.dumps({"fallas": [{"falla_number": 1, "lat": 1, "lng": 2}]}))

    assert [f.number for f in CatalogLoader(str(path)).load()] == [1]


def test_missing_file_raises(tmp_path):
    with pytest.raises(CatalogError):
        CatalogLoader(str(tmp_path / "missing.json")).load()


@pytest.mark.parametrize("content", ["{oops", json.dumps({"items": []}), "42"])
def test_invalid_catalog_raises(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content)
    with pytest.raises(CatalogError):
        CatalogLoader(str(path)).load()


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


def test_load_remote_catalog(monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params))
        return FakeResponse([{"falla_number": 4, "name": "Sueca", "lat": "39,461", "lng": "-0,376"}])

    monkeypatch.setattr(requests, "get", fake_get)

    fallas = CatalogLoader("https://example.org/data/fallas.json").load()

    assert [f.number for f in fallas] == [4]
    assert calls[0][0] == "https://example.org/data/fallas.json"
    assert "v" in calls[0][1]


def test_remote_http_error_raises(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **kw: FakeResponse([], status_code=404))
    with pytest.raises(CatalogError):
        CatalogLoader("https://example.org/data/fallas.json").load()


def test_reload_reads_source_again(catalog_file):
    loader = CatalogLoader(str(catalog_file))
    assert len(loader.load()) == 5

    catalog_file.write_text(json.dumps([{"falla_number": 1, "lat": 1, "lng": 1}]))
    assert len(loader.reload()) == 1
