"""Falla catalog loading from a local JSON file or an HTTP URL."""

import json
import time
from typing import Any, Iterable, Optional

import requests

from .config import CONFIG
from .models import Falla
from .util import to_number


class CatalogError(Exception):
    """The catalog could not be fetched or is not a list of records"""


def _parse_number(value: Any) -> Optional[int]:
    """Falla numbers must be positive integers ("12" and 12.0 are accepted)"""
    number = to_number(value)
    if number is None or number <= 0 or number != int(number):
        return None
    return int(number)


def parse_record(record: Any) -> Optional[Falla]:
    """Build a Falla from a raw record, or None when it is unusable"""
    if not isinstance(record, dict):
        return None

    number = _parse_number(record.get("falla_number"))
    lat = to_number(record.get("lat"))
    lon = to_number(record.get("lng", record.get("lon")))
    if number is None or lat is None or lon is None:
        return None

    sketch = record.get("sketch_url") or None
    return Falla(
        number=number,
        name=str(record.get("name") or ""),
        section=str(record.get("section") or ""),
        lat=lat,
        lon=lon,
        sketch_url=str(sketch) if sketch else None,
    )


def parse_catalog(records: Iterable[Any]) -> list[Falla]:
    """Parse raw records in order, dropping malformed and duplicate ones"""
    fallas = []
    seen: set[int] = set()
    skipped = 0
    for record in records:
        falla = parse_record(record)
        if falla is None or falla.number in seen:
            skipped += 1
            continue
        seen.add(falla.number)
        fallas.append(falla)

    if skipped:
        print(f"Skipped {skipped} malformed or duplicate catalog records")
    return fallas


def available_sections(catalog: Iterable[Falla]) -> list[str]:
    """Sorted distinct non-empty sections"""
    return sorted({f.section for f in catalog if f.section})


class CatalogLoader:
    """Load the catalog once; reload() re-reads the same source"""

    def __init__(self, source: str = CONFIG["catalog_path"]):
        self.source = source

    def _is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    def _fetch_remote(self) -> Any:
        print(f"Fetching catalog from {self.source}...")
        try:
            # Cache buster so a freshly published catalog is always picked up
            response = requests.get(
                self.source,
                params={"v": int(time.time() * 1000)},
                timeout=CONFIG["catalog_timeout"],
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise CatalogError(f"Could not load catalog from {self.source}: {e}") from e
        except ValueError as e:
            raise CatalogError(f"Catalog at {self.source} is not valid JSON: {e}") from e

    def _read_local(self) -> Any:
        try:
            with open(self.source, encoding="utf-8") as f:
                return json.load(f)
        except OSError as e:
            raise CatalogError(f"Could not load catalog from {self.source}: {e}") from e
        except json.JSONDecodeError as e:
            raise CatalogError(f"Catalog at {self.source} is not valid JSON: {e}") from e

    def load(self) -> list[Falla]:
        raw = self._fetch_remote() if self._is_remote() else self._read_local()

        # Accept both a bare list and {"fallas": [...]}
        if isinstance(raw, dict):
            raw = raw.get("fallas")
        if not isinstance(raw, list):
            raise CatalogError(f"Catalog at {self.source} must be a list of records")

        return parse_catalog(raw)

    def reload(self) -> list[Falla]:
        return self.load()
