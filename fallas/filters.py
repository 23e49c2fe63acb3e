"""Section, text and status filtering over the falla catalog."""

from typing import Iterable, Mapping, Optional

from .models import (
    Falla, FilterSelection, VisitState,
    STATUS_ALL, STATUS_VISITED, STATUS_NOT_VISITED, STATUS_WISHLIST,
)
from .state import StateStore
from .util import normalize_text


def normalize_sections(chosen: Optional[Iterable[str]],
                       available: Iterable[str]) -> Optional[frozenset[str]]:
    """Collapse a section choice to None ("all") when it is empty or complete"""
    if chosen is None:
        return None
    if isinstance(chosen, str):
        chosen = [chosen]
    chosen = frozenset(chosen)
    if not chosen or chosen >= frozenset(available):
        return None
    return chosen


def search_text(falla: Falla) -> str:
    return normalize_text(f"{falla.name} {falla.number} {falla.section}")


def matches_section(falla: Falla, selection: FilterSelection) -> bool:
    return selection.all_sections or falla.section in selection.sections


def matches_text(falla: Falla, query: str) -> bool:
    """query must already be normalized"""
    return not query or query in search_text(falla)


def matches_status(state: VisitState, status: str) -> bool:
    if status == STATUS_VISITED:
        return state.visited
    if status == STATUS_NOT_VISITED:
        return not state.visited
    if status == STATUS_WISHLIST:
        return state.wishlisted
    return True


class FilterEngine:
    """Derives the visible subset of the catalog, preserving catalog order"""

    @staticmethod
    def apply(catalog: Iterable[Falla], selection: FilterSelection,
              store: StateStore) -> list[Falla]:
        query = normalize_text(selection.text)
        states: Mapping[int, VisitState] = {}
        if selection.status != STATUS_ALL:
            # One snapshot for the whole pass
            states = store.load_all()
        default = VisitState()

        return [
            f for f in catalog
            if matches_section(f, selection)
            and matches_text(f, query)
            and matches_status(states.get(f.number, default), selection.status)
        ]
