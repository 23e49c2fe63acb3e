import pytest

from fallas.catalog import parse_catalog
from fallas.filters import FilterEngine, normalize_sections
from fallas.models import (
    FilterSelection, VisitState,
    STATUS_ALL, STATUS_VISITED, STATUS_NOT_VISITED, STATUS_WISHLIST,
)

from conftest import RAW_CATALOG


@pytest.fixture
def catalog():
    return parse_catalog(RAW_CATALOG)


def numbers(fallas):
    return [f.number for f in fallas]


def test_unconstrained_selection_returns_everything(catalog, store):
    assert FilterEngine.apply(catalog, FilterSelection(), store) == catalog


def test_section_filter_preserves_catalog_order(catalog, store):
    selection = FilterSelection(sections=frozenset({"1ªB", "Especial"}))
    assert numbers(FilterEngine.apply(catalog, selection, store)) == [1, 2, 8]


def test_unknown_section_yields_nothing(catalog, store):
    selection = FilterSelection(sections=frozenset({"X"}))
    assert FilterEngine.apply(catalog, selection, store) == []


def test_empty_section_set_means_all(catalog, store):
    empty = FilterSelection(sections=frozenset())
    assert empty.sections is None
    assert FilterEngine.apply(catalog, empty, store) == FilterEngine.apply(catalog, FilterSelection(), store)


@pytest.mark.parametrize("query, expected", [
    ("jordana", [2]),
    ("PLACA", [6]),
    ("àngel", [6]),
    ("misser masco", [7]),
    ("especial", [1, 2]),
    ("8", [8]),
    ("1ªa", [6, 7]),
    ("nowhere", []),
])
def test_text_filter_ignores_case_and_accents(catalog, store, query, expected):
    selection = FilterSelection(text=query)
    assert numbers(FilterEngine.apply(catalog, selection, store)) == expected


def test_filters_combine_with_and(catalog, store):
    store.set(1, VisitState(visited=True))
    store.set(2, VisitState(visited=True))
    selection = FilterSelection(sections=frozenset({"Especial"}), text="pilar", status=STATUS_VISITED)
    assert numbers(FilterEngine.apply(catalog, selection, store)) == [1]


def test_visited_and_not_visited_partition_all(catalog, store):
    store.set(2, VisitState(visited=True))
    store.set(7, VisitState(visited=True, wishlisted=True))
    store.set(8, VisitState(wishlisted=True))

    for base in (FilterSelection(), FilterSelection(sections=frozenset({"1ªA"})), FilterSelection(text="a")):
        visited = FilterEngine.apply(catalog, FilterSelection(base.sections, base.text, STATUS_VISITED), store)
        not_visited = FilterEngine.apply(catalog, FilterSelection(base.sections, base.text, STATUS_NOT_VISITED), store)
        everything = FilterEngine.apply(catalog, FilterSelection(base.sections, base.text, STATUS_ALL), store)

        assert set(numbers(visited)).isdisjoint(numbers(not_visited))
        assert sorted(numbers(visited) + numbers(not_visited)) == sorted(numbers(everything))


def test_wishlist_is_independent_of_visited(catalog, store):
    store.set(7, VisitState(visited=True, wishlisted=True))
    store.set(8, VisitState(wishlisted=True))

    selection = FilterSelection(status=STATUS_WISHLIST)
    assert numbers(FilterEngine.apply(catalog, selection, store)) == [7, 8]


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        FilterSelection(status="SOMETIMES")


@pytest.mark.parametrize("chosen, expected", [
    (None, None),
    ([], None),
    (["Especial", "1ªA", "1ªB"], None),
    (["Especial"], frozenset({"Especial"})),
    ("Especial", frozenset({"Especial"})),
])
def test_normalize_sections(chosen, expected):
    assert normalize_sections(chosen, ["1ªA", "1ªB", "Especial"]) == expected


def test_single_section_string_is_one_section(catalog, store):
    selection = FilterSelection(sections="Especial")
    assert selection.sections == frozenset({"Especial"})
    assert numbers(FilterEngine.apply(catalog, selection, store)) == [1, 2]
