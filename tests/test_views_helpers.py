from equipotrack.definitions import InventoryItem, Equipment, DesktopEquipment
from equipotrack.views_helpers import (
    filter_items, sort_items, paginate, sectors_of, status_counts, status_badge_class,
)


def _item(i, responsable, sector="RRHH", status="OPERATIVO", **kw):
    return InventoryItem(id=str(i), responsable=responsable, cedula=f"V-{i}", cargo="Analista",
                         sector=sector, status_general=status, **kw)


ITEMS = [
    _item(1, "Carla", laptop=Equipment(marca="Dell", serial="ABC123")),
    _item(2, "ana", sector="Sistemas", status="ROBADO"),
    _item(3, "Bruno", sector="Sistemas", status="MIXTO",
          escritorio=DesktopEquipment(monitor=Equipment(marca="LG", etiqueta="ETQ-77"))),
]


def test_search_matches_nested_equipment():
    assert [it.id for it in filter_items(ITEMS, q="abc123")] == ["1"]
    assert [it.id for it in filter_items(ITEMS, q="etq-77")] == ["3"]
    assert [it.id for it in filter_items(ITEMS, q="  SISTEMAS ")] == ["2", "3"]
    assert len(filter_items(ITEMS, q="")) == 3


def test_sector_and_status_filters():
    assert [it.id for it in filter_items(ITEMS, sector="Sistemas", status="ROBADO")] == ["2"]
    assert len(filter_items(ITEMS, sector="all", status="all")) == 3


def test_sort_items():
    assert [it.responsable for it in sort_items(ITEMS, "responsable")] == ["ana", "Bruno", "Carla"]
    assert [it.responsable for it in sort_items(ITEMS, "responsable", "desc")] == ["Carla", "Bruno", "ana"]
    assert [it.id for it in sort_items(ITEMS, "statusGeneral")] == ["3", "1", "2"]
    assert sort_items(ITEMS, "bogus") == ITEMS


def test_paginate_clamps():
    many = [_item(i, f"P{i:02d}") for i in range(25)]
    page = paginate(many, page=3, per_page=10)
    assert page.pages == 3
    assert [it.id for it in page.items] == [str(i) for i in range(20, 25)]
    assert page.has_prev and not page.has_next

    assert paginate(many, page=99, per_page=20).page == 2
    assert paginate(many, page="x", per_page=7).per_page == 10
    empty = paginate([], page=1)
    assert empty.pages == 1 and empty.items == []


def test_status_badges_and_counts():
    assert status_badge_class("ROBADO") == "badge-robado"
    assert status_badge_class("DESCONOCIDO") == "badge-default"
    assert status_badge_class(None) == "badge-default"
    counts = status_counts(ITEMS + [_item(9, "X", status="")])
    assert counts == {"OPERATIVO": 1, "INOPERATIVO": 0, "ROBADO": 1, "MIXTO": 1, "": 1}


def test_sectors_of_keeps_first_seen_order():
    assert sectors_of(ITEMS) == ["RRHH", "Sistemas"]
