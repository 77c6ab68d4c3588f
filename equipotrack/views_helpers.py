## views_helpers.py: búsqueda, filtros, orden y paginado del listado
import math
from collections import Counter
from dataclasses import dataclass
from typing import List, Sequence, Optional

from .definitions import InventoryItem, STATUSES, EQUIPMENT_FIELDS, DESKTOP_SLOTS

SORT_KEYS = {
    "responsable": "responsable",
    "cedula": "cedula",
    "cargo": "cargo",
    "sector": "sector",
    "statusGeneral": "status_general",
}
PER_PAGE_CHOICES = (10, 20, 50)

STATUS_BADGES = {
    "OPERATIVO": "badge-operativo",
    "INOPERATIVO": "badge-inoperativo",
    "ROBADO": "badge-robado",
    "MIXTO": "badge-mixto",
}
DEFAULT_BADGE = "badge-default"


def status_badge_class(status: Optional[str]) -> str:
    return STATUS_BADGES.get(status or "", DEFAULT_BADGE)


def _equipment_values(eq):
    if eq is None:
        return []
    return [getattr(eq, f) for f in EQUIPMENT_FIELDS if getattr(eq, f)]


def _searchable(item: InventoryItem) -> List[str]:
    vals = [item.responsable, item.cedula, item.cargo, item.sector,
            item.status_general, item.obs_generales]
    vals.extend(_equipment_values(item.laptop))
    if item.escritorio is not None:
        for attr, _ in DESKTOP_SLOTS:
            vals.extend(_equipment_values(getattr(item.escritorio, attr)))
    return [str(v) for v in vals if v]


def matches_search(item: InventoryItem, term: str) -> bool:
    term = (term or "").strip().lower()
    if not term:
        return True
    return any(term in v.lower() for v in _searchable(item))


def _is_all(val):
    return not val or val == "all"


def filter_items(items: Sequence[InventoryItem], q="", sector="", status="") -> List[InventoryItem]:
    out = []
    for it in items:
        if not matches_search(it, q):
            continue
        if not _is_all(sector) and it.sector != sector:
            continue
        if not _is_all(status) and it.status_general != status:
            continue
        out.append(it)
    return out


def sort_items(items: Sequence[InventoryItem], key: str = "", direction: str = "asc") -> List[InventoryItem]:
    """Orden estable por columna; clave desconocida = orden original."""
    attr = SORT_KEYS.get(key or "")
    if attr is None:
        return list(items)
    return sorted(items, key=lambda it: (getattr(it, attr) or "").lower(),
                  reverse=(direction == "desc"))


def sectors_of(items: Sequence[InventoryItem]) -> List[str]:
    seen = []
    for it in items:
        if it.sector and it.sector not in seen:
            seen.append(it.sector)
    return seen


def status_counts(items: Sequence[InventoryItem]) -> dict:
    """Cantidad por estado (los cuatro siempre presentes, más los desconocidos)."""
    counts = Counter(it.status_general for it in items)
    out = {s: counts.pop(s, 0) for s in STATUSES}
    out.update(counts)
    return out


@dataclass
class Page:
    items: List[InventoryItem]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


def paginate(items: Sequence[InventoryItem], page=1, per_page=10) -> Page:
    try:
        per_page = int(per_page)
    except (TypeError, ValueError):
        per_page = PER_PAGE_CHOICES[0]
    if per_page not in PER_PAGE_CHOICES:
        per_page = PER_PAGE_CHOICES[0]
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    total = len(items)
    pages = max(1, math.ceil(total / per_page))
    page = min(max(page, 1), pages)
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, per_page=per_page, total=total)
