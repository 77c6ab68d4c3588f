from dataclasses import dataclass, fields, asdict
from enum import Enum
from typing import Optional, Dict, Any

STATUSES = ("OPERATIVO", "INOPERATIVO", "ROBADO", "MIXTO")
DEFAULT_STATUS = "OPERATIVO"

EQUIPMENT_FIELDS = ("marca", "modelo", "serial", "etiqueta", "status", "obs")

# (atributo, etiqueta) en el orden fijo de serialización
DESKTOP_SLOTS = (
    ("cpu", "CPU"),
    ("monitor", "Monitor"),
    ("teclado", "Teclado"),
    ("mouse", "Mouse"),
    ("telefono", "Teléfono"),
)

PLACEHOLDER_DISPLAY = "N/A"
PLACEHOLDER_OBS_DISPLAY = "-"
PLACEHOLDER_EDIT = "SIN INFORMACION"

DEFAULT_EMPTY_TOKENS = frozenset({
    "SIN INFORMACION", "SIN INFORMACIÓN", "N/A", "NO APLICA", "-",
})


class FormatMode(str, Enum):
    DISPLAY = "display"
    EDIT = "edit"


def _clean(val) -> Optional[str]:
    if val is None:
        return None
    s = str(val).strip()
    return s or None


@dataclass
class Equipment:
    marca: Optional[str] = None
    modelo: Optional[str] = None
    serial: Optional[str] = None
    etiqueta: Optional[str] = None
    status: Optional[str] = None
    obs: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(_clean(getattr(self, f)) for f in EQUIPMENT_FIELDS)

    def to_dict(self) -> Dict[str, str]:
        return {k: v for k, v in asdict(self).items() if v}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Equipment"]:
        if not data:
            return None
        return normalize_equipment(cls(**{f: _clean(data.get(f)) for f in EQUIPMENT_FIELDS}))


def normalize_equipment(eq: Optional[Equipment]) -> Optional[Equipment]:
    """Un equipo sin ningún campo cargado equivale a ausente."""
    if eq is None or eq.is_empty():
        return None
    return eq


@dataclass
class DesktopEquipment:
    cpu: Optional[Equipment] = None
    monitor: Optional[Equipment] = None
    teclado: Optional[Equipment] = None
    mouse: Optional[Equipment] = None
    telefono: Optional[Equipment] = None

    def is_empty(self) -> bool:
        return all(normalize_equipment(getattr(self, attr)) is None for attr, _ in DESKTOP_SLOTS)

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        out = {}
        for attr, _ in DESKTOP_SLOTS:
            eq = normalize_equipment(getattr(self, attr))
            if eq is not None:
                out[attr] = eq.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["DesktopEquipment"]:
        if not data:
            return None
        desk = cls(**{attr: Equipment.from_dict(data.get(attr)) for attr, _ in DESKTOP_SLOTS})
        return None if desk.is_empty() else desk


@dataclass
class InventoryItemForm:
    """Registro de inventario sin identificador (payload de alta/edición)."""
    responsable: str
    cedula: str
    cargo: str
    sector: str
    status_general: str = DEFAULT_STATUS
    laptop: Optional[Equipment] = None
    escritorio: Optional[DesktopEquipment] = None
    obs_generales: str = ""

    def to_dict(self) -> Dict[str, Any]:
        # forma documento: la misma que guardaban las variantes JS/Firestore
        doc = {
            "responsable": self.responsable,
            "cedula": self.cedula,
            "cargo": self.cargo,
            "sector": self.sector,
            "statusGeneral": self.status_general,
            "obsGenerales": self.obs_generales,
        }
        laptop = normalize_equipment(self.laptop)
        if laptop is not None:
            doc["equipo1"] = {"laptop": laptop.to_dict()}
        if self.escritorio is not None and not self.escritorio.is_empty():
            doc["equipo2"] = {"escritorio": self.escritorio.to_dict()}
        return doc

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryItemForm":
        return cls(
            responsable=data.get("responsable") or "",
            cedula=data.get("cedula") or "",
            cargo=data.get("cargo") or "",
            sector=data.get("sector") or "",
            status_general=data.get("statusGeneral") or DEFAULT_STATUS,
            laptop=Equipment.from_dict((data.get("equipo1") or {}).get("laptop")),
            escritorio=DesktopEquipment.from_dict((data.get("equipo2") or {}).get("escritorio")),
            obs_generales=data.get("obsGenerales") or "",
        )


@dataclass
class InventoryItem(InventoryItemForm):
    id: str = ""

    @classmethod
    def from_form(cls, item_id: str, form: InventoryItemForm) -> "InventoryItem":
        values = {f.name: getattr(form, f.name) for f in fields(InventoryItemForm)}
        return cls(id=item_id, **values)

    def to_form(self) -> InventoryItemForm:
        return InventoryItemForm(**{f.name: getattr(self, f.name) for f in fields(InventoryItemForm)})
