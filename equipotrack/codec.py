"""Conversión entre registros de inventario y texto plano.

Dos representaciones:

* cadena compacta de un equipo: ``marca/modelo/serial/etiqueta/status/obs``
* fila CSV con las columnas de ``CSV_HEADERS``; las columnas Laptop y
  Escritorio llevan cadenas compactas.

Ninguna función de este módulo lanza excepciones por datos mal formados: los
campos que no se pueden interpretar quedan ausentes (``None``) o toman su valor
por defecto. La única excepción es ``ImportFormatError``, cuando el archivo
subido no se puede leer como tabla.

Limitación conocida: no se escapan los separadores. Un valor que contenga
``/`` (o ``;`` en el escritorio, o ``"`` en el CSV) no sobrevive la ida y vuelta.
"""
import csv
import io
import unicodedata
from dataclasses import dataclass, field
from typing import Iterable, List, Dict, Any, Optional, Mapping
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .definitions import (
    Equipment, DesktopEquipment, InventoryItemForm, FormatMode,
    EQUIPMENT_FIELDS, DESKTOP_SLOTS, STATUSES, DEFAULT_STATUS,
    DEFAULT_EMPTY_TOKENS, PLACEHOLDER_DISPLAY, PLACEHOLDER_OBS_DISPLAY,
    PLACEHOLDER_EDIT, normalize_equipment,
)

EQUIPMENT_SEP = "/"
DESKTOP_SEP = ";"
LABEL_SEP = ":"
BOM = "\ufeff"

CSV_HEADERS = (
    "Responsable", "Cédula", "Cargo", "Sector", "Status General",
    "Laptop", "Escritorio", "Obs Generales",
)


class ImportFormatError(ValueError):
    """El archivo no se pudo interpretar como CSV/XLSX de inventario."""


def _norm(s: Optional[str]) -> str:
    if s is None:
        return ""
    s = str(s).replace(BOM, "").strip()
    s = unicodedata.normalize("NFKD", s).encode("ascii", "ignore").decode("ascii")
    return s.lower()


def _text(val: Any) -> str:
    if val is None:
        return ""
    return str(val).strip()


# ====================== Equipo individual ======================

def _placeholder(field_name: str, mode: FormatMode) -> str:
    if mode == FormatMode.EDIT:
        return PLACEHOLDER_EDIT
    return PLACEHOLDER_OBS_DISPLAY if field_name == "obs" else PLACEHOLDER_DISPLAY


def format_equipment(eq: Optional[Equipment], mode: FormatMode = FormatMode.DISPLAY) -> str:
    """Equipo -> ``marca/modelo/serial/etiqueta/status/obs``.

    Los campos vacíos se reemplazan por el marcador del modo: ``N/A`` (y ``-``
    para obs) en pantalla, ``SIN INFORMACION`` en edición.
    """
    eq = eq or Equipment()
    parts = []
    for name in EQUIPMENT_FIELDS:
        value = _text(getattr(eq, name))
        parts.append(value or _placeholder(name, mode))
    return EQUIPMENT_SEP.join(parts)


def _split_compact(text: str) -> List[str]:
    # "N/A" lleva el separador adentro: se vuelve a unir cuando aparece como campo entero
    raw = text.split(EQUIPMENT_SEP)
    parts = []
    i = 0
    while i < len(raw):
        if (i + 1 < len(raw)
                and raw[i].strip().upper() == "N"
                and raw[i + 1].strip().upper() == "A"):
            parts.append("N/A")
            i += 2
            continue
        parts.append(raw[i])
        i += 1
    return parts


def _empty_set(empty_tokens: Iterable[str]) -> frozenset:
    return frozenset(t.strip().upper() for t in empty_tokens)


def parse_equipment(text: Optional[str],
                    empty_tokens: Iterable[str] = DEFAULT_EMPTY_TOKENS) -> Optional[Equipment]:
    """Cadena compacta -> Equipment, o None si no queda ningún campo cargado.

    Las posiciones se asignan por índice; las que faltan o valen un marcador
    de vacío (``empty_tokens``, sin distinguir mayúsculas) quedan ausentes.
    """
    if text is None:
        return None
    empties = _empty_set(empty_tokens)
    parts = _split_compact(str(text))
    values = {}
    for idx, name in enumerate(EQUIPMENT_FIELDS):
        raw = parts[idx].strip() if idx < len(parts) else ""
        values[name] = None if (not raw or raw.upper() in empties) else raw
    return normalize_equipment(Equipment(**values))


# ====================== Escritorio ======================

def format_desktop(desk: Optional[DesktopEquipment], mode: FormatMode = FormatMode.DISPLAY) -> str:
    if desk is None:
        return ""
    segments = []
    for attr, label in DESKTOP_SLOTS:
        eq = normalize_equipment(getattr(desk, attr))
        if eq is not None:
            segments.append(f"{label}{LABEL_SEP} {format_equipment(eq, mode)}")
    return f"{DESKTOP_SEP} ".join(segments)


def _match_slot(label: str) -> Optional[str]:
    key = _norm(label)
    if not key:
        return None
    for attr, name in DESKTOP_SLOTS:
        if _norm(name) in key:
            return attr
    return None


def parse_desktop(text: Optional[str],
                  empty_tokens: Iterable[str] = DEFAULT_EMPTY_TOKENS) -> Optional[DesktopEquipment]:
    """``CPU: a/b/c/d/e/f; Monitor: ...`` -> DesktopEquipment.

    Las etiquetas que no corresponden a ninguna ranura se descartan.
    """
    if not text:
        return None
    desk = DesktopEquipment()
    for segment in str(text).split(DESKTOP_SEP):
        if LABEL_SEP not in segment:
            continue
        label, payload = segment.split(LABEL_SEP, 1)
        attr = _match_slot(label)
        if attr is None:
            continue
        eq = parse_equipment(payload, empty_tokens)
        if eq is not None:
            setattr(desk, attr, eq)
    return None if desk.is_empty() else desk


# ====================== CSV ======================

def _quote(val: Any) -> str:
    return f'"{"" if val is None else val}"'


def item_to_csv_row(item: InventoryItemForm, mode: FormatMode = FormatMode.EDIT) -> str:
    values = [
        item.responsable,
        item.cedula,
        item.cargo,
        item.sector,
        item.status_general,
        format_equipment(item.laptop, mode),
        format_desktop(item.escritorio, mode),
        item.obs_generales,
    ]
    return ",".join(_quote(v) for v in values)


def items_to_csv(items: Iterable[InventoryItemForm], mode: FormatMode = FormatMode.EDIT) -> str:
    """Lista de registros -> texto CSV con BOM, listo para descargar."""
    lines = [",".join(CSV_HEADERS)]
    lines.extend(item_to_csv_row(it, mode) for it in items)
    return BOM + "\n".join(lines)


def _status(val: Any) -> str:
    s = _text(val).upper()
    return s if s in STATUSES else DEFAULT_STATUS


def parse_csv_row(row: Mapping[str, Any],
                  empty_tokens: Iterable[str] = DEFAULT_EMPTY_TOKENS) -> InventoryItemForm:
    norm_row = {_norm(k): v for k, v in row.items() if isinstance(k, str)}

    def col(header):
        return _text(norm_row.get(_norm(header)))

    return InventoryItemForm(
        responsable=col("Responsable"),
        cedula=col("Cédula"),
        cargo=col("Cargo"),
        sector=col("Sector"),
        status_general=_status(col("Status General")),
        laptop=parse_equipment(col("Laptop"), empty_tokens),
        escritorio=parse_desktop(col("Escritorio"), empty_tokens),
        obs_generales=col("Obs Generales"),
    )


@dataclass
class ImportResult:
    items: List[InventoryItemForm] = field(default_factory=list)
    skipped: int = 0
    first_error: Optional[str] = None


def parse_import(rows: Iterable[Mapping[str, Any]],
                 empty_tokens: Iterable[str] = DEFAULT_EMPTY_TOKENS) -> ImportResult:
    """Decodifica un lote de filas. Se omiten las que no tienen Responsable."""
    result = ImportResult()
    # fila 1 = encabezados
    for line_no, row in enumerate(rows, start=2):
        form = parse_csv_row(row, empty_tokens)
        if not form.responsable:
            result.skipped += 1
            if result.first_error is None:
                result.first_error = f"Fila {line_no}: falta el Responsable."
            continue
        result.items.append(form)
    return result


# ====================== Lectura de archivos ======================

def _check_headers(headers: List[str]) -> None:
    if _norm("Responsable") not in {_norm(h) for h in headers if h}:
        raise ImportFormatError("El archivo no tiene la columna 'Responsable'.")


def read_csv(data: bytes) -> List[Dict[str, Any]]:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = data.decode("latin-1")
    try:
        reader = csv.DictReader(io.StringIO(text))
        if not reader.fieldnames:
            raise ImportFormatError("El archivo CSV está vacío.")
        reader.fieldnames = [(h or "").strip() for h in reader.fieldnames]
        _check_headers(reader.fieldnames)
        return list(reader)
    except csv.Error as e:
        raise ImportFormatError(f"No se pudo leer el CSV: {e}") from e


_XLSX_ERRORS = (BadZipFile, InvalidFileException, KeyError, OSError, ValueError)


def _cell(v) -> str:
    if v is None:
        return ""
    # las cédulas numéricas llegan como float desde Excel
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def read_xlsx(data: bytes) -> List[Dict[str, Any]]:
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except _XLSX_ERRORS as e:
        raise ImportFormatError(f"No se pudo leer el XLSX: {e}") from e
    try:
        rows = list(wb.active.iter_rows(values_only=True))
    except _XLSX_ERRORS as e:
        raise ImportFormatError(f"No se pudo leer el XLSX: {e}") from e
    finally:
        wb.close()
    if not rows:
        raise ImportFormatError("La planilla está vacía.")
    headers = [_text(h) for h in rows[0]]
    _check_headers(headers)
    out = []
    for r in rows[1:]:
        if all(v is None for v in r):
            continue
        rec = {}
        for i, v in enumerate(r):
            key = headers[i] if i < len(headers) else f"col{i}"
            rec[key] = _cell(v)
        out.append(rec)
    return out


def read_upload(filename: str, data: bytes) -> List[Dict[str, Any]]:
    if (filename or "").lower().endswith(".xlsx"):
        return read_xlsx(data)
    return read_csv(data)
