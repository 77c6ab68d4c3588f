from flask import (
    Blueprint, render_template, request, redirect, url_for, flash, abort, current_app, jsonify,
)
from .definitions import InventoryItemForm, FormatMode, STATUSES, DEFAULT_STATUS
from .codec import (
    format_equipment, format_desktop, parse_equipment, parse_desktop,
    items_to_csv, parse_import, read_upload, ImportFormatError, CSV_HEADERS,
)
from .store import get_store, StoreError, RecordNotFound
from .views_helpers import (
    filter_items, sort_items, paginate, sectors_of, status_counts, status_badge_class,
    PER_PAGE_CHOICES,
)
from .utils_export import stream_text, stream_xlsx, stream_pdf

bp = Blueprint("inventory", __name__, template_folder="templates")

REQUIRED = ("responsable", "cedula", "cargo", "sector")
DELETE_ALL_WORD = "ELIMINAR"

TEMPLATE_ROW = InventoryItemForm(
    responsable="John Doe",
    cedula="V-12345678",
    cargo="Analista",
    sector="Oficina Principal",
    status_general="OPERATIVO",
    laptop=parse_equipment("Dell/Latitude 5420/12345ABC/ETIQ001/OPERATIVO/Sin novedad"),
    escritorio=parse_desktop("CPU: HP/ProDesk/SGH123/ETIQ002/OPERATIVO/-; "
                             "Monitor: Dell/P2419H/MX0123/ETIQ003/OPERATIVO/-"),
    obs_generales="Entregado en fecha X",
)


@bp.app_template_filter("equipo")
def equipo_filter(eq):
    return format_equipment(eq, FormatMode.DISPLAY)


@bp.app_template_filter("escritorio")
def escritorio_filter(desk):
    return format_desktop(desk, FormatMode.DISPLAY) or "-"


@bp.app_template_filter("badge")
def badge_filter(status):
    return status_badge_class(status)


def _list_args():
    return {
        "q": (request.args.get("q") or "").strip(),
        "sector": request.args.get("sector") or "",
        "status": request.args.get("status") or "",
    }


def _load_items():
    try:
        return get_store().list_items()
    except StoreError as e:
        flash(str(e), "danger")
        return []


def _form_values(item=None):
    """Valores de texto para el formulario (equipos en modo edición)."""
    if item is None:
        values = {k: "" for k in ("laptop", "escritorio", "obs_generales") + REQUIRED}
        values["status_general"] = DEFAULT_STATUS
        return values
    return {
        "responsable": item.responsable,
        "cedula": item.cedula,
        "cargo": item.cargo,
        "sector": item.sector,
        "status_general": item.status_general,
        "laptop": format_equipment(item.laptop, FormatMode.EDIT) if item.laptop else "",
        "escritorio": format_desktop(item.escritorio, FormatMode.EDIT),
        "obs_generales": item.obs_generales,
    }


def _form_from_request():
    data = {k: (request.form.get(k) or "").strip()
            for k in ("responsable", "cedula", "cargo", "sector", "status_general",
                      "laptop", "escritorio", "obs_generales")}
    errors = []
    missing = [k for k in REQUIRED if not data[k]]
    if missing:
        errors.append("Campos obligatorios: " + ", ".join(missing) + ".")
    if data["status_general"] not in STATUSES:
        errors.append("Status general inválido.")
    form = InventoryItemForm(
        responsable=data["responsable"],
        cedula=data["cedula"],
        cargo=data["cargo"],
        sector=data["sector"],
        status_general=data["status_general"],
        laptop=parse_equipment(data["laptop"]),
        escritorio=parse_desktop(data["escritorio"]),
        obs_generales=data["obs_generales"],
    )
    return form, data, errors


@bp.route("/", strict_slashes=False)
@bp.route("", strict_slashes=False)
def list_items():
    args = _list_args()
    items = _load_items()
    filtered = filter_items(items, **args)
    sort = request.args.get("sort") or ""
    direction = "desc" if request.args.get("dir") == "desc" else "asc"
    ordered = sort_items(filtered, sort, direction)
    per_page = request.args.get("per_page") or current_app.config.get("ITEMS_PER_PAGE", 10)
    page = paginate(ordered, request.args.get("page", 1), per_page)
    return render_template(
        "inventory_list.html", page=page, sectors=sectors_of(items), STATUSES=STATUSES,
        PER_PAGE_CHOICES=PER_PAGE_CHOICES, sort=sort, direction=direction,
        counts=status_counts(items), **args,
    )


@bp.route("/new", methods=["GET", "POST"])
def new_item():
    if request.method == "POST":
        form, values, errors = _form_from_request()
        if errors:
            for e in errors:
                flash(e, "error")
            return render_template("inventory_form.html", item=None, values=values, STATUSES=STATUSES)
        try:
            get_store().add_item(form)
        except StoreError as e:
            flash(str(e), "danger")
            return render_template("inventory_form.html", item=None, values=values, STATUSES=STATUSES)
        flash("Elemento agregado exitosamente.", "success")
        return redirect(url_for("inventory.list_items"))
    return render_template("inventory_form.html", item=None, values=_form_values(), STATUSES=STATUSES)


@bp.route("/<item_id>/edit", methods=["GET", "POST"])
def edit_item(item_id):
    store = get_store()
    try:
        item = store.get_item(item_id)
    except RecordNotFound:
        abort(404)
    except StoreError as e:
        flash(str(e), "danger")
        return redirect(url_for("inventory.list_items"))
    if request.method == "POST":
        form, values, errors = _form_from_request()
        if errors:
            for e in errors:
                flash(e, "error")
            return render_template("inventory_form.html", item=item, values=values, STATUSES=STATUSES)
        try:
            store.update_item(item_id, form)
        except StoreError as e:
            flash(str(e), "danger")
            return render_template("inventory_form.html", item=item, values=values, STATUSES=STATUSES)
        flash("Elemento actualizado exitosamente.", "success")
        return redirect(url_for("inventory.list_items"))
    return render_template("inventory_form.html", item=item, values=_form_values(item), STATUSES=STATUSES)


@bp.route("/<item_id>/delete", methods=["POST"])
def delete_item(item_id):
    try:
        get_store().delete_item(item_id)
    except RecordNotFound:
        abort(404)
    except StoreError as e:
        flash(str(e), "danger")
        return redirect(url_for("inventory.list_items"))
    flash("Elemento eliminado exitosamente.", "success")
    return redirect(url_for("inventory.list_items"))


@bp.route("/delete-all", methods=["POST"])
def delete_all():
    confirmed = (request.form.get("confirm") or "").strip().upper() == DELETE_ALL_WORD
    try:
        count = get_store().delete_all(confirm=confirmed)
    except StoreError as e:
        flash(str(e), "danger")
        return redirect(url_for("inventory.list_items"))
    current_app.logger.info("Inventario vaciado: %s elementos eliminados", count)
    flash(f"Se eliminaron {count} elementos.", "success")
    return redirect(url_for("inventory.list_items"))


# ====================== Exportaciones ======================

@bp.route("/export.csv")
def export_csv():
    items = filter_items(_load_items(), **_list_args())
    return stream_text("inventario.csv", items_to_csv(items))


@bp.route("/export.xlsx")
def export_xlsx():
    items = filter_items(_load_items(), **_list_args())
    return stream_xlsx("inventario.xlsx", items)


@bp.route("/export.pdf")
def export_pdf():
    items = filter_items(_load_items(), **_list_args())
    return stream_pdf("inventario.pdf", "Inventario de equipos", items)


@bp.route("/stats.json")
def stats_json():
    return jsonify(status_counts(_load_items()))


# ====================== Importación ======================

@bp.route("/import", methods=["GET"])
def import_form():
    return render_template("inventory_import.html", columns=CSV_HEADERS)


@bp.route("/import/plantilla.csv", methods=["GET"])
def import_template():
    return stream_text("plantilla_importacion.csv", items_to_csv([TEMPLATE_ROW]))


@bp.route("/import", methods=["POST"])
def import_run():
    file = request.files.get("file")
    if not file or not file.filename:
        flash("Por favor, selecciona un archivo CSV para importar.", "warning")
        return redirect(url_for("inventory.import_form"))

    try:
        rows = read_upload(file.filename, file.read())
    except ImportFormatError as e:
        current_app.logger.warning("Importación rechazada (%s): %s", file.filename, e)
        flash(f"No se pudo procesar el archivo: {e}", "danger")
        return redirect(url_for("inventory.import_form"))

    result = parse_import(rows)
    if not result.items and not result.skipped:
        flash("El archivo CSV está vacío o no tiene el formato correcto.", "warning")
        return redirect(url_for("inventory.import_form"))

    count = 0
    if result.items:
        try:
            count = get_store().add_items(result.items)
        except StoreError as e:
            flash(str(e), "danger")
            return redirect(url_for("inventory.import_form"))

    current_app.logger.info("Importación %s: %s creados, %s omitidos",
                            file.filename, count, result.skipped)
    msg = f"{count} elementos importados exitosamente." if count else "0 elementos importados."
    if result.skipped:
        msg += f" {result.skipped} filas omitidas (sin Responsable)."
        if result.first_error:
            msg += f" {result.first_error}"
    if not count:
        flash(msg, "warning")
        return redirect(url_for("inventory.import_form"))
    flash(msg, "success")
    return redirect(url_for("inventory.list_items"))
