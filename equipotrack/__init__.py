import os
import logging
from flask import Flask, redirect, url_for
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Extensiones globales
db = SQLAlchemy()
migrate = Migrate()


def create_app(test_config=None):
    app = Flask(__name__)

    # --- Config básica ---
    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "devkey-change-me")
    app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", "sqlite:///equipotrack.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["INVENTORY_BACKEND"] = os.environ.get("INVENTORY_BACKEND", "sql")  # sql | memory
    app.config["ITEMS_PER_PAGE"] = int(os.environ.get("ITEMS_PER_PAGE", "10"))
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO")
    app.json.ensure_ascii = False
    app.config["MAX_CONTENT_LENGTH"] = int(os.environ.get("MAX_CONTENT_LENGTH", 10 * 1024 * 1024))

    if test_config:
        app.config.update(test_config)

    # --- Logging ---
    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # --- Inicializar extensiones ---
    db.init_app(app)
    migrate.init_app(app, db)

    # --- Modelos y blueprints ---
    from .inventory_models import InventoryRecord  # noqa: F401  asegura creación de tabla
    from .store import InventoryStore, MemoryInventoryStore
    from .inventory import bp as inventory_bp

    app.register_blueprint(inventory_bp, url_prefix="/inventory")

    backend = app.config["INVENTORY_BACKEND"]
    if backend == "memory":
        app.extensions["inventory_store"] = MemoryInventoryStore()
    else:
        app.extensions["inventory_store"] = InventoryStore()
        with app.app_context():
            db.create_all()
    app.logger.info("Almacén de inventario: %s", backend)

    @app.route("/")
    def index():
        return redirect(url_for("inventory.list_items"))

    # --- Forzar header UTF-8 en HTML ---
    @app.after_request
    def _force_utf8(resp):
        if resp.mimetype in ("text/html", "application/xhtml+xml"):
            resp.headers["Content-Type"] = "text/html; charset=utf-8"
        return resp

    return app
