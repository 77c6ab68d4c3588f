import pytest
from equipotrack import create_app, db
from equipotrack.definitions import Equipment, DesktopEquipment, InventoryItemForm


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def memory_app():
    return create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "INVENTORY_BACKEND": "memory",
    })


@pytest.fixture(params=["sql", "memory"])
def any_app(request, app, memory_app):
    return app if request.param == "sql" else memory_app


@pytest.fixture
def client(any_app):
    return any_app.test_client()


def make_form(responsable="Ana Pérez", **kw):
    values = dict(
        responsable=responsable,
        cedula="V-1000",
        cargo="Analista",
        sector="Administración",
        status_general="OPERATIVO",
        laptop=Equipment(marca="Dell", modelo="Latitude 5420", serial="12345ABC",
                         etiqueta="ETIQ001", status="OPERATIVO", obs="Sin novedad"),
        escritorio=DesktopEquipment(
            cpu=Equipment(marca="HP", modelo="ProDesk", serial="SGH123", etiqueta="ETIQ002", status="OPERATIVO"),
        ),
        obs_generales="Entregado",
    )
    values.update(kw)
    return InventoryItemForm(**values)


@pytest.fixture
def form_factory():
    return make_form
