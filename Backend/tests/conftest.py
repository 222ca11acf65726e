# Backend/tests/conftest.py
import os
from datetime import datetime, date

# Must be set before app.database is imported: the engine is built at import time
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, engine, SessionLocal
from app.main import app
from app.models.employee_model import Employee
from app.routers.employee_router import get_now

# Reference "now" for every test that goes through the API
NOW = datetime(2025, 6, 15, 12, 0, 0)


def make_employee(**overrides):
    """Transient Employee with sensible defaults (adult, hired years ago)."""
    values = dict(
        nombre="Empleado",
        departamento="Ventas",
        puesto="Vendedor",
        salario_base=1000,
        bonificacion=0,
        descuento=0,
        fecha_contratacion=date(2015, 1, 10),
        fecha_nacimiento=date(1990, 1, 1),
        sexo="M",
        evaluacion_desempeno=None,
        estado=1,
    )
    values.update(overrides)
    return Employee(**values)


def employee_json(**overrides):
    body = {
        "nombre": "Ana Martinez",
        "departamento": "TI",
        "puesto": "Analista",
        "salario_base": 1200.00,
        "bonificacion": 150.00,
        "descuento": 80.50,
        "fecha_contratacion": "2019-03-01",
        "fecha_nacimiento": "1990-07-15",
        "sexo": "F",
        "evaluacion_desempeno": 88.5,
    }
    body.update(overrides)
    return body


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_now] = lambda: NOW
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def create_employee(client):
    """POST an employee and return the created payload."""
    def _create(**overrides):
        r = client.post("/api/v1/empleados", json=employee_json(**overrides))
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _create
