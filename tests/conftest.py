import itertools
from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.connection import create_all_tables, get_db
from modules.compensation import schemas as comp_schemas
from modules.data_management import schemas as dm_schemas
from modules.data_management import services as dm_services
from modules.data_management.models import EmploymentStatus
from modules.security.passwords import hash_password

DEFAULT_PASSWORD = "Secret#123"
FIXED_NOW = datetime(2026, 4, 1, 9, 0, 0)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_employee(db):
    counter = itertools.count(1)

    def _make(
        password=DEFAULT_PASSWORD,
        email=None,
        status=EmploymentStatus.ACTIVE,
        role="USER",
        is_first_login=False,
    ):
        n = next(counter)
        emp = dm_services.create_employee(
            db,
            dm_schemas.EmployeeCreate(
                employee_number=f"EMP{n:04d}",
                first_name="Test",
                last_name=f"User{n}",
                email=email or f"user{n}@company.in",
                role=role,
                employment_status=status,
            ),
        )
        emp.password_hash = hash_password(password) if password else None
        emp.is_first_login = is_first_login
        db.commit()
        db.refresh(emp)
        return emp

    return _make


@pytest.fixture
def employee(make_employee):
    return make_employee()


@pytest.fixture
def compensation_data():
    def _data(employee_id, basic=20000.0, effective_from=date(2026, 1, 1), is_current=True, **extra):
        return comp_schemas.CompensationCreate(
            employee_id=employee_id,
            basic_salary=basic,
            hra=basic,
            special_allowance=basic / 2,
            professional_tax=200.0,
            effective_from=effective_from,
            is_current=is_current,
            **extra,
        )

    return _data


@pytest.fixture
def client(db):
    from main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    def _login(email, password=DEFAULT_PASSWORD):
        resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _login
