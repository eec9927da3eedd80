import os

# The app module builds its engine at import time; point it at SQLite before that happens.
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kampus.api.deps import get_db
from kampus.db.base import Base
from kampus.main import app


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def _create(client, path, payload):
    response = client.post(path, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["id"]


@pytest.fixture()
def catalog(client):
    """One institution with two of everything a timetable needs."""
    institution_id = _create(client, "/api/institutions/", {"name": "Colegio Central", "code": "CC"})
    base = f"/api/institutions/{institution_id}"

    site_id = _create(client, f"{base}/sites", {"name": "Main campus"})
    grade_id = _create(client, f"{base}/grade-levels", {"name": "Sixth", "level": 6})
    year_id = _create(
        client,
        f"{base}/academic-years",
        {"name": "2026", "start_date": "2026-01-15", "end_date": "2026-12-15"},
    )
    other_year_id = _create(
        client,
        f"{base}/academic-years",
        {"name": "2027", "start_date": "2027-01-15", "end_date": "2027-12-15"},
    )
    period_id = _create(
        client,
        f"{base}/academic-years/{year_id}/periods",
        {"name": "First term", "start_date": "2026-01-15", "end_date": "2026-04-15"},
    )
    other_period_id = _create(
        client,
        f"{base}/academic-years/{other_year_id}/periods",
        {"name": "First term", "start_date": "2027-01-15", "end_date": "2027-04-15"},
    )

    return {
        "institution_id": institution_id,
        "base": base,
        "year": year_id,
        "other_year": other_year_id,
        "period": period_id,
        "other_period": other_period_id,
        "teacher_1": _create(client, f"{base}/teachers", {"name": "Ana Ruiz"}),
        "teacher_2": _create(client, f"{base}/teachers", {"name": "Luis Pardo"}),
        "subject_1": _create(client, f"{base}/subjects", {"name": "Mathematics", "code": "MAT"}),
        "subject_2": _create(client, f"{base}/subjects", {"name": "Biology", "code": "BIO"}),
        "group_1": _create(client, f"{base}/groups", {"name": "6A", "site_id": site_id, "grade_level_id": grade_id}),
        "group_2": _create(client, f"{base}/groups", {"name": "6B", "site_id": site_id, "grade_level_id": grade_id}),
        "room_1": _create(client, f"{base}/classrooms", {"name": "Room 101", "capacity": 35}),
        "room_2": _create(
            client, f"{base}/classrooms", {"name": "Lab 1", "type": "laboratory", "capacity": 25}
        ),
        "slot_1": _create(client, f"{base}/time-slots", {"start_time": "07:00", "end_time": "07:50"}),
        "slot_2": _create(client, f"{base}/time-slots", {"start_time": "08:00", "end_time": "08:50"}),
    }


@pytest.fixture()
def make_assignment(client, catalog):
    def _make(expected_status=201, **overrides):
        payload = {
            "teacher_id": catalog["teacher_1"],
            "subject_id": catalog["subject_1"],
            "group_id": catalog["group_1"],
            "time_slot_id": catalog["slot_1"],
            "day_of_week": "mon",
            "academic_year_id": catalog["year"],
        }
        payload.update(overrides)
        response = client.post(f"{catalog['base']}/assignments", json=payload)
        assert response.status_code == expected_status, response.text
        return response.json()

    return _make
