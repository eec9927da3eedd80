from datetime import date

from kampus.services.calendar import ranges_overlap


def test_ranges_are_half_open():
    assert ranges_overlap(date(2026, 1, 1), date(2026, 3, 1), date(2026, 2, 1), date(2026, 4, 1))
    assert not ranges_overlap(date(2026, 1, 1), date(2026, 3, 1), date(2026, 3, 1), date(2026, 5, 1))
    assert ranges_overlap(date(2026, 1, 1), date(2026, 12, 1), date(2026, 3, 1), date(2026, 4, 1))


def test_periods_tile_the_year_back_to_back(client, catalog):
    url = f"{catalog['base']}/academic-years/{catalog['year']}/periods"

    second = client.post(url, json={"name": "Second term", "start_date": "2026-04-15", "end_date": "2026-08-15"})
    assert second.status_code == 201

    overlapping = client.post(url, json={"name": "Overlap", "start_date": "2026-08-01", "end_date": "2026-09-01"})
    assert overlapping.status_code == 422
    body = overlapping.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"]["period_id"] == second.json()["id"]

    names = [item["name"] for item in client.get(url).json()]
    assert names == ["First term", "Second term"]


def test_period_must_sit_inside_its_year(client, catalog):
    url = f"{catalog['base']}/academic-years/{catalog['year']}/periods"

    early = client.post(url, json={"name": "Early", "start_date": "2026-01-01", "end_date": "2026-02-01"})
    assert early.status_code == 422
    assert early.json()["details"] == {"field": "start_date"}

    late = client.post(url, json={"name": "Late", "start_date": "2026-11-01", "end_date": "2027-01-01"})
    assert late.status_code == 422
    assert late.json()["details"] == {"field": "end_date"}

    reversed_range = client.post(url, json={"name": "Reversed", "start_date": "2026-06-01", "end_date": "2026-05-01"})
    assert reversed_range.status_code == 422


def test_update_period_ignores_its_own_range(client, catalog):
    response = client.patch(
        f"{catalog['base']}/periods/{catalog['period']}",
        json={"end_date": "2026-05-01"},
    )
    assert response.status_code == 200
    assert response.json()["end_date"] == "2026-05-01"
    assert response.json()["start_date"] == "2026-01-15"

    foreign = client.patch(f"{catalog['base']}/periods/does-not-exist", json={"name": "X"})
    assert foreign.status_code == 404


def test_year_cannot_shrink_past_its_periods(client, catalog):
    url = f"{catalog['base']}/academic-years/{catalog['year']}"

    shrink = client.patch(url, json={"start_date": "2026-02-01"})
    assert shrink.status_code == 422
    assert shrink.json()["details"]["period_id"] == catalog["period"]

    rename = client.patch(url, json={"name": "2026 school year", "end_date": "2026-12-20"})
    assert rename.status_code == 200
    assert rename.json()["name"] == "2026 school year"


def test_year_names_are_unique_per_institution(client, catalog):
    response = client.post(
        f"{catalog['base']}/academic-years",
        json={"name": "2026", "start_date": "2026-01-01", "end_date": "2026-12-31"},
    )
    assert response.status_code == 422
    assert response.json()["details"]["field"] == "name"

    other = client.post("/api/institutions/", json={"name": "Escuela Norte"}).json()
    response = client.post(
        f"/api/institutions/{other['id']}/academic-years",
        json={"name": "2026", "start_date": "2026-01-01", "end_date": "2026-12-31"},
    )
    assert response.status_code == 201


def test_deleted_year_is_hidden_and_unschedulable(client, catalog, make_assignment):
    response = client.delete(f"{catalog['base']}/academic-years/{catalog['other_year']}")
    assert response.status_code == 204

    years = [item["id"] for item in client.get(f"{catalog['base']}/academic-years").json()]
    assert years == [catalog["year"]]
    assert client.get(f"{catalog['base']}/academic-years/{catalog['other_year']}").status_code == 404

    body = make_assignment(expected_status=422, academic_year_id=catalog["other_year"])
    assert body["details"]["field"] == "academic_year_id"


def test_catalog_registration_rejects_duplicates(client, catalog):
    duplicate_slot = client.post(
        f"{catalog['base']}/time-slots",
        json={"start_time": "07:00", "end_time": "07:50"},
    )
    assert duplicate_slot.status_code == 409
    assert duplicate_slot.json()["code"] == "DUPLICATE"

    bad_slot = client.post(f"{catalog['base']}/time-slots", json={"start_time": "09:00", "end_time": "08:00"})
    assert bad_slot.status_code == 422

    slots = client.get(f"{catalog['base']}/time-slots").json()
    assert [slot["start_time"] for slot in slots] == ["07:00", "08:00"]

    orphan_group = client.post(
        f"{catalog['base']}/groups",
        json={"name": "7A", "site_id": "missing", "grade_level_id": "missing"},
    )
    assert orphan_group.status_code == 422
    assert orphan_group.json()["details"]["field"] == "site_id"


def test_deleting_a_year_retires_its_schedule(client, catalog, make_assignment):
    kept = make_assignment()
    retired = make_assignment(academic_year_id=catalog["other_year"])
    placed = client.post(
        f"{catalog['base']}/placements",
        json={
            "assignment_id": retired["id"],
            "classroom_id": catalog["room_1"],
            "time_slot_id": catalog["slot_1"],
            "day_of_week": "mon",
            "academic_year_id": catalog["other_year"],
        },
    )
    assert placed.status_code == 201

    assert client.delete(f"{catalog['base']}/academic-years/{catalog['other_year']}").status_code == 204

    listed = [item["id"] for item in client.get(f"{catalog['base']}/assignments").json()]
    assert listed == [kept["id"]]
    assert client.get(f"{catalog['base']}/assignments/{retired['id']}").status_code == 404
    assert client.get(f"{catalog['base']}/placements/{placed.json()['id']}").status_code == 404

    teacher_view = client.get(f"{catalog['base']}/teachers/{catalog['teacher_1']}/timetable").json()
    assert [entry["assignment_id"] for entry in teacher_view] == [kept["id"]]


def test_period_delete_is_blocked_while_assignments_use_it(client, catalog, make_assignment):
    assignment = make_assignment(period_id=catalog["period"])
    url = f"{catalog['base']}/periods/{catalog['period']}"

    blocked = client.delete(url)
    assert blocked.status_code == 409
    body = blocked.json()
    assert body["code"] == "IN_USE"
    assert body["details"]["references"] == 1

    client.patch(f"{catalog['base']}/assignments/{assignment['id']}", json={"period_id": None})
    assert client.delete(url).status_code == 204

    periods = client.get(f"{catalog['base']}/academic-years/{catalog['year']}/periods").json()
    assert periods == []
    assert client.delete(url).status_code == 404
