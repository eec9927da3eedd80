from sqlalchemy import select

from kampus.models.activity_log import ActivityLog


def test_second_assignment_for_busy_teacher_is_rejected(client, catalog, make_assignment):
    first = make_assignment()
    assert first["status"] == "active"
    assert first["day_of_week"] == "mon"

    response = client.post(
        f"{catalog['base']}/assignments",
        json={
            "teacher_id": catalog["teacher_1"],
            "subject_id": catalog["subject_2"],
            "group_id": catalog["group_2"],
            "time_slot_id": catalog["slot_1"],
            "day_of_week": "mon",
            "academic_year_id": catalog["year"],
        },
    )
    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "TEACHER_CONFLICT"
    assert body["details"] == {
        "teacher_id": catalog["teacher_1"],
        "day_of_week": "mon",
        "time_slot_id": catalog["slot_1"],
        "academic_year_id": catalog["year"],
    }


def test_second_assignment_for_busy_group_is_rejected(catalog, make_assignment):
    make_assignment()
    body = make_assignment(expected_status=409, teacher_id=catalog["teacher_2"], subject_id=catalog["subject_2"])
    assert body["code"] == "GROUP_CONFLICT"
    assert body["details"]["group_id"] == catalog["group_1"]


def test_same_teacher_is_free_on_other_day_slot_or_year(catalog, make_assignment):
    make_assignment()
    make_assignment(group_id=catalog["group_2"], day_of_week="tue")
    make_assignment(group_id=catalog["group_2"], time_slot_id=catalog["slot_2"])
    make_assignment(academic_year_id=catalog["other_year"])


def test_deactivated_assignment_frees_its_slot(client, catalog, make_assignment):
    first = make_assignment()

    response = client.post(f"{catalog['base']}/assignments/{first['id']}/deactivate")
    assert response.status_code == 200
    assert response.json()["status"] == "inactive"

    again = client.post(f"{catalog['base']}/assignments/{first['id']}/deactivate")
    assert again.status_code == 200
    assert again.json()["status"] == "inactive"

    replacement = make_assignment()
    assert replacement["id"] != first["id"]


def test_reactivation_is_revalidated(client, catalog, make_assignment):
    first = make_assignment()
    client.post(f"{catalog['base']}/assignments/{first['id']}/deactivate")
    make_assignment(subject_id=catalog["subject_2"])

    response = client.patch(f"{catalog['base']}/assignments/{first['id']}", json={"status": "active"})
    assert response.status_code == 409
    assert response.json()["code"] == "TEACHER_CONFLICT"

    stored = client.get(f"{catalog['base']}/assignments/{first['id']}").json()
    assert stored["status"] == "inactive"


def test_update_keeps_unspecified_fields_and_ignores_itself(client, catalog, make_assignment):
    first = make_assignment(period_id=catalog["period"])

    response = client.patch(
        f"{catalog['base']}/assignments/{first['id']}",
        json={"subject_id": catalog["subject_2"]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["subject_id"] == catalog["subject_2"]
    assert body["teacher_id"] == catalog["teacher_1"]
    assert body["time_slot_id"] == catalog["slot_1"]
    assert body["period_id"] == catalog["period"]

    cleared = client.patch(f"{catalog['base']}/assignments/{first['id']}", json={"period_id": None})
    assert cleared.status_code == 200
    assert cleared.json()["period_id"] is None


def test_update_into_occupied_slot_is_rejected(client, catalog, make_assignment):
    make_assignment()
    second = make_assignment(teacher_id=catalog["teacher_2"], group_id=catalog["group_2"], day_of_week="tue")

    response = client.patch(
        f"{catalog['base']}/assignments/{second['id']}",
        json={"teacher_id": catalog["teacher_1"], "day_of_week": "mon"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "TEACHER_CONFLICT"

    unchanged = client.get(f"{catalog['base']}/assignments/{second['id']}").json()
    assert unchanged["teacher_id"] == catalog["teacher_2"]
    assert unchanged["day_of_week"] == "tue"


def test_period_must_belong_to_assignment_year(catalog, make_assignment):
    body = make_assignment(expected_status=409, period_id=catalog["other_period"])
    assert body["code"] == "PERIOD_SCOPE"
    assert body["details"] == {"period_id": catalog["other_period"], "academic_year_id": catalog["year"]}

    assigned = make_assignment(period_id=catalog["period"])
    assert assigned["period_id"] == catalog["period"]


def test_unknown_references_are_validation_errors(client, catalog, make_assignment):
    body = make_assignment(expected_status=422, teacher_id="missing-teacher")
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"] == {"field": "teacher_id", "id": "missing-teacher"}

    body = make_assignment(expected_status=422, period_id="missing-period")
    assert body["details"]["field"] == "period_id"

    malformed = client.post(f"{catalog['base']}/assignments", json={"teacher_id": catalog["teacher_1"]})
    assert malformed.status_code == 422


def test_catalog_of_another_institution_is_not_visible(client, catalog, make_assignment):
    other = client.post("/api/institutions/", json={"name": "Escuela Norte"}).json()
    foreign_teacher = client.post(f"/api/institutions/{other['id']}/teachers", json={"name": "Eva"}).json()

    body = make_assignment(expected_status=422, teacher_id=foreign_teacher["id"])
    assert body["details"]["field"] == "teacher_id"

    missing = client.get("/api/institutions/does-not-exist/assignments")
    assert missing.status_code == 404
    assert missing.json()["code"] == "NOT_FOUND"


def test_inactive_time_slot_cannot_be_scheduled(client, catalog, make_assignment):
    closed = client.post(
        f"{catalog['base']}/time-slots",
        json={"start_time": "12:00", "end_time": "12:50", "status": "inactive"},
    ).json()

    body = make_assignment(expected_status=422, time_slot_id=closed["id"])
    assert body["details"]["field"] == "time_slot_id"


def test_deleted_assignment_disappears(client, catalog, make_assignment):
    first = make_assignment()

    response = client.delete(f"{catalog['base']}/assignments/{first['id']}")
    assert response.status_code == 204

    assert client.get(f"{catalog['base']}/assignments/{first['id']}").status_code == 404
    assert client.get(f"{catalog['base']}/assignments").json() == []
    make_assignment()


def test_list_filters_and_timetables_are_ordered(client, catalog, make_assignment):
    tuesday = make_assignment(day_of_week="tue")
    late_monday = make_assignment(time_slot_id=catalog["slot_2"])
    early_monday = make_assignment()
    other = make_assignment(teacher_id=catalog["teacher_2"], group_id=catalog["group_2"], day_of_week="fri")

    listed = client.get(f"{catalog['base']}/assignments", params={"teacher_id": catalog["teacher_1"]}).json()
    assert [item["id"] for item in listed] == [early_monday["id"], late_monday["id"], tuesday["id"]]

    by_day = client.get(f"{catalog['base']}/assignments", params={"day_of_week": "fri"}).json()
    assert [item["id"] for item in by_day] == [other["id"]]

    teacher_view = client.get(f"{catalog['base']}/teachers/{catalog['teacher_1']}/timetable").json()
    assert [entry["assignment_id"] for entry in teacher_view] == [
        early_monday["id"],
        late_monday["id"],
        tuesday["id"],
    ]
    assert teacher_view[0]["start_time"] == "07:00"
    assert teacher_view[0]["classroom_ids"] == []

    client.post(f"{catalog['base']}/assignments/{tuesday['id']}/deactivate")
    group_view = client.get(
        f"{catalog['base']}/groups/{catalog['group_1']}/timetable",
        params={"academic_year_id": catalog["year"]},
    ).json()
    assert [entry["assignment_id"] for entry in group_view] == [early_monday["id"], late_monday["id"]]


def test_writes_are_audited_with_actor(client, catalog, db_session):
    response = client.post(
        f"{catalog['base']}/assignments",
        headers={"X-Actor-Id": "user-42"},
        json={
            "teacher_id": catalog["teacher_1"],
            "subject_id": catalog["subject_1"],
            "group_id": catalog["group_1"],
            "time_slot_id": catalog["slot_1"],
            "day_of_week": "thu",
            "academic_year_id": catalog["year"],
        },
    )
    assert response.status_code == 201

    entry = db_session.execute(
        select(ActivityLog).where(ActivityLog.action == "assignment.created")
    ).scalar_one()
    assert entry.actor_id == "user-42"
    assert entry.entity_id == response.json()["id"]
    assert entry.institution_id == catalog["institution_id"]
