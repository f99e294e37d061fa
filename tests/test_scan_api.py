from conftest import add_subject, local


def test_scan_requires_device_token(client, db):
    add_subject(db, "EMP001")

    response = client.post("/scan", json={"subjectId": "EMP001"})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_scan_rejects_unknown_token(client, db, device_token):
    add_subject(db, "EMP001")

    response = client.post("/scan", json={"subjectId": "EMP001"}, headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401


def test_scan_rejects_token_without_bearer_prefix(client, db, device_token):
    add_subject(db, "EMP001")

    response = client.post("/scan", json={"subjectId": "EMP001"}, headers={"Authorization": device_token})

    assert response.status_code == 401


def test_scan_without_subject_id_is_bad_request(client, auth_headers):
    response = client.post("/scan", json={}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "subjectId required"}


def test_scan_with_blank_subject_id_is_bad_request(client, auth_headers):
    response = client.post("/scan", json={"subjectId": "   "}, headers=auth_headers)

    assert response.status_code == 400


def test_scan_unknown_subject_is_not_found(client, auth_headers, frozen_now):
    response = client.post("/scan", json={"subjectId": "GHOST"}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Subject not found"}


def test_scan_before_cutoff_returns_created(client, db, auth_headers, frozen_now):
    add_subject(db, "EMP001")
    frozen_now(local(2026, 3, 2, 9, 30))

    response = client.post("/scan", json={"subjectId": "EMP001"}, headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "ordered"
    assert body["message"] == "Order recorded"
    assert isinstance(body["recordId"], int)


def test_scan_after_cutoff_returns_ok(client, db, auth_headers, frozen_now):
    add_subject(db, "EMP001")
    frozen_now(local(2026, 3, 2, 9, 30))
    ordered = client.post("/scan", json={"subjectId": "EMP001"}, headers=auth_headers).json()

    frozen_now(local(2026, 3, 2, 12, 15))
    response = client.post("/scan", json={"subjectId": "EMP001"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "taken"
    assert response.json()["recordId"] == ordered["recordId"]


def test_scan_accepts_legacy_employee_id(client, db, auth_headers, frozen_now):
    add_subject(db, "EMP001")

    response = client.post("/scan", json={"employeeId": "EMP001"}, headers=auth_headers)

    assert response.status_code == 201


def test_scan_accepts_numeric_subject_id(client, db, auth_headers, frozen_now):
    add_subject(db, "12345")

    response = client.post("/scan", json={"subjectId": 12345}, headers=auth_headers)

    assert response.status_code == 201


def test_scan_records_forwarded_ip(admin_client, db, auth_headers, frozen_now):
    add_subject(db, "EMP001")
    headers = {**auth_headers, "X-Forwarded-For": "192.168.1.20, 10.0.0.1"}

    admin_client.post("/scan", json={"subjectId": "EMP001"}, headers=headers)

    logs = admin_client.get("/scan").json()["logs"]
    assert logs[0]["deviceIp"] == "192.168.1.20"


def test_attendance_scan_returns_log_id(attendance_client, db, auth_headers, frozen_now):
    add_subject(db, "STU042", kind="student")

    first = attendance_client.post("/scan", json={"studentId": "STU042"}, headers=auth_headers)
    second = attendance_client.post("/scan", json={"subjectId": "STU042"}, headers=auth_headers)

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["status"] == "present"
    assert first.json()["logId"] != second.json()["logId"]


def test_list_scans_requires_admin(client):
    response = client.get("/scan")

    assert response.status_code == 401


def test_list_scans_returns_canteen_records(admin_client, db, auth_headers, frozen_now):
    add_subject(db, "EMP001", name="Alice")
    add_subject(db, "EMP002", name="Bob")
    admin_client.post("/scan", json={"subjectId": "EMP001"}, headers=auth_headers)
    admin_client.post("/scan", json={"subjectId": "EMP002"}, headers=auth_headers)

    response = admin_client.get("/scan")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert body["page"] == 1
    assert body["limit"] == 50
    record = body["logs"][0]
    assert set(record) >= {"subjectId", "subjectName", "date", "orderedAt", "takenAt", "status"}
    assert record["date"] == "2026-03-02"


def test_list_scans_clamps_pagination(admin_client):
    body = admin_client.get("/scan", params={"limit": 500, "page": 0}).json()

    assert body["limit"] == 100
    assert body["page"] == 1


def test_list_scans_filters_by_date_and_subject(admin_client, db, auth_headers, frozen_now):
    add_subject(db, "EMP001")
    add_subject(db, "EMP002", name="Bob")
    admin_client.post("/scan", json={"subjectId": "EMP001"}, headers=auth_headers)
    admin_client.post("/scan", json={"subjectId": "EMP002"}, headers=auth_headers)
    frozen_now(local(2026, 3, 3, 9, 0))
    admin_client.post("/scan", json={"subjectId": "EMP001"}, headers=auth_headers)

    by_date = admin_client.get("/scan", params={"date": "2026-03-02"}).json()
    by_subject = admin_client.get("/scan", params={"subjectId": "EMP001"}).json()

    assert by_date["total"] == 2
    assert by_subject["total"] == 2
    assert by_subject["logs"][0]["date"] == "2026-03-03"


def test_list_attendance_scans_by_local_day(attendance_admin_client, db, auth_headers, frozen_now):
    add_subject(db, "STU042", kind="student")
    # 00:30 local is still the previous day in UTC
    frozen_now(local(2026, 3, 2, 0, 30))
    attendance_admin_client.post("/scan", json={"subjectId": "STU042"}, headers=auth_headers)
    frozen_now(local(2026, 3, 3, 8, 0))
    attendance_admin_client.post("/scan", json={"subjectId": "STU042"}, headers=auth_headers)

    body = attendance_admin_client.get("/scan", params={"date": "2026-03-02"}).json()

    assert body["total"] == 1
    assert body["logs"][0]["status"] == "present"
    assert "timestamp" in body["logs"][0]


def test_list_attendance_scans_with_invalid_date_is_empty(attendance_admin_client, db, auth_headers, frozen_now):
    add_subject(db, "STU042", kind="student")
    attendance_admin_client.post("/scan", json={"subjectId": "STU042"}, headers=auth_headers)

    body = attendance_admin_client.get("/scan", params={"date": "not-a-date"}).json()

    assert body["total"] == 0
    assert body["logs"] == []


def test_malformed_body_without_token_is_unauthorized(client):
    response = client.post("/scan", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_malformed_body_with_token_is_bad_request(client, auth_headers):
    headers = {**auth_headers, "Content-Type": "application/json"}

    response = client.post("/scan", content=b"{not json", headers=headers)

    assert response.status_code == 400
    assert response.json() == {"error": "subjectId required"}


def test_scan_without_body_is_bad_request(client, auth_headers):
    response = client.post("/scan", headers=auth_headers)

    assert response.status_code == 400


def test_deleting_subject_keeps_attendance_history(attendance_admin_client, auth_headers, frozen_now):
    subject = attendance_admin_client.post(
        "/subjects",
        json={"externalId": "STU042", "name": "Bob", "kind": "student", "groupLabel": "Physics"}
    ).json()["subject"]
    attendance_admin_client.post("/scan", json={"subjectId": "STU042"}, headers=auth_headers)

    response = attendance_admin_client.delete(f"/subjects/{subject['id']}")

    assert response.status_code == 200
    logs = attendance_admin_client.get("/scan", params={"subjectId": "STU042"}).json()["logs"]
    assert len(logs) == 1
    assert logs[0]["subjectName"] == "Bob"
    assert logs[0]["groupLabel"] == "Physics"
    assert attendance_admin_client.post("/scan", json={"subjectId": "STU042"}, headers=auth_headers).status_code == 404
