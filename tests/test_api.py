from __future__ import annotations

import csv
import io

import pytest

from campus_attendance.main import create_app

PASSWORD = "secret123"


@pytest.fixture
def app():
    return create_app("campus_attendance.config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def school(app):
    directory = app.extensions["campus_attendance"].directory_service
    code = directory.register_institution(
        institution_code="GCC", name="Green Valley College", email="admin@gcc.edu", password=PASSWORD
    )
    directory.enroll_teacher(
        institution_code=code, employee_code="T-001", full_name="R. Mehta", email="mehta@gcc.edu", password=PASSWORD
    )
    directory.enroll_student(
        institution_code=code, roll_no="CS-001", full_name="Asha", password=PASSWORD, class_name="10", section="A"
    )
    return code


def _login(client, role, login):
    resp = client.post("/api/auth/login", json={"role": role, "login": login, "password": PASSWORD})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['data']['access_token']}"}


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.get_json()["status"] == "OK"


def test_login_rejects_bad_password(client, school):
    resp = client.post("/api/auth/login", json={"role": "teacher", "login": "mehta@gcc.edu", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_generate_requires_teacher(client, school):
    student = _login(client, "student", "CS-001")

    assert client.post("/api/qr/generate", json={"subject": "Physics", "class": "10"}).status_code == 401
    assert client.post("/api/qr/generate", json={"subject": "Physics", "class": "10"}, headers=student).status_code == 403


def test_generate_and_scan_class_token(client, school):
    teacher = _login(client, "teacher", "mehta@gcc.edu")
    student = _login(client, "student", "CS-001")

    gen = client.post("/api/qr/generate", json={"subject": "Physics", "class": "10", "section": "A"}, headers=teacher)
    assert gen.status_code == 200
    data = gen.get_json()["data"]
    assert data["qr_code"].startswith("data:image/png;base64,")
    assert data["expires_in"] == 300
    assert data["period"] == 1

    scan = client.post("/api/qr/scan", json={"token": data["token"]}, headers=student)
    assert scan.status_code == 200
    body = scan.get_json()
    assert body["success"] is True
    assert body["data"]["outcome"] == "marked"
    assert body["data"]["attendance"]["subject"] == "Physics"

    again = client.post("/api/qr/scan", json={"token": data["token"]}, headers=student)
    assert again.status_code == 200
    assert again.get_json()["data"]["outcome"] == "already_marked"

    report = client.get("/api/attendance/my-report", headers=student)
    assert report.status_code == 200
    assert report.get_json()["data"]["total"] == 1


def test_generate_validates_subject(client, school):
    teacher = _login(client, "teacher", "mehta@gcc.edu")

    resp = client.post("/api/qr/generate", json={"class": "10"}, headers=teacher)

    assert resp.status_code == 400


def test_generate_png(client, school):
    teacher = _login(client, "teacher", "mehta@gcc.edu")

    resp = client.post("/api/qr/teacher/generate?format=png", headers=teacher)

    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert resp.data.startswith(b"\x89PNG")


def test_scan_status_codes(client, school):
    teacher = _login(client, "teacher", "mehta@gcc.edu")
    student = _login(client, "student", "CS-001")

    invalid = client.post("/api/qr/scan", json={"token": "garbage"}, headers=student)
    assert invalid.status_code == 401
    assert invalid.get_json()["data"]["reason"] == "malformed"

    missing = client.post("/api/qr/scan", json={}, headers=student)
    assert missing.status_code == 400

    self_token = client.post("/api/qr/teacher/generate", headers=teacher).get_json()["data"]["token"]
    wrong_kind = client.post("/api/qr/scan", json={"token": self_token}, headers=student)
    assert wrong_kind.status_code == 400
    assert wrong_kind.get_json()["data"]["outcome"] == "wrong_token_kind"


def test_teacher_check_in_then_out(client, school):
    teacher = _login(client, "teacher", "mehta@gcc.edu")
    institution = _login(client, "institution", "admin@gcc.edu")

    token = client.post("/api/qr/teacher/generate", headers=teacher).get_json()["data"]["token"]
    first = client.post("/api/qr/teacher/scan", json={"token": token}, headers=institution)
    assert first.status_code == 200
    assert first.get_json()["data"]["action"] == "check_in"

    token = client.post("/api/qr/teacher/generate", headers=teacher).get_json()["data"]["token"]
    second = client.post("/api/qr/teacher/scan", json={"token": token}, headers=teacher)
    assert second.status_code == 200
    assert second.get_json()["data"]["action"] == "check_out"

    token = client.post("/api/qr/teacher/generate", headers=teacher).get_json()["data"]["token"]
    third = client.post("/api/qr/teacher/scan", json={"token": token}, headers=teacher)
    assert third.status_code == 400
    assert third.get_json()["data"]["outcome"] == "already_completed"

    hours = client.get("/api/attendance/my-work-hours", headers=teacher)
    assert hours.status_code == 200
    assert hours.get_json()["data"]["summary"]["days"] == 1


def test_reports_and_export(client, school):
    teacher = _login(client, "teacher", "mehta@gcc.edu")
    student = _login(client, "student", "CS-001")
    institution = _login(client, "institution", "admin@gcc.edu")

    token = client.post("/api/qr/generate", json={"subject": "Maths", "class": "10"}, headers=teacher).get_json()["data"]["token"]
    client.post("/api/qr/scan", json={"token": token}, headers=student)

    daily = client.get("/api/attendance/daily-summary", headers=teacher)
    assert daily.status_code == 200
    assert daily.get_json()["data"]["sessions"][0]["subject"] == "Maths"

    subject = client.get("/api/attendance/subject-report", headers=teacher)
    assert subject.status_code == 400

    bad_date = client.get("/api/attendance/my-attendance?start_date=03-03-2025", headers=student)
    assert bad_date.status_code == 400

    inst = client.get("/api/attendance/institution-report", headers=institution)
    assert inst.status_code == 200
    assert inst.get_json()["data"]["summary"]["students"]["total"] == 1

    export = client.get("/api/attendance/export", headers=institution)
    assert export.status_code == 200
    assert export.mimetype == "text/csv"
    rows = list(csv.DictReader(io.StringIO(export.data.decode("utf-8-sig"))))
    assert len(rows) == 1
    assert rows[0]["subject"] == "Maths"

    assert client.get("/api/attendance/export", headers=teacher).status_code == 403


def test_student_login_with_institution_code_and_qr_token_field(client, app, school):
    directory = app.extensions["campus_attendance"].directory_service
    other = directory.register_institution(
        institution_code="OTH", name="Other School", email="admin@oth.edu", password=PASSWORD
    )
    directory.enroll_student(institution_code=other, roll_no="CS-001", full_name="Bravo", password="bravo-pass")

    resp = client.post(
        "/api/auth/login",
        json={"role": "student", "rollNo": "CS-001", "password": "bravo-pass", "institutionCode": "OTH"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["institution_code"] == "OTH"

    teacher = _login(client, "teacher", "mehta@gcc.edu")
    student = _login(client, "student", "CS-001")
    token = client.post("/api/qr/generate", json={"subject": "Physics", "class": "10"}, headers=teacher).get_json()["data"]["token"]

    scan = client.post("/api/qr/scan", json={"qrToken": token}, headers=student)
    assert scan.status_code == 200
    assert scan.get_json()["data"]["outcome"] == "marked"
