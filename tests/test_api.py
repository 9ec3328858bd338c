"""
API tests: access levels, validation errors and the end-to-end flows of
the dashboard.
"""
from fastapi.testclient import TestClient

from database import Report, SchoolClass, Student


def import_students(client, class_id, names):
    response = client.post("/api/students/bulk", json={"classId": class_id, "names": names})
    assert response.status_code == 201, response.text
    return response.json()


def submit_report(client, student_id, **overrides):
    body = {"studentId": student_id, "content": "x", "reporterType": "Professor"}
    body.update(overrides)
    return client.post("/api/reports", json=body)


class TestAccessLevels:
    """Tests for the 401/403 policy."""

    def test_anonymous_requests_rejected(self, client):
        for path in ["/api/classes", "/api/students", "/api/reports", "/api/dashboard", "/api/user"]:
            assert client.get(path).status_code == 401, path

    def test_anonymous_admin_endpoint_is_401(self, client):
        assert client.get("/api/users").status_code == 401

    def test_non_admin_cannot_create_class(self, teacher_client, db):
        response = teacher_client.post("/api/classes", json={"name": "9Z"})

        assert response.status_code == 403
        assert db.query(SchoolClass).count() == 0

    def test_non_admin_cannot_bulk_import_or_list_users(self, teacher_client, classes):
        response = teacher_client.post("/api/students/bulk", json={"classId": classes["6A"], "names": ["Ana"]})
        assert response.status_code == 403
        assert teacher_client.get("/api/users").status_code == 403
        assert teacher_client.post("/api/register", json={"username": "novo"}).status_code == 403

    def test_public_endpoints(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.post("/api/logout").status_code == 200


class TestSession:
    """Tests for login, logout and the current user."""

    def test_login_and_current_user(self, teacher_client, users):
        response = teacher_client.get("/api/user")

        assert response.status_code == 200
        assert response.json() == {"id": users["teacher"], "username": "professor", "isAdmin": False}

    def test_wrong_password(self, client, users):
        response = client.post("/api/login", json={"username": "professor", "password": "errada"})
        assert response.status_code == 401

    def test_logout_ends_session(self, teacher_client):
        assert teacher_client.post("/api/logout").status_code == 200
        assert teacher_client.get("/api/user").status_code == 401

    def test_logout_revokes_copied_cookie(self, app, teacher_client, test_settings):
        cookie = teacher_client.cookies.get(test_settings.session_cookie)
        replay = TestClient(app, cookies={test_settings.session_cookie: cookie})
        assert replay.get("/api/user").status_code == 200

        assert teacher_client.post("/api/logout").status_code == 200

        assert replay.get("/api/user").status_code == 401

    def test_register_and_login_new_user(self, admin_client, app):
        response = admin_client.post("/api/register", json={"username": "vice01", "isAdmin": False})
        assert response.status_code == 201
        assert response.json()["username"] == "vice01"

        new_client = TestClient(app)
        login = new_client.post("/api/login", json={"username": "vice01", "password": "mudar123"})
        assert login.status_code == 200

    def test_register_duplicate(self, admin_client):
        response = admin_client.post("/api/register", json={"username": "professor", "password": "outra"})
        assert response.status_code == 400

    def test_users_listing_hides_passwords(self, admin_client):
        response = admin_client.get("/api/users")

        assert response.status_code == 200
        users = response.json()
        assert [u["username"] for u in users] == ["diretora", "professor"]
        for user in users:
            assert set(user) == {"id", "username", "isAdmin"}


class TestClasses:
    """Tests for class endpoints."""

    def test_classes_sorted(self, admin_client):
        for name in ["7A", "6B", "6A"]:
            assert admin_client.post("/api/classes", json={"name": name}).status_code == 201

        response = admin_client.get("/api/classes")

        assert [c["name"] for c in response.json()] == ["6A", "6B", "7A"]

    def test_duplicate_class(self, admin_client, classes):
        response = admin_client.post("/api/classes", json={"name": "6A"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Class with name '6A' already exists"

    def test_missing_name_is_field_error(self, admin_client):
        response = admin_client.post("/api/classes", json={})

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert errors[0]["loc"][-1] == "name"

    def test_class_detail(self, teacher_client, classes):
        response = teacher_client.get(f"/api/classes/{classes['6A']}")

        assert response.status_code == 200
        assert response.json() == {"id": classes["6A"], "name": "6A", "students": []}

    def test_class_not_found(self, teacher_client):
        response = teacher_client.get("/api/classes/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Class with id 999 not found"

    def test_invalid_class_id(self, teacher_client):
        assert teacher_client.get("/api/classes/abc").status_code == 400


class TestStudents:
    """Tests for student endpoints."""

    def test_create_student_in_missing_class(self, teacher_client, db):
        response = teacher_client.post("/api/students", json={"name": "Ana", "classId": 999})

        assert response.status_code == 400
        assert db.query(Student).count() == 0

    def test_create_student(self, teacher_client, classes):
        response = teacher_client.post("/api/students", json={"name": "Ana", "classId": classes["6A"]})

        assert response.status_code == 201
        assert response.json()["classId"] == classes["6A"]

    def test_bulk_import_trims_and_drops_blank_names(self, admin_client, classes):
        students = import_students(admin_client, classes["6A"], ["  Ana ", "", "   ", "Beto"])
        assert [s["name"] for s in students] == ["Ana", "Beto"]

    def test_bulk_import_without_names(self, admin_client, classes):
        response = admin_client.post("/api/students/bulk", json={"classId": classes["6A"], "names": [" "]})
        assert response.status_code == 400

    def test_bulk_import_into_missing_class(self, admin_client, db):
        response = admin_client.post("/api/students/bulk", json={"classId": 999, "names": ["Ana"]})

        assert response.status_code == 400
        assert response.json()["field"] == "classId"
        assert db.query(Student).count() == 0

    def test_bulk_import_rejects_overlong_name(self, admin_client, classes, db):
        response = admin_client.post(
            "/api/students/bulk", json={"classId": classes["6A"], "names": ["Ana", "A" * 300]}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["loc"][:2] == ["body", "names"]
        assert db.query(Student).count() == 0

    def test_update_student(self, admin_client, classes):
        ana = import_students(admin_client, classes["6A"], ["Ana"])[0]

        response = admin_client.patch(
            f"/api/students/{ana['id']}", json={"name": "Ana Clara", "classId": classes["6B"]}
        )

        assert response.status_code == 200
        assert response.json() == {"id": ana["id"], "name": "Ana Clara", "classId": classes["6B"]}

    def test_update_missing_student(self, teacher_client, classes):
        response = teacher_client.patch("/api/students/999", json={"name": "X", "classId": classes["6A"]})
        assert response.status_code == 404

    def test_update_to_missing_class(self, admin_client, classes):
        ana = import_students(admin_client, classes["6A"], ["Ana"])[0]

        response = admin_client.put(f"/api/students/{ana['id']}", json={"name": "Ana", "classId": 999})

        assert response.status_code == 400

    def test_delete_student_removes_reports(self, admin_client, classes, db):
        ana = import_students(admin_client, classes["6A"], ["Ana"])[0]
        for _ in range(2):
            assert submit_report(admin_client, ana["id"]).status_code == 201

        response = admin_client.delete(f"/api/students/{ana['id']}")

        assert response.status_code == 200
        db.expire_all()
        assert db.query(Report).filter(Report.student_id == ana["id"]).count() == 0
        assert admin_client.delete(f"/api/students/{ana['id']}").status_code == 404


class TestReports:
    """Tests for report endpoints."""

    def test_report_author_is_session_user(self, teacher_client, admin_client, classes, users):
        ana = import_students(admin_client, classes["6A"], ["Ana"])[0]

        response = submit_report(
            teacher_client, ana["id"], createdBy=users["admin"], date="2026-03-10T09:30:00", reporterType="Líder"
        )

        assert response.status_code == 201
        report = response.json()
        assert report["createdBy"] == users["teacher"]
        assert report["reporterType"] == "Líder"
        assert report["date"].startswith("2026-03-10T09:30")

    def test_report_for_missing_student(self, teacher_client, db):
        assert submit_report(teacher_client, 999).status_code == 400
        assert db.query(Report).count() == 0

    def test_invalid_reporter_type(self, teacher_client, admin_client, classes):
        ana = import_students(admin_client, classes["6A"], ["Ana"])[0]

        response = submit_report(teacher_client, ana["id"], reporterType="Diretor")

        assert response.status_code == 400
        assert response.json()["errors"][0]["loc"][-1] == "reporterType"

    def test_filter_reports(self, admin_client, classes):
        ana, beto = import_students(admin_client, classes["6A"], ["Ana", "Beto"])
        caio = import_students(admin_client, classes["6B"], ["Caio"])[0]
        for student in (ana, beto, caio):
            submit_report(admin_client, student["id"])

        by_student = admin_client.get("/api/reports", params={"studentId": ana["id"]}).json()
        by_class = admin_client.get("/api/reports", params={"classId": classes["6A"]}).json()
        everything = admin_client.get("/api/reports").json()

        assert [r["studentId"] for r in by_student] == [ana["id"]]
        assert sorted(r["studentId"] for r in by_class) == sorted([ana["id"], beto["id"]])
        assert len(everything) == 3


class TestDashboardScenarios:
    """End-to-end flows of the dashboard."""

    def test_bulk_import_then_dashboard(self, admin_client, classes):
        import_students(admin_client, classes["6A"], ["Ana", "Beto"])

        dashboard = admin_client.get("/api/dashboard").json()

        assert [c["name"] for c in dashboard] == ["6A", "6B"]
        six_a, six_b = dashboard
        assert [s["name"] for s in six_a["students"]] == ["Ana", "Beto"]
        assert all(s["reportCount"] == 0 for s in six_a["students"])
        assert six_b["students"] == []

    def test_report_shows_in_student_counts(self, admin_client, teacher_client, classes):
        ana = import_students(admin_client, classes["6A"], ["Ana", "Beto"])[0]

        assert submit_report(teacher_client, ana["id"]).status_code == 201

        students = teacher_client.get("/api/students", params={"classId": classes["6A"]}).json()
        counts = {s["name"]: s["reportCount"] for s in students}
        assert counts == {"Ana": 1, "Beto": 0}

        dashboard = teacher_client.get("/api/dashboard").json()
        ana_view = dashboard[0]["students"][0]
        assert ana_view["reportCount"] == len(ana_view["reports"]) == 1


class TestSetup:
    """Tests for the setup diagnostics endpoint."""

    def test_setup_is_idempotent(self, client):
        first = client.get("/api/setup")
        second = client.get("/api/setup")

        assert first.status_code == 200
        assert first.json()["createdClasses"] == ["6A", "6B", "7A"]
        assert first.json()["adminCreated"] is True
        assert second.json()["createdClasses"] == []
        assert second.json()["classes"] == 3
        assert second.json()["users"] == 1

    def test_setup_admin_can_log_in(self, client):
        client.get("/api/setup")
        response = client.post("/api/login", json={"username": "bootstrap-admin", "password": "bootstrap-pass"})

        assert response.status_code == 200
        assert response.json()["isAdmin"] is True
