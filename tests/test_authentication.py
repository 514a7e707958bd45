from tutorhub.database.database import AuthSession, User, UserRole
from conftest import ADMIN, STUDENT, login


def test_login_creates_user_on_first_login(client, db_session):
    response = client.post("/api/auth/login", json=STUDENT)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["user"]["email"] == STUDENT["email"]
    assert body["user"]["firstName"] == "Demo"
    assert body["user"]["role"] == "student"
    assert "password" not in body["user"]

    user = db_session.query(User).filter(User.email == STUDENT["email"]).first()
    assert user is not None
    assert user.password and user.password != STUDENT["password"]


def test_login_reuses_existing_user(client, db_session):
    first = login(client, ADMIN)
    second = login(client, ADMIN)

    assert first["id"] == second["id"]
    assert second["role"] == "admin"
    assert db_session.query(User).count() == 1


def test_login_email_is_case_insensitive(client):
    response = client.post("/api/auth/login", json={"email": "Student@TutorHub.com", "password": STUDENT["password"]})
    assert response.status_code == 200


def test_login_requires_email_and_password(client):
    response = client.post("/api/auth/login", json={"email": STUDENT["email"]})
    assert response.status_code == 400
    assert response.json() == {"message": "Email and password are required"}

    response = client.post("/api/auth/login", json={"email": "", "password": ""})
    assert response.status_code == 400


def test_login_does_not_reveal_which_accounts_exist(client):
    unknown = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "password123"})
    wrong_password = client.post("/api/auth/login", json={"email": STUDENT["email"], "password": "wrong"})

    assert unknown.status_code == wrong_password.status_code == 401
    assert unknown.json() == wrong_password.json() == {"message": "Invalid email or password"}


def test_current_user_is_null_when_anonymous(client):
    response = client.get("/api/auth/user")
    assert response.status_code == 200
    assert response.json() is None


def test_current_user_after_login(student_client):
    response = student_client.get("/api/auth/user")
    assert response.status_code == 200
    assert response.json()["id"] == student_client.user["id"]


def test_logout_destroys_server_side_session(student_client, db_session):
    assert db_session.query(AuthSession).count() == 1

    response = student_client.post("/api/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    assert db_session.query(AuthSession).count() == 0
    assert student_client.get("/api/auth/user").json() is None
    assert student_client.get("/api/tutors").status_code == 401


def test_logout_without_session_succeeds(client):
    response = client.post("/api/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"success": True}


def test_relogin_replaces_previous_session(client, db_session):
    login(client, STUDENT)
    login(client, STUDENT)
    assert db_session.query(AuthSession).count() == 1


def test_protected_routes_reject_anonymous_callers(client):
    for path in ("/api/tutors", "/api/sessions", "/api/materials", "/api/videos", "/api/feedback", "/api/admin/stats"):
        response = client.get(path)
        assert response.status_code == 401, path
        assert response.json() == {"message": "Unauthorized"}


def test_session_of_deleted_user_is_not_admin(admin_client, db_session):
    db_session.query(User).filter(User.id == admin_client.user["id"]).delete()
    db_session.commit()

    response = admin_client.get("/api/admin/stats")
    assert response.status_code == 403


def test_role_is_read_on_every_request(student_client, db_session):
    assert student_client.get("/api/admin/stats").status_code == 403

    user = db_session.get(User, student_client.user["id"])
    user.role = UserRole.ADMIN
    db_session.commit()

    assert student_client.get("/api/admin/stats").status_code == 200


def test_login_is_rate_limited(client, monkeypatch):
    from tutorhub.routers.authentication import limiter

    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    try:
        for _ in range(10):
            response = client.post("/api/auth/login", json={"email": STUDENT["email"], "password": "wrong"})
            assert response.status_code == 401

        response = client.post("/api/auth/login", json=STUDENT)
        assert response.status_code == 429
        assert response.json() == {"message": "Too many requests"}
    finally:
        limiter.reset()


def test_login_without_body(client):
    response = client.post("/api/auth/login")
    assert response.status_code == 400
    assert response.json() == {"message": "Email and password are required"}
