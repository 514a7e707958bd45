from datetime import timedelta

from tutorhub.database.database import utcnow
from conftest import session_payload, tutor_payload


def days_from_now(days):
    return (utcnow() + timedelta(days=days)).isoformat()


def test_book_session_for_caller(student_client, tutor):
    response = student_client.post("/api/sessions", json=session_payload(tutor["id"], studentId="someone-else"))

    assert response.status_code == 200
    session = response.json()
    assert session["studentId"] == student_client.user["id"]
    assert session["tutorId"] == tutor["id"]
    assert session["status"] == "scheduled"


def test_book_session_with_unknown_tutor(student_client):
    response = student_client.post("/api/sessions", json=session_payload("no-such-tutor"))
    assert response.status_code == 400
    assert response.json() == {"message": "Failed to create session"}


def test_book_session_validation(student_client, tutor):
    response = student_client.post("/api/sessions", json=session_payload(tutor["id"], status="postponed"))
    assert response.status_code == 400

    response = student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate="next tuesday"))
    assert response.status_code == 400
    assert "scheduledDate" in response.json()["message"] or "scheduled_date" in response.json()["message"]


def test_offset_dates_are_stored_as_utc(student_client, tutor):
    response = student_client.post(
        "/api/sessions",
        json=session_payload(tutor["id"], scheduledDate="2030-01-15T12:00:00+02:00"),
    )
    assert response.status_code == 200
    assert response.json()["scheduledDate"].startswith("2030-01-15T10:00:00")


def test_list_sessions_with_relations(student_client, tutor):
    student_client.post("/api/sessions", json=session_payload(tutor["id"]))

    sessions = student_client.get("/api/sessions").json()
    assert len(sessions) == 1
    assert sessions[0]["tutor"]["name"] == tutor["name"]
    assert sessions[0]["student"]["email"] == student_client.user["email"]


def test_students_only_see_their_own_sessions(student_client, other_student_client, admin_client, tutor):
    mine = student_client.post("/api/sessions", json=session_payload(tutor["id"])).json()
    theirs = other_student_client.post("/api/sessions", json=session_payload(tutor["id"])).json()

    assert [s["id"] for s in student_client.get("/api/sessions").json()] == [mine["id"]]
    assert [s["id"] for s in other_student_client.get("/api/sessions").json()] == [theirs["id"]]
    assert {s["id"] for s in admin_client.get("/api/sessions").json()} == {mine["id"], theirs["id"]}


def test_get_session_ownership(student_client, other_student_client, admin_client, tutor):
    session = student_client.post("/api/sessions", json=session_payload(tutor["id"])).json()

    assert student_client.get(f"/api/sessions/{session['id']}").status_code == 200
    assert admin_client.get(f"/api/sessions/{session['id']}").status_code == 200
    assert other_student_client.get(f"/api/sessions/{session['id']}").status_code == 403


def test_get_missing_session(student_client):
    response = student_client.get("/api/sessions/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"message": "Session not found"}


def test_owner_can_only_change_status_and_notes(student_client, admin_client, tutor):
    other_tutor = admin_client.post("/api/tutors", json=tutor_payload(email="grace@example.com")).json()
    session = student_client.post("/api/sessions", json=session_payload(tutor["id"])).json()

    response = student_client.put(f"/api/sessions/{session['id']}", json={
        "status": "cancelled",
        "notes": "Cannot make it",
        "subject": "Something else",
        "tutorId": other_tutor["id"],
        "studentId": "someone-else",
    })

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "cancelled"
    assert updated["notes"] == "Cannot make it"
    assert updated["subject"] == session["subject"]
    assert updated["tutorId"] == tutor["id"]
    assert updated["studentId"] == student_client.user["id"]
    assert updated["updatedAt"] > session["updatedAt"]


def test_admin_can_change_any_field(student_client, admin_client, tutor):
    other_tutor = admin_client.post("/api/tutors", json=tutor_payload(email="grace@example.com")).json()
    session = student_client.post("/api/sessions", json=session_payload(tutor["id"])).json()

    response = admin_client.put(f"/api/sessions/{session['id']}", json={"subject": "Linear Algebra", "tutorId": other_tutor["id"]})

    assert response.status_code == 200
    assert response.json()["subject"] == "Linear Algebra"
    assert response.json()["tutorId"] == other_tutor["id"]


def test_update_session_of_another_student(student_client, other_student_client, tutor):
    session = student_client.post("/api/sessions", json=session_payload(tutor["id"])).json()

    response = other_student_client.put(f"/api/sessions/{session['id']}", json={"status": "cancelled"})
    assert response.status_code == 403
    assert student_client.get(f"/api/sessions/{session['id']}").json()["status"] == "scheduled"


def test_update_missing_session(student_client):
    response = student_client.put("/api/sessions/does-not-exist", json={"status": "cancelled"})
    assert response.status_code == 404


def test_update_session_with_invalid_status(student_client, tutor):
    session = student_client.post("/api/sessions", json=session_payload(tutor["id"])).json()
    response = student_client.put(f"/api/sessions/{session['id']}", json={"status": "postponed"})
    assert response.status_code == 400
    assert response.json()["message"].startswith("status")


def test_upcoming_sessions_are_ordered_soonest_first(student_client, tutor):
    later = student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(5))).json()
    sooner = student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(1))).json()
    student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(-1)))
    student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(3), status="cancelled"))

    response = student_client.get("/api/sessions/upcoming")
    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [sooner["id"], later["id"]]
    assert response.json()[0]["tutor"]["id"] == tutor["id"]


def test_session_stats(student_client, other_student_client, tutor):
    student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(-3), status="completed"))
    student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(2)))
    student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(4), status="cancelled"))
    other_student_client.post("/api/sessions", json=session_payload(tutor["id"]))

    response = student_client.get("/api/sessions/stats")
    assert response.status_code == 200
    assert response.json() == {"totalSessions": 3, "completedSessions": 1, "upcomingSessions": 1}


def test_only_admins_delete_sessions(student_client, admin_client, tutor):
    session = student_client.post("/api/sessions", json=session_payload(tutor["id"])).json()

    assert student_client.delete(f"/api/sessions/{session['id']}").status_code == 403

    response = admin_client.delete(f"/api/sessions/{session['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Session deleted successfully"}
    assert admin_client.get(f"/api/sessions/{session['id']}").status_code == 404


def test_session_stats_leave_out_past_scheduled_sessions(student_client, tutor):
    student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(-3), status="completed"))
    student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(2)))
    student_client.post("/api/sessions", json=session_payload(tutor["id"], scheduledDate=days_from_now(-1)))

    response = student_client.get("/api/sessions/stats")
    assert response.status_code == 200
    assert response.json() == {"totalSessions": 3, "completedSessions": 1, "upcomingSessions": 1}
