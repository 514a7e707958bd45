VIDEO = {
    "title": "Introduction to limits",
    "description": "Epsilon and delta without tears",
    "subject": "Calculus",
    "videoUrl": "https://videos.example.com/limits.mp4",
    "thumbnailUrl": "https://videos.example.com/limits.png",
    "duration": "42:10",
}


def test_admin_adds_video_with_tutor(admin_client, student_client, tutor):
    response = admin_client.post("/api/videos", json={**VIDEO, "tutorId": tutor["id"]})
    assert response.status_code == 200
    video = response.json()
    assert video["uploadedById"] == admin_client.user["id"]

    listed = student_client.get("/api/videos").json()
    assert len(listed) == 1
    assert listed[0]["tutor"]["id"] == tutor["id"]
    assert listed[0]["uploadedBy"]["id"] == admin_client.user["id"]


def test_video_without_tutor(admin_client):
    response = admin_client.post("/api/videos", json={**VIDEO, "tutorId": ""})
    assert response.status_code == 200
    assert response.json()["tutorId"] is None

    video = admin_client.get(f"/api/videos/{response.json()['id']}").json()
    assert video["tutor"] is None


def test_video_with_unknown_tutor(admin_client):
    response = admin_client.post("/api/videos", json={**VIDEO, "tutorId": "no-such-tutor"})
    assert response.status_code == 400
    assert response.json() == {"message": "Failed to create video"}


def test_students_cannot_add_or_delete_videos(student_client, admin_client):
    video = admin_client.post("/api/videos", json=VIDEO).json()

    assert student_client.post("/api/videos", json=VIDEO).status_code == 403
    assert student_client.delete(f"/api/videos/{video['id']}").status_code == 403


def test_get_missing_video(student_client):
    assert student_client.get("/api/videos/does-not-exist").status_code == 404


def test_delete_video(admin_client):
    video = admin_client.post("/api/videos", json=VIDEO).json()

    response = admin_client.delete(f"/api/videos/{video['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Video deleted successfully"}
    assert admin_client.get(f"/api/videos/{video['id']}").status_code == 404
