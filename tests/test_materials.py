MATERIAL = {
    "title": "Derivatives cheat sheet",
    "description": "All the rules on one page",
    "subject": "Calculus",
    "fileUrl": "https://files.example.com/derivatives.pdf",
    "fileType": "pdf",
}


def test_admin_uploads_material(admin_client):
    response = admin_client.post("/api/materials", json=MATERIAL)

    assert response.status_code == 200
    material = response.json()
    assert material["id"]
    assert material["uploadedById"] == admin_client.user["id"]
    assert material["fileType"] == "pdf"


def test_uploader_cannot_be_chosen_by_client(admin_client, student_client):
    response = admin_client.post("/api/materials", json={**MATERIAL, "uploadedById": student_client.user["id"]})
    assert response.status_code == 200
    assert response.json()["uploadedById"] == admin_client.user["id"]


def test_students_read_but_cannot_upload(student_client, admin_client):
    material = admin_client.post("/api/materials", json=MATERIAL).json()

    assert student_client.post("/api/materials", json=MATERIAL).status_code == 403
    assert student_client.delete(f"/api/materials/{material['id']}").status_code == 403

    materials = student_client.get("/api/materials").json()
    assert len(materials) == 1
    assert materials[0]["uploadedBy"]["email"] == admin_client.user["email"]

    response = student_client.get(f"/api/materials/{material['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == MATERIAL["title"]


def test_material_requires_file_url(admin_client):
    payload = {key: value for key, value in MATERIAL.items() if key != "fileUrl"}
    response = admin_client.post("/api/materials", json=payload)
    assert response.status_code == 400


def test_get_missing_material(student_client):
    response = student_client.get("/api/materials/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"message": "Material not found"}


def test_delete_material(admin_client):
    material = admin_client.post("/api/materials", json=MATERIAL).json()

    response = admin_client.delete(f"/api/materials/{material['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Material deleted successfully"}
    assert admin_client.get("/api/materials").json() == []
