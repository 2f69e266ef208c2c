def test_subject_counts_fall_back_to_credit_table(client):
    balanced = client.post(
        "/api/subjects/",
        json={"code": "MATH1", "name": "Calculus", "credits": 3, "total_sessions": 16, "in_person_sessions": 12, "e_learning_sessions": 4},
    )
    assert balanced.status_code == 201
    assert balanced.json()["in_person_sessions"] == 12

    unbalanced = client.post(
        "/api/subjects/",
        json={"code": "MATH2", "name": "Algebra", "credits": 4, "total_sessions": 9, "in_person_sessions": 3, "e_learning_sessions": 3},
    )
    assert unbalanced.status_code == 201
    body = unbalanced.json()
    assert (body["total_sessions"], body["in_person_sessions"], body["e_learning_sessions"]) == (20, 15, 5)

    listed = client.get("/api/subjects/").json()
    assert [item["code"] for item in listed] == ["MATH1", "MATH2"]


def test_catalog_crud_and_duplicates(client):
    teacher_payload = {"code": "T10", "full_name": "Katherine Johnson", "email": "katherine@uni.edu"}
    created = client.post("/api/teachers/", json=teacher_payload)
    assert created.status_code == 201
    assert client.get(f"/api/teachers/{created.json()['id']}").json()["email"] == "katherine@uni.edu"
    assert client.post("/api/teachers/", json=teacher_payload).status_code == 409

    bad_email = client.post("/api/students/", json={"code": "S10", "full_name": "No Mail", "email": "not-an-email"})
    assert bad_email.status_code == 422

    student = client.post("/api/students/", json={"code": "S10", "full_name": "Mary Jackson", "email": "mary@uni.edu"})
    assert student.status_code == 201
    assert client.get("/api/students/missing").status_code == 404


def test_room_listing_can_hide_inactive_rooms(client):
    client.post("/api/rooms/", json={"code": "R2", "name": "Room 2", "building": "Main", "capacity": 30, "is_active": False})
    client.post("/api/rooms/", json={"code": "R1", "name": "Room 1", "building": "Main", "capacity": 50})

    assert [item["code"] for item in client.get("/api/rooms/").json()] == ["R1", "R2"]
    assert [item["code"] for item in client.get("/api/rooms/", params={"active_only": True}).json()] == ["R1"]
    assert client.post("/api/rooms/", json={"code": "R1", "name": "Dup", "building": "Main", "capacity": 10}).status_code == 409
