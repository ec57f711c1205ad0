from conftest import assert_no_secrets

NEW_USER = {
    "name": "Chitra Student",
    "email": "Chitra@Example.com",
    "password": "chitrapass1",
    "role": "student",
    "phone": "9876543210",
}


def test_students_cannot_manage_users(client, student_headers):
    assert client.get("/api/users", headers=student_headers).status_code == 403
    assert client.post("/api/users", json=NEW_USER, headers=student_headers).status_code == 403


def test_admin_lists_users_by_role(client, admin_headers, student_user, other_student):
    everyone = client.get("/api/users", headers=admin_headers).json()
    students = client.get("/api/users", params={"role": "student"}, headers=admin_headers).json()

    assert len(everyone) == 3
    assert [u["name"] for u in students] == ["Asha Student", "Ben Student"]
    assert_no_secrets(everyone)


def test_admin_creates_verified_user(client, admin_headers):
    response = client.post("/api/users", json=NEW_USER, headers=admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "chitra@example.com"
    assert data["emailVerified"] is not None
    assert data["roomId"] is None
    assert_no_secrets(data)

    login = client.post("/auth/login", json={"email": "chitra@example.com", "password": "chitrapass1"})
    assert login.status_code == 200


def test_create_user_with_existing_email(client, admin_headers, student_user):
    response = client.post("/api/users", json={**NEW_USER, "email": "ASHA@example.com"}, headers=admin_headers)

    assert response.status_code == 409
    assert response.json() == {"error": "User with this email already exists."}


def test_create_user_into_room(client, admin_headers, make_room):
    room = make_room("101", capacity=1)

    response = client.post("/api/users", json={**NEW_USER, "roomId": room.id}, headers=admin_headers)

    assert response.status_code == 201
    assert response.json()["roomId"] == room.id


def test_create_user_into_full_room_creates_nothing(client, admin_headers, make_room, student_user):
    room = make_room("101", capacity=1, occupants=[student_user])

    response = client.post("/api/users", json={**NEW_USER, "roomId": room.id}, headers=admin_headers)

    assert response.status_code == 409
    emails = [u["email"] for u in client.get("/api/users", headers=admin_headers).json()]
    assert "chitra@example.com" not in emails


def test_update_user_room_assignment(client, admin_headers, student_user, make_room):
    room = make_room("101")

    assigned = client.put(f"/api/users/{student_user.id}", json={"roomId": room.id}, headers=admin_headers)
    assert assigned.status_code == 200
    assert assigned.json()["roomId"] == room.id

    cleared = client.put(f"/api/users/{student_user.id}", json={"roomId": None}, headers=admin_headers)
    assert cleared.status_code == 200
    assert cleared.json()["roomId"] is None


def test_update_without_room_id_keeps_room(client, admin_headers, student_user, make_room):
    room = make_room("101", occupants=[student_user])

    response = client.put(f"/api/users/{student_user.id}", json={"phone": "12345"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["phone"] == "12345"
    assert response.json()["roomId"] == room.id


def test_update_to_unknown_room(client, admin_headers, student_user):
    response = client.put(f"/api/users/{student_user.id}", json={"roomId": "nowhere"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json() == {"errors": {"roomId": ["Room not found"]}}


def test_promoting_to_admin_vacates_room(client, admin_headers, student_user, make_room):
    room = make_room("101", occupants=[student_user])

    response = client.put(f"/api/users/{student_user.id}", json={"role": "admin"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["roomId"] is None
    assert client.get(f"/api/rooms/{room.id}", headers=admin_headers).json()["occupants"] == []


def test_update_email_conflict(client, admin_headers, student_user, other_student):
    response = client.put(f"/api/users/{other_student.id}", json={"email": "asha@example.com"}, headers=admin_headers)

    assert response.status_code == 409


def test_admin_resets_password(client, admin_headers, student_user):
    response = client.put(f"/api/users/{student_user.id}", json={"password": "brandnew123"}, headers=admin_headers)

    assert response.status_code == 200
    assert_no_secrets(response.json())
    login = client.post("/auth/login", json={"email": "asha@example.com", "password": "brandnew123"})
    assert login.status_code == 200


def test_delete_user_removes_their_records(
    client, admin_headers, student_user, make_room, make_leave_request, make_payment
):
    room = make_room("101", occupants=[student_user])
    make_leave_request(student_user)
    make_payment(student_user)

    response = client.delete(f"/api/users/{student_user.id}", headers=admin_headers)

    assert response.status_code == 200
    assert client.get(f"/api/users/{student_user.id}", headers=admin_headers).status_code == 404
    assert client.get("/api/leave-requests", headers=admin_headers).json() == []
    assert client.get("/api/payments", headers=admin_headers).json() == []
    assert client.get(f"/api/rooms/{room.id}", headers=admin_headers).json()["occupants"] == []


def test_admin_cannot_delete_themselves(client, admin_headers, admin_user):
    response = client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)

    assert response.status_code == 409
