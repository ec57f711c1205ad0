import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import select

from hostelms.core.exceptions import CapacityExceeded
from hostelms.database import Database
from hostelms.models import Room, User
from hostelms.models.room import room_occupants
from hostelms.repositories import RoomRepository


def test_list_rooms_requires_authentication(client):
    response = client.get("/api/rooms")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


def test_student_can_browse_rooms(client, student_headers, make_room):
    make_room("101")
    make_room("102", type="Non-AC", capacity=3)

    response = client.get("/api/rooms", headers=student_headers)

    assert response.status_code == 200
    data = response.json()
    assert [room["roomNumber"] for room in data] == ["101", "102"]
    assert data[0]["isAvailable"] is True


def test_admin_creates_room(client, admin_headers):
    response = client.post(
        "/api/rooms", json={"roomNumber": "201", "type": "AC", "capacity": 2}, headers=admin_headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["roomNumber"] == "201"
    assert data["occupants"] == []
    assert data["isAvailable"] is True
    assert "id" in data


def test_student_cannot_create_room(client, student_headers):
    response = client.post(
        "/api/rooms", json={"roomNumber": "201", "type": "AC", "capacity": 2}, headers=student_headers
    )

    assert response.status_code == 403


def test_authorization_is_checked_before_validation(client, student_headers):
    response = client.post("/api/rooms", json={"capacity": 0}, headers=student_headers)

    assert response.status_code == 403


@pytest.mark.parametrize("payload, field", [
    ({"roomNumber": "201", "type": "AC", "capacity": 0}, "capacity"),
    ({"roomNumber": "201", "type": "Suite", "capacity": 2}, "type"),
    ({"roomNumber": "", "type": "AC", "capacity": 2}, "roomNumber"),
])
def test_create_room_field_errors(client, admin_headers, payload, field):
    response = client.post("/api/rooms", json=payload, headers=admin_headers)

    assert response.status_code == 400
    assert list(response.json()["errors"]) == [field]


def test_duplicate_room_number_conflicts(client, admin_headers, make_room):
    make_room("101")

    response = client.post(
        "/api/rooms", json={"roomNumber": "101", "type": "AC", "capacity": 2}, headers=admin_headers
    )

    assert response.status_code == 409
    assert response.json() == {"error": "Room number already exists"}


def test_get_missing_room(client, student_headers):
    response = client.get("/api/rooms/does-not-exist", headers=student_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Room not found"}


def test_full_room_rejects_next_occupant(client, admin_headers, make_room, student_user, other_student):
    room = make_room("101", capacity=1)

    first = client.post(
        f"/api/rooms/{room.id}/occupants", json={"userId": student_user.id}, headers=admin_headers
    )
    assert first.status_code == 200
    assert [o["id"] for o in first.json()["occupants"]] == [student_user.id]
    assert first.json()["isAvailable"] is False

    second = client.post(
        f"/api/rooms/{room.id}/occupants", json={"userId": other_student.id}, headers=admin_headers
    )
    assert second.status_code == 409
    assert second.json() == {"error": "Room 101 is at full capacity"}

    room_now = client.get(f"/api/rooms/{room.id}", headers=admin_headers).json()
    assert len(room_now["occupants"]) == 1


def test_assigning_a_student_again_is_a_no_op(client, admin_headers, make_room, student_user):
    room = make_room("101", capacity=1, occupants=[student_user])

    response = client.post(
        f"/api/rooms/{room.id}/occupants", json={"userId": student_user.id}, headers=admin_headers
    )

    assert response.status_code == 200
    assert len(response.json()["occupants"]) == 1


def test_assigning_moves_student_between_rooms(client, admin_headers, make_room, student_user):
    old_room = make_room("101", occupants=[student_user])
    new_room = make_room("102")

    response = client.post(
        f"/api/rooms/{new_room.id}/occupants", json={"userId": student_user.id}, headers=admin_headers
    )
    assert response.status_code == 200

    old = client.get(f"/api/rooms/{old_room.id}", headers=admin_headers).json()
    assert old["occupants"] == []
    user = client.get(f"/api/users/{student_user.id}", headers=admin_headers).json()
    assert user["roomId"] == new_room.id


def test_only_students_can_be_assigned(client, admin_headers, admin_user, make_room):
    room = make_room("101")

    response = client.post(
        f"/api/rooms/{room.id}/occupants", json={"userId": admin_user.id}, headers=admin_headers
    )

    assert response.status_code == 400
    assert "userId" in response.json()["errors"]


def test_assign_unknown_user(client, admin_headers, make_room):
    room = make_room("101")

    response = client.post(
        f"/api/rooms/{room.id}/occupants", json={"userId": "nobody"}, headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["errors"] == {"userId": ["User not found"]}


def test_remove_occupant(client, admin_headers, make_room, student_user):
    room = make_room("101", occupants=[student_user])

    response = client.delete(f"/api/rooms/{room.id}/occupants/{student_user.id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["occupants"] == []


def test_remove_someone_not_in_room(client, admin_headers, make_room, student_user):
    room = make_room("101")

    response = client.delete(f"/api/rooms/{room.id}/occupants/{student_user.id}", headers=admin_headers)

    assert response.status_code == 404


def test_room_number_cannot_change(client, admin_headers, make_room):
    room = make_room("101")

    response = client.put(f"/api/rooms/{room.id}", json={"roomNumber": "999"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["errors"] == {
        "roomNumber": ["Room number cannot be changed once the room is created"]
    }


def test_update_room_type_and_capacity(client, admin_headers, make_room):
    room = make_room("101", capacity=2)

    response = client.put(
        f"/api/rooms/{room.id}", json={"type": "Non-AC", "capacity": 4}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["type"] == "Non-AC"
    assert response.json()["capacity"] == 4
    assert response.json()["roomNumber"] == "101"


def test_capacity_cannot_drop_below_occupants(client, admin_headers, make_room, student_user, other_student):
    room = make_room("101", capacity=2, occupants=[student_user, other_student])

    response = client.put(f"/api/rooms/{room.id}", json={"capacity": 1}, headers=admin_headers)

    assert response.status_code == 409


def test_replacing_occupant_list_over_capacity(client, admin_headers, make_room, student_user, other_student):
    room = make_room("101", capacity=1)

    response = client.put(
        f"/api/rooms/{room.id}",
        json={"occupants": [student_user.id, other_student.id]},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json() == {"error": "Room 101 is at full capacity"}


def test_admin_can_close_a_room(client, admin_headers, make_room):
    room = make_room("101", capacity=3)

    response = client.put(f"/api/rooms/{room.id}", json={"isAvailable": False}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["isAvailable"] is False


def test_reopening_a_full_room_keeps_it_unavailable(client, admin_headers, make_room, student_user):
    room = make_room("101", capacity=1, occupants=[student_user])

    response = client.put(f"/api/rooms/{room.id}", json={"isAvailable": True}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["isAvailable"] is False


def test_delete_room(client, admin_headers, make_room, student_user):
    room = make_room("101", occupants=[student_user])

    response = client.delete(f"/api/rooms/{room.id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Room deleted"}
    assert client.get(f"/api/rooms/{room.id}", headers=admin_headers).status_code == 404
    user = client.get(f"/api/users/{student_user.id}", headers=admin_headers).json()
    assert user["roomId"] is None


def test_create_room_with_occupants(client, admin_headers, student_user):
    response = client.post(
        "/api/rooms",
        json={"roomNumber": "301", "type": "AC", "capacity": 2, "occupants": [student_user.id]},
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert [o["name"] for o in response.json()["occupants"]] == ["Asha Student"]


def test_room_seeded_with_occupants_stores_every_place(db_session, make_room, student_user, other_student):
    room = make_room("101", capacity=2, occupants=[student_user, other_student])

    rows = db_session.execute(select(room_occupants)).all()

    assert sorted(row.user_id for row in rows) == sorted([student_user.id, other_student.id])
    assert student_user.room_id == room.id
    assert other_student.room_id == room.id


def test_third_student_rejected_from_double_room(client, admin_headers, make_room, make_user):
    room = make_room("101", capacity=2)
    students = [make_user(name=f"Student {n}") for n in range(3)]

    statuses = [
        client.post(
            f"/api/rooms/{room.id}/occupants", json={"userId": student.id}, headers=admin_headers
        ).status_code
        for student in students
    ]

    assert statuses == [200, 200, 409]
    room_now = client.get(f"/api/rooms/{room.id}", headers=admin_headers).json()
    assert sorted(o["id"] for o in room_now["occupants"]) == sorted(s.id for s in students[:2])
    assert room_now["isAvailable"] is False


def test_concurrent_assignments_respect_capacity(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'hostel.db'}")
    database.connect()
    database.create_all()

    session = database.session()
    room = Room(room_number="101", type="AC", capacity=2, is_open=True)
    students = [
        User(name=f"Student {n}", email=f"student{n}@example.com", password_hash="x", role="student")
        for n in range(8)
    ]
    session.add_all([room, *students])
    session.commit()
    room_id = room.id
    student_ids = [student.id for student in students]
    session.close()

    barrier = threading.Barrier(len(student_ids), timeout=10)

    def assign(student_id):
        db = database.session()
        try:
            rooms = RoomRepository(db)
            target = rooms.get(room_id)
            student = db.get(User, student_id)
            barrier.wait()
            try:
                rooms.assign(target, student)
            except CapacityExceeded:
                return "full"
            return "assigned"
        finally:
            db.close()

    try:
        with ThreadPoolExecutor(max_workers=len(student_ids)) as pool:
            outcomes = list(pool.map(assign, student_ids))

        session = database.session()
        placed = session.execute(
            select(room_occupants).where(room_occupants.c.room_id == room_id)
        ).all()
        session.close()
    finally:
        database.dispose()

    assert outcomes.count("assigned") == 2
    assert outcomes.count("full") == 6
    assert len(placed) == 2
