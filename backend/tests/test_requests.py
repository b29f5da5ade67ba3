"""
Request intake tests — POST /api/request-doctor and the doctor queue.
"""

from datetime import datetime, timedelta, timezone

from carelink.models import DoctorRequest, Session


def _request_doctor(client, patient_id, **extra):
    body = {"patientId": str(patient_id)}
    body.update(extra)
    return client.post("/api/request-doctor", json=body)


# ============================================================================
# Intake + assignment
# ============================================================================

def test_no_doctors_leaves_request_pending(client, db, make_user):
    patient = make_user("patient")

    response = _request_doctor(client, patient.id, description="Need help")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["request"]["status"] == "pending"
    assert data["request"]["assignedDoctor"] is None

    stored = db.query(DoctorRequest).one()
    assert stored.status == "pending"
    assert stored.doctor_id is None
    assert db.query(Session).count() == 0


def test_online_doctor_gets_assigned_with_one_session(client, db, make_user):
    patient = make_user("patient")
    doctor = make_user(
        "doctor", online=True, professional={"specialization": "Neurology"}
    )

    response = _request_doctor(client, patient.id, requestType="urgent")

    assert response.status_code == 200
    request = response.json()["request"]
    assert request["status"] == "assigned"
    assert request["assignedDoctor"]["id"] == str(doctor.id)
    assert request["assignedDoctor"]["specialization"] == "Neurology"

    stored = db.query(DoctorRequest).one()
    assert stored.status == "assigned"
    assert stored.doctor_id == doctor.id
    assert stored.request_type == "urgent"
    assert stored.assigned_date is not None

    sessions = db.query(Session).filter(Session.request_id == stored.id).all()
    assert len(sessions) == 1
    assert sessions[0].status == "waiting"
    assert sessions[0].doctor_id == doctor.id
    assert sessions[0].patient_id == patient.id


def test_online_doctor_preferred_over_offline(client, make_user):
    patient = make_user("patient")
    make_user("doctor", online=False)
    make_user("doctor", online=False)
    online = make_user("doctor", online=True)

    for _ in range(5):
        response = _request_doctor(client, patient.id)
        assert response.json()["request"]["assignedDoctor"]["id"] == str(online.id)


def test_offline_doctor_used_when_nobody_online(client, make_user):
    patient = make_user("patient")
    offline = make_user("doctor", online=False)

    response = _request_doctor(client, patient.id)

    assert response.json()["request"]["status"] == "assigned"
    assert response.json()["request"]["assignedDoctor"]["id"] == str(offline.id)


def test_unknown_patient_is_rejected(client, db):
    response = _request_doctor(client, "00000000-0000-0000-0000-000000000000")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Patient not found"}
    assert db.query(DoctorRequest).count() == 0


def test_missing_patient_and_bad_request_type(client, make_user):
    assert client.post("/api/request-doctor", json={}).status_code == 400

    patient = make_user("patient")
    response = _request_doctor(client, patient.id, requestType="whenever")
    assert response.status_code == 400


def test_register_login_request_flow(client):
    """Patient is queued until a doctor exists, then the retry is assigned."""
    patient = client.post("/api/register", json={
        "fullName": "A", "email": "a@example.com", "password": "Secret123", "role": "patient",
    }).json()["user"]
    client.post("/api/login", json={"email": "a@example.com", "password": "Secret123"})

    first = _request_doctor(client, patient["id"])
    assert first.json()["request"]["status"] == "pending"

    doctor = client.post("/api/register", json={
        "fullName": "D", "email": "d@example.com", "password": "Secret123", "role": "doctor",
    }).json()["user"]
    client.post("/api/login", json={"email": "d@example.com", "password": "Secret123"})

    retry = _request_doctor(client, patient["id"])
    assert retry.json()["request"]["status"] == "assigned"
    assert retry.json()["request"]["assignedDoctor"]["id"] == doctor["id"]


# ============================================================================
# Doctor queue
# ============================================================================

def test_doctor_queue_lists_pending_and_own_newest_first(client, db, make_user):
    patient = make_user(
        "patient", emergency_contact={"name": "Bob", "phone": "555", "relationship": "brother"}
    )
    me = make_user("doctor")
    other = make_user("doctor")
    now = datetime.now(timezone.utc)

    rows = [
        DoctorRequest(patient_id=patient.id, status="pending", request_date=now - timedelta(hours=3)),
        DoctorRequest(patient_id=patient.id, doctor_id=me.id, status="assigned",
                      request_date=now - timedelta(hours=1)),
        DoctorRequest(patient_id=patient.id, doctor_id=me.id, status="active",
                      request_date=now - timedelta(hours=2)),
        DoctorRequest(patient_id=patient.id, doctor_id=other.id, status="assigned",
                      request_date=now),
        DoctorRequest(patient_id=patient.id, doctor_id=me.id, status="completed",
                      request_date=now),
    ]
    db.add_all(rows)
    db.commit()

    response = client.get(f"/api/doctor-requests/{me.id}")

    assert response.status_code == 200
    requests = response.json()["requests"]
    assert [r["status"] for r in requests] == ["assigned", "active", "pending"]
    assert requests[0]["patient"]["fullName"] == patient.full_name
    assert requests[0]["patient"]["emergencyContact"]["relationship"] == "brother"


def test_doctor_queue_unknown_doctor(client):
    response = client.get("/api/doctor-requests/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


# ============================================================================
# Cancellation
# ============================================================================

def _cancel(client, request_id, headers=None):
    return client.post(f"/api/doctor-requests/{request_id}/cancel", headers=headers or {})


def test_cancel_assigned_request_cancels_waiting_session(client, db, make_user, auth_header):
    patient = make_user("patient")
    make_user("doctor", online=True)
    request_id = _request_doctor(client, patient.id).json()["request"]["id"]

    response = _cancel(client, request_id, auth_header(patient))

    assert response.status_code == 200
    assert response.json()["request"]["status"] == "cancelled"
    session = db.query(Session).one()
    assert session.status == "cancelled"
    assert session.end_time is not None


def test_cancel_twice_is_rejected(client, make_user, auth_header):
    patient = make_user("patient")
    request_id = _request_doctor(client, patient.id).json()["request"]["id"]

    assert _cancel(client, request_id, auth_header(patient)).status_code == 200
    second = _cancel(client, request_id, auth_header(patient))
    assert second.status_code == 400
    assert second.json()["success"] is False


def test_assigned_doctor_can_cancel(client, make_user, auth_header):
    patient = make_user("patient")
    doctor = make_user("doctor", online=True)
    request_id = _request_doctor(client, patient.id).json()["request"]["id"]

    response = _cancel(client, request_id, auth_header(doctor))

    assert response.status_code == 200
    assert response.json()["request"]["status"] == "cancelled"


def test_cancel_requires_login(client, db, make_user):
    patient = make_user("patient")
    request_id = _request_doctor(client, patient.id).json()["request"]["id"]

    response = _cancel(client, request_id)

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert db.query(DoctorRequest).one().status == "pending"


def test_cancel_by_someone_else_is_forbidden(client, db, make_user, auth_header):
    patient = make_user("patient")
    make_user("doctor", online=True)
    stranger = make_user("patient")
    other_doctor = make_user("doctor", online=False)
    request_id = _request_doctor(client, patient.id).json()["request"]["id"]

    for user in (stranger, other_doctor):
        response = _cancel(client, request_id, auth_header(user))
        assert response.status_code == 403
        assert response.json()["success"] is False

    assert db.query(DoctorRequest).one().status == "assigned"
    assert db.query(Session).one().status == "waiting"


# ============================================================================
# Free-text bodies
# ============================================================================

def test_description_with_equals_sign_is_accepted(client, db, make_user):
    patient = make_user("patient")

    response = _request_doctor(client, patient.id, description="my condition = worse since monday")

    assert response.status_code == 200
    assert response.json()["request"]["status"] == "pending"
    assert db.query(DoctorRequest).one().description == "my condition = worse since monday"
