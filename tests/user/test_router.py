"""Tests for user domain router."""

import uuid

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from wphub.activity.models import ActivityLog
from wphub.user.models import User, UserRole, UserStatus

# --- PATCH /users/me ---


def test_update_me_profile_fields(client: TestClient, test_user: User, session: Session):
    response = client.patch(
        "/users/me", json={"full_name": "Renamed", "company": "Acme", "phone": "+31 20"}
    )

    assert response.status_code == 200
    assert response.json()["full_name"] == "Renamed"
    session.refresh(test_user)
    assert test_user.company == "Acme"


def test_update_me_ignores_restricted_fields(
    client: TestClient, test_user: User, session: Session
):
    response = client.patch(
        "/users/me",
        json={"email": "hacker@example.com", "role": "admin", "status": "inactive"},
    )

    assert response.status_code == 200
    session.refresh(test_user)
    assert test_user.email == "test@example.com"
    assert test_user.role == UserRole.user
    assert test_user.status == UserStatus.active


def test_update_me_unauthenticated(unauthenticated_client: TestClient):
    response = unauthenticated_client.patch("/users/me", json={"full_name": "X"})

    assert response.status_code == 401


# --- Admin user management ---


def test_list_users_requires_admin(client: TestClient):
    response = client.get("/users/")

    assert response.status_code == 403
    assert response.json()["type"] == "admin_required"


def test_list_users_as_admin(admin_client: TestClient, test_user: User):
    response = admin_client.get("/users/")

    assert response.status_code == 200
    assert str(test_user.id) in {u["id"] for u in response.json()}


def test_get_user_not_found(admin_client: TestClient):
    response = admin_client.get(f"/users/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_admin_updates_user_and_logs_it(
    admin_client: TestClient, test_user: User, session: Session
):
    response = admin_client.patch(
        f"/users/{test_user.id}", json={"role": "admin", "company": "Hub"}
    )

    assert response.status_code == 200
    assert response.json()["role"] == "admin"
    entry = session.exec(
        select(ActivityLog).where(ActivityLog.entity_id == str(test_user.id))
    ).one()
    assert entry.action == "Updated user: test@example.com"
    assert entry.details == "company, role"


def test_admin_update_rejects_taken_email(
    admin_client: TestClient, test_user: User, other_user: User
):
    response = admin_client.patch(
        f"/users/{test_user.id}", json={"email": other_user.email}
    )

    assert response.status_code == 409


def test_admin_cannot_demote_self(admin_client: TestClient, admin_user: User):
    response = admin_client.patch(f"/users/{admin_user.id}", json={"role": "user"})

    assert response.status_code == 400


def test_block_and_unblock_user(
    admin_client: TestClient, test_user: User, session: Session
):
    response = admin_client.post(f"/users/{test_user.id}/block")

    assert response.status_code == 200
    assert response.json()["status"] == "inactive"

    response = admin_client.post(f"/users/{test_user.id}/unblock")

    assert response.json()["status"] == "active"
    session.refresh(test_user)
    assert test_user.is_active


def test_admin_cannot_block_self(admin_client: TestClient, admin_user: User):
    response = admin_client.post(f"/users/{admin_user.id}/block")

    assert response.status_code == 400


def test_delete_user(admin_client: TestClient, other_user: User, session: Session):
    user_id = other_user.id

    response = admin_client.delete(f"/users/{user_id}")

    assert response.status_code == 204
    session.expire_all()
    assert session.get(User, user_id) is None
