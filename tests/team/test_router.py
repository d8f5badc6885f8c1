"""Tests for team domain router: teams, members and the invite workflow."""

import uuid
from collections.abc import Callable
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from wphub.activity.models import ActivityLog, EntityType
from wphub.messaging.models import Notification, NotificationType
from wphub.team.models import InviteStatus, Team, TeamInvite
from wphub.user.models import User


def _create_team(client: TestClient, name: str = "Agency") -> dict:
    response = client.post("/teams/", json={"name": name})
    assert response.status_code == 201
    return response.json()


def _invite(client: TestClient, team_id: str, email: str, role: str | None = None) -> dict:
    payload = {"email": email}
    if role is not None:
        payload["team_role_id"] = role
    response = client.post(f"/teams/{team_id}/invites", json=payload)
    assert response.status_code == 201
    return response.json()


# --- Team lifecycle ---


def test_create_team_makes_owner_first_member(client: TestClient, test_user: User):
    team = _create_team(client)

    assert team["owner_id"] == str(test_user.id)
    assert len(team["members"]) == 1
    assert team["members"][0]["status"] == "active"
    assert team["members"][0]["team_role_id"] == "Owner"


def test_list_my_teams_includes_role(client: TestClient):
    _create_team(client)

    response = client.get("/teams/")

    assert response.status_code == 200
    assert [t["my_role"] for t in response.json()] == ["owner"]


def test_stranger_gets_404_for_team(
    client: TestClient, other_user: User, login_as: Callable[[User], None]
):
    team = _create_team(client)
    login_as(other_user)

    response = client.get(f"/teams/{team['id']}")

    assert response.status_code == 404


def test_update_team_settings(client: TestClient):
    team = _create_team(client)

    response = client.patch(
        f"/teams/{team['id']}",
        json={"name": "Renamed", "settings": {"allow_member_invites": True}},
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["settings"]["allow_member_invites"] is True


def test_delete_team_removes_invites(client: TestClient, session: Session):
    team = _create_team(client)
    _invite(client, team["id"], "someone@example.com")

    response = client.delete(f"/teams/{team['id']}")

    assert response.status_code == 204
    session.expire_all()
    assert session.get(Team, uuid.UUID(team["id"])) is None
    assert session.exec(select(TeamInvite)).all() == []


def test_only_admin_blocks_team(
    client: TestClient, admin_user: User, login_as: Callable[[User], None]
):
    team = _create_team(client)

    assert client.post(f"/teams/{team['id']}/block").status_code == 403

    login_as(admin_user)
    response = client.post(f"/teams/{team['id']}/block")

    assert response.status_code == 200
    assert response.json()["is_blocked"] is True


# --- Invites ---


def test_invite_existing_user_creates_placeholder_and_notification(
    client: TestClient,
    other_user: User,
    session: Session,
    no_outgoing_email: MagicMock,
):
    team = _create_team(client)

    invite = _invite(client, team["id"], "Other@Example.com", role="Manager")

    assert invite["invited_email"] == "other@example.com"
    assert invite["status"] == "pending"
    stored = session.get(Team, uuid.UUID(team["id"]))
    session.refresh(stored)
    placeholder = [m for m in stored.members if m["user_id"] == str(other_user.id)]
    assert placeholder[0]["status"] == "pending"
    assert placeholder[0]["team_role_id"] == "Manager"
    notification = session.exec(
        select(Notification).where(Notification.recipient_id == other_user.id)
    ).one()
    assert notification.type == NotificationType.team_invite
    assert str(notification.team_invite_id) == invite["id"]
    no_outgoing_email.assert_called_once()


def test_invite_unknown_email_has_no_placeholder(client: TestClient, session: Session):
    team = _create_team(client)

    _invite(client, team["id"], "newcomer@example.com")

    stored = session.get(Team, uuid.UUID(team["id"]))
    session.refresh(stored)
    assert len(stored.members) == 1
    assert session.exec(select(Notification)).all() == []


def test_duplicate_pending_invite_conflicts(client: TestClient):
    team = _create_team(client)
    _invite(client, team["id"], "someone@example.com")

    response = client.post(
        f"/teams/{team['id']}/invites", json={"email": "someone@example.com"}
    )

    assert response.status_code == 409
    assert response.json()["type"] == "invite_exists"


def test_owner_role_cannot_be_invited(client: TestClient):
    team = _create_team(client)

    response = client.post(
        f"/teams/{team['id']}/invites",
        json={"email": "someone@example.com", "team_role_id": "Owner"},
    )

    assert response.status_code == 403


def test_email_failure_does_not_undo_invite(
    client: TestClient, session: Session, no_outgoing_email: MagicMock
):
    no_outgoing_email.side_effect = RuntimeError("resend down")
    team = _create_team(client)

    response = client.post(
        f"/teams/{team['id']}/invites", json={"email": "someone@example.com"}
    )

    assert response.status_code == 201
    assert len(session.exec(select(TeamInvite)).all()) == 1


def test_accept_flips_pending_member_and_reads_notification(
    client: TestClient,
    test_user: User,
    other_user: User,
    session: Session,
    login_as: Callable[[User], None],
):
    """A pending placeholder becomes active in place, notifications are read."""
    team = _create_team(client)
    invite = _invite(client, team["id"], other_user.email)
    login_as(other_user)

    response = client.post(f"/teams/invites/{invite['id']}/accept")

    assert response.status_code == 200
    members = response.json()["members"]
    assert [(m["user_id"], m["status"]) for m in members] == [
        (str(test_user.id), "active"),
        (str(other_user.id), "active"),
    ]
    stored_invite = session.get(TeamInvite, uuid.UUID(invite["id"]))
    session.refresh(stored_invite)
    assert stored_invite.status == InviteStatus.accepted
    assert stored_invite.accepted_at is not None
    notification = session.exec(
        select(Notification).where(Notification.team_invite_id == stored_invite.id)
    ).one()
    session.refresh(notification)
    assert notification.is_read is True
    joined = session.exec(
        select(ActivityLog).where(ActivityLog.action == "Joined team: Agency")
    ).one()
    assert joined.entity_type == EntityType.team
    assert joined.user_email == other_user.email


def test_accept_appends_member_registered_after_invite(
    client: TestClient, session: Session, login_as: Callable[[User], None]
):
    team = _create_team(client)
    invite = _invite(client, team["id"], "late@example.com", role="Admin")
    late = User(external_id="uid-late", email="late@example.com", full_name="Late")
    session.add(late)
    session.commit()
    session.refresh(late)
    login_as(late)

    response = client.post(f"/teams/invites/{invite['id']}/accept")

    assert response.status_code == 200
    members = response.json()["members"]
    assert len(members) == 2
    assert members[1]["user_id"] == str(late.id)
    assert members[1]["team_role_id"] == "Admin"
    assert members[1]["status"] == "active"


def test_accept_via_notification(
    client: TestClient, other_user: User, session: Session, login_as: Callable[[User], None]
):
    team = _create_team(client)
    _invite(client, team["id"], other_user.email)
    login_as(other_user)
    notification = client.get("/notifications/").json()[0]

    response = client.post(f"/notifications/{notification['id']}/accept-invite")

    assert response.status_code == 200
    assert client.get("/teams/").json()[0]["my_role"] == "member"


def test_declined_invite_cannot_be_accepted(
    client: TestClient, other_user: User, session: Session, login_as: Callable[[User], None]
):
    team = _create_team(client)
    invite = _invite(client, team["id"], other_user.email)
    login_as(other_user)

    declined = client.post(f"/teams/invites/{invite['id']}/decline")
    accepted = client.post(f"/teams/invites/{invite['id']}/accept")

    assert declined.status_code == 200
    assert declined.json()["status"] == "declined"
    assert accepted.status_code == 409
    stored = session.get(Team, uuid.UUID(team["id"]))
    session.refresh(stored)
    assert [m["status"] for m in stored.members if m["user_id"] == str(other_user.id)] == [
        "pending"
    ]


def test_invite_for_someone_else_is_hidden(
    client: TestClient, admin_user: User, login_as: Callable[[User], None]
):
    team = _create_team(client)
    invite = _invite(client, team["id"], "someone@example.com")
    login_as(admin_user)

    response = client.post(f"/teams/invites/{invite['id']}/accept")

    assert response.status_code == 404


def test_pending_invites_for_me(
    client: TestClient, other_user: User, login_as: Callable[[User], None]
):
    team = _create_team(client)
    _invite(client, team["id"], other_user.email)
    login_as(other_user)

    response = client.get("/teams/invites/pending")

    assert [i["team_id"] for i in response.json()] == [team["id"]]


# --- Members ---


def test_owner_cannot_be_removed(client: TestClient, test_user: User):
    team = _create_team(client)

    response = client.delete(f"/teams/{team['id']}/members/{test_user.id}")

    assert response.status_code == 400


def test_member_can_leave(
    client: TestClient, other_user: User, login_as: Callable[[User], None]
):
    team = _create_team(client)
    invite = _invite(client, team["id"], other_user.email)
    login_as(other_user)
    client.post(f"/teams/invites/{invite['id']}/accept")

    response = client.delete(f"/teams/{team['id']}/members/{other_user.id}")

    assert response.status_code == 200
    assert len(response.json()["members"]) == 1


def test_removing_pending_member_withdraws_invite(
    client: TestClient,
    session: Session,
    other_user: User,
    login_as: Callable[[User], None],
):
    team = _create_team(client)
    invite = _invite(client, team["id"], other_user.email)

    response = client.delete(f"/teams/{team['id']}/members/{other_user.id}")
    assert response.status_code == 200
    assert len(response.json()["members"]) == 1

    assert session.get(TeamInvite, uuid.UUID(invite["id"])) is None
    assert session.exec(select(Notification)).all() == []

    login_as(other_user)
    accepted = client.post(f"/teams/invites/{invite['id']}/accept")
    assert accepted.status_code == 404
    assert client.get("/teams/").json() == []


# --- Revoking invites ---


def test_revoke_invite_drops_placeholder_and_notification(
    client: TestClient, session: Session, other_user: User
):
    team = _create_team(client)
    invite = _invite(client, team["id"], other_user.email)

    response = client.delete(f"/teams/{team['id']}/invites/{invite['id']}")

    assert response.status_code == 204
    assert client.get(f"/teams/{team['id']}/invites").json() == []
    assert [m["email"] for m in client.get(f"/teams/{team['id']}").json()["members"]] == [
        "test@example.com"
    ]
    assert session.exec(select(Notification)).all() == []
    assert session.exec(
        select(ActivityLog).where(ActivityLog.action.startswith("Revoked invite"))
    ).one()


def test_answered_invite_cannot_be_revoked(
    client: TestClient, other_user: User, login_as: Callable[[User], None], test_user: User
):
    team = _create_team(client)
    invite = _invite(client, team["id"], other_user.email)
    login_as(other_user)
    client.post(f"/teams/invites/{invite['id']}/accept")
    login_as(test_user)

    response = client.delete(f"/teams/{team['id']}/invites/{invite['id']}")

    assert response.status_code == 409
    assert response.json()["type"] == "invite_not_pending"


def test_member_cannot_revoke_invite(
    client: TestClient,
    other_user: User,
    login_as: Callable[[User], None],
):
    team = _create_team(client)
    invite = _invite(client, team["id"], other_user.email)
    pending = _invite(client, team["id"], "new@example.com")
    login_as(other_user)
    client.post(f"/teams/invites/{invite['id']}/accept")

    response = client.delete(f"/teams/{team['id']}/invites/{pending['id']}")

    assert response.status_code == 403


def test_revoke_unknown_invite_is_404(client: TestClient):
    team = _create_team(client)

    response = client.delete(f"/teams/{team['id']}/invites/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["type"] == "invite_not_found"
