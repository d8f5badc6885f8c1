"""Tests for site domain router."""

import uuid
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from sqlmodel import Session

from wphub.connector.exceptions import ConnectorError
from wphub.ownership.owner import TeamOwner, UserOwner
from wphub.plugin.schemas import InstalledOn
from wphub.plugin.versions import record_installation
from wphub.site.models import ConnectionStatus, Site
from wphub.team.models import MemberStatus, TeamRole
from wphub.user.models import User


def test_create_personal_site(client: TestClient, test_user: User):
    response = client.post(
        "/sites/", json={"name": "Shop", "url": "https://shop.example.com/"}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["url"] == "https://shop.example.com"
    assert data["owner_type"] == "user"
    assert data["owner_id"] == str(test_user.id)
    assert data["connection_status"] == "inactive"
    assert len(data["api_key"]) >= 32


def test_create_team_site_requires_manager_role(
    client: TestClient, other_user: User, test_user: User, make_team
):
    team = make_team(
        other_user, members=((test_user, TeamRole.member, MemberStatus.active),)
    )

    response = client.post(
        "/sites/",
        json={"name": "Shop", "url": "https://shop.example.com", "team_id": str(team.id)},
    )

    assert response.status_code == 403


def test_create_team_site_as_manager(
    client: TestClient, other_user: User, test_user: User, make_team
):
    team = make_team(
        other_user, members=((test_user, TeamRole.manager, MemberStatus.active),)
    )

    response = client.post(
        "/sites/",
        json={"name": "Shop", "url": "https://shop.example.com", "team_id": str(team.id)},
    )

    assert response.status_code == 201
    assert response.json()["owner_type"] == "team"
    assert response.json()["owner_id"] == str(team.id)


def test_list_sites_visibility(
    client: TestClient,
    test_user: User,
    other_user: User,
    admin_user: User,
    make_team,
    make_site,
):
    team = make_team(
        other_user, members=((test_user, TeamRole.member, MemberStatus.active),)
    )
    outsider_team = make_team(admin_user, name="Elsewhere")
    mine = make_site(UserOwner(test_user.id), name="Mine")
    teams = make_site(TeamOwner(team.id), name="Team")
    shared = make_site(UserOwner(other_user.id), name="Shared", shared_with_teams=[str(team.id)])
    make_site(UserOwner(other_user.id), name="Private")
    make_site(TeamOwner(outsider_team.id), name="Foreign")

    response = client.get("/sites/")

    assert response.status_code == 200
    assert {s["id"] for s in response.json()} == {str(mine.id), str(teams.id), str(shared.id)}
    assert all("api_key" not in s for s in response.json())


def test_pending_member_sees_no_team_sites(
    client: TestClient, test_user: User, other_user: User, make_team, make_site
):
    team = make_team(
        other_user, members=((test_user, TeamRole.admin, MemberStatus.pending),)
    )
    make_site(TeamOwner(team.id))

    assert client.get("/sites/").json() == []


def test_list_all_sites_is_admin_only(
    client: TestClient, admin_user: User, other_user: User, make_site, login_as
):
    make_site(UserOwner(other_user.id))

    assert client.get("/sites/?all=true").status_code == 403

    login_as(admin_user)
    response = client.get("/sites/?all=true")

    assert response.status_code == 200
    assert len(response.json()) == 1


def test_invisible_site_is_404(client: TestClient, other_user: User, make_site):
    site = make_site(UserOwner(other_user.id))

    assert client.get(f"/sites/{site.id}").status_code == 404


def test_team_member_cannot_delete_team_site(
    client: TestClient, test_user: User, other_user: User, make_team, make_site
):
    team = make_team(
        other_user, members=((test_user, TeamRole.member, MemberStatus.active),)
    )
    site = make_site(TeamOwner(team.id))

    response = client.delete(f"/sites/{site.id}")

    assert response.status_code == 403
    assert response.json()["type"] == "site_permission_denied"


def test_update_site_shares_with_team(
    client: TestClient, test_user: User, make_site, make_team, other_user: User
):
    site = make_site(UserOwner(test_user.id))
    team = make_team(other_user)

    response = client.patch(
        f"/sites/{site.id}",
        json={"name": "Renamed", "shared_with_teams": [str(team.id), str(team.id)]},
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["shared_with_teams"] == [str(team.id)]


def test_delete_site_detaches_plugin_installations(
    client: TestClient, test_user: User, make_site, make_plugin, session: Session
):
    site = make_site(UserOwner(test_user.id))
    keep = uuid.uuid4()
    plugin = make_plugin(UserOwner(test_user.id))
    record_installation(plugin, InstalledOn(site_id=site.id, version="1.0.0"))
    record_installation(plugin, InstalledOn(site_id=keep, version="1.0.0"))
    session.add(plugin)
    session.commit()

    response = client.delete(f"/sites/{site.id}")

    assert response.status_code == 204
    session.refresh(plugin)
    assert [entry["site_id"] for entry in plugin.installed_on] == [str(keep)]
    assert session.get(Site, site.id) is None


def test_test_connection_success(
    client: TestClient, test_user: User, make_site, mock_connector: MagicMock, session: Session
):
    site = make_site(UserOwner(test_user.id))

    response = client.post(f"/sites/{site.id}/test-connection")

    assert response.status_code == 200
    assert response.json() == {"success": True, "wp_version": "6.6.2", "error": None}
    session.refresh(site)
    assert site.connection_status == ConnectionStatus.active
    assert site.wp_version == "6.6.2"
    assert site.connection_checked_at is not None


def test_test_connection_failure_marks_error(
    client: TestClient, test_user: User, make_site, mock_connector: MagicMock, session: Session
):
    site = make_site(UserOwner(test_user.id))
    mock_connector.test_connection = AsyncMock(
        side_effect=ConnectorError("Could not reach https://shop.example.com")
    )

    response = client.post(f"/sites/{site.id}/test-connection")

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert "Could not reach" in response.json()["error"]
    session.refresh(site)
    assert site.connection_status == ConnectionStatus.error


def test_download_connector(client: TestClient, test_user: User, make_site):
    site = make_site(UserOwner(test_user.id))

    response = client.get(f"/sites/{site.id}/connector")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-php")
    assert 'filename="wp-plugin-hub-connector.php"' in response.headers[
        "content-disposition"
    ]
    assert f"private $api_key = '{site.api_key}';" in response.text


def test_sync_requires_admin(client: TestClient):
    assert client.post("/sites/sync").status_code == 403


def test_unauthenticated(unauthenticated_client: TestClient):
    assert unauthenticated_client.get("/sites/").status_code == 401


def test_stranger_cannot_download_connector(
    client: TestClient, other_user: User, make_site
):
    site = make_site(UserOwner(other_user.id))

    assert client.get(f"/sites/{site.id}/connector").status_code == 404
