from __future__ import annotations

import pytest

from conftest import add_company, add_user, auth_header
from portal.models.company_user import CompanyUser
from portal.repositories.company_user_repo import CompanyUserRepository
from portal.security.roles import CompanyUserRole


@pytest.fixture()
def company(db_session):
    return add_company(db_session, "Muster Akademie GmbH")


@pytest.fixture()
def admin(db_session, company):
    return add_user(db_session, company, "anna@example.com", CompanyUserRole.ADMIN)


@pytest.fixture()
def editor(db_session, company):
    return add_user(db_session, company, "erik@example.com", CompanyUserRole.EDITOR)


@pytest.fixture()
def viewer(db_session, company):
    return add_user(db_session, company, "vera@example.com", CompanyUserRole.VIEWER)


def _as(user: CompanyUser) -> dict[str, str]:
    return auth_header(user.id, role=user.role.value, company_id=user.company_id)


def test_missing_token_is_401(client):
    r = client.get("/api/v1/company-users")
    assert r.status_code == 401


def test_trainer_is_401(client):
    r = client.get("/api/v1/company-users", headers=auth_header(1, user_type="TRAINER"))
    assert r.status_code == 401


def test_list_orders_admins_first(client, db_session, company, viewer, editor, admin):
    other = add_company(db_session, "Fremd Training AG")
    add_user(db_session, other, "fremd@example.com", CompanyUserRole.ADMIN)

    r = client.get("/api/v1/company-users", headers=_as(viewer))
    assert r.status_code == 200
    users = r.json()["users"]
    assert [u["email"] for u in users] == ["anna@example.com", "erik@example.com", "vera@example.com"]
    assert users[0]["role"] == "ADMIN"


def test_viewer_cannot_create_user(client, viewer):
    r = client.post(
        "/api/v1/company-users",
        json={"email": "neu@example.com", "first_name": "Neu", "last_name": "Nutzer"},
        headers=_as(viewer),
    )
    assert r.status_code == 403


def test_admin_creates_user_with_default_role(client, admin):
    r = client.post(
        "/api/v1/company-users",
        json={"email": "neu@example.com", "first_name": "Neu", "last_name": "Nutzer", "role": "OWNER"},
        headers=_as(admin),
    )
    assert r.status_code == 201
    user = r.json()["user"]
    assert user["role"] == "EDITOR"
    assert user["is_active"] is True
    assert user["phone"] is None


def test_create_requires_names_and_email(client, admin):
    r = client.post("/api/v1/company-users", json={"email": "x@example.com"}, headers=_as(admin))
    assert r.status_code == 400
    assert "required" in r.json()["detail"]


def test_create_rejects_duplicate_email(client, admin, editor):
    r = client.post(
        "/api/v1/company-users",
        json={"email": editor.email, "first_name": "Dup", "last_name": "Licate"},
        headers=_as(admin),
    )
    assert r.status_code == 400
    assert "already exists" in r.json()["detail"]


def test_get_user_from_other_company_is_404(client, db_session, admin):
    other = add_company(db_session, "Fremd Training AG")
    stranger = add_user(db_session, other, "fremd@example.com")

    r = client.get(f"/api/v1/company-users/{stranger.id}", headers=_as(admin))
    assert r.status_code == 404


def test_get_user_bad_id_is_400(client, admin):
    r = client.get("/api/v1/company-users/abc", headers=_as(admin))
    assert r.status_code == 400


def test_get_user(client, admin, viewer):
    r = client.get(f"/api/v1/company-users/{admin.id}", headers=_as(viewer))
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "anna@example.com"


def test_non_admin_may_only_update_self(client, editor, viewer):
    r = client.patch(f"/api/v1/company-users/{viewer.id}", json={"first_name": "X"}, headers=_as(editor))
    assert r.status_code == 403

    r = client.patch(f"/api/v1/company-users/{editor.id}", json={"first_name": "Erika"}, headers=_as(editor))
    assert r.status_code == 200
    assert r.json()["user"]["first_name"] == "Erika"


def test_non_admin_cannot_change_own_role(client, viewer):
    r = client.patch(
        f"/api/v1/company-users/{viewer.id}",
        json={"role": "ADMIN", "is_active": False},
        headers=_as(viewer),
    )
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["role"] == "VIEWER"
    assert user["is_active"] is True


def test_update_email_conflict_is_409(client, admin, editor):
    r = client.patch(
        f"/api/v1/company-users/{editor.id}",
        json={"email": admin.email},
        headers=_as(editor),
    )
    assert r.status_code == 409


def test_admin_changes_role(client, admin, editor):
    r = client.patch(f"/api/v1/company-users/{editor.id}", json={"role": "VIEWER"}, headers=_as(admin))
    assert r.status_code == 200
    assert r.json()["user"]["role"] == "VIEWER"


def test_last_admin_cannot_be_demoted(client, admin, editor):
    r = client.patch(f"/api/v1/company-users/{admin.id}", json={"role": "EDITOR"}, headers=_as(admin))
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot remove the last admin"


def test_admin_can_be_demoted_when_another_admin_exists(client, db_session, company, admin):
    second = add_user(db_session, company, "zweite@example.com", CompanyUserRole.ADMIN)
    r = client.patch(f"/api/v1/company-users/{admin.id}", json={"role": "EDITOR"}, headers=_as(second))
    assert r.status_code == 200
    assert r.json()["user"]["role"] == "EDITOR"


def test_delete_requires_admin(client, editor, viewer):
    r = client.delete(f"/api/v1/company-users/{viewer.id}", headers=_as(editor))
    assert r.status_code == 403


def test_admin_cannot_delete_self(client, admin):
    r = client.delete(f"/api/v1/company-users/{admin.id}", headers=_as(admin))
    assert r.status_code == 400


def test_delete_is_soft(client, session_factory, admin, editor):
    r = client.delete(f"/api/v1/company-users/{editor.id}", headers=_as(admin))
    assert r.status_code == 200
    assert r.json() == {"message": "User deactivated successfully"}

    with session_factory() as s:
        stored = s.get(CompanyUser, editor.id)
        assert stored is not None
        assert stored.is_active is False


def test_last_active_admin_cannot_be_deleted(client, db_session, company, admin, monkeypatch: pytest.MonkeyPatch):
    second = add_user(db_session, company, "zweite@example.com", CompanyUserRole.ADMIN)

    async def one_admin(*args, **kwargs):
        return 1

    # Count as seen by a concurrent request that already deactivated the other admin.
    monkeypatch.setattr(CompanyUserRepository, "count_active_admins", one_admin)

    r = client.delete(f"/api/v1/company-users/{admin.id}", headers=_as(second))
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot delete the last admin"


def test_delete_unknown_user_is_404(client, admin):
    r = client.delete("/api/v1/company-users/4242", headers=_as(admin))
    assert r.status_code == 404


def test_last_admin_cannot_be_deactivated(client, admin):
    r = client.patch(f"/api/v1/company-users/{admin.id}", json={"is_active": False}, headers=_as(admin))
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot remove the last admin"


def test_patch_user_from_other_company_is_404(client, db_session, admin):
    other = add_company(db_session, "Fremd Training AG")
    stranger = add_user(db_session, other, "fremd@example.com")

    r = client.patch(f"/api/v1/company-users/{stranger.id}", json={"first_name": "X"}, headers=_as(admin))
    assert r.status_code == 404


def test_deactivated_admin_loses_rights_immediately(client, db_session, company, admin):
    second = add_user(db_session, company, "zweite@example.com", CompanyUserRole.ADMIN)
    second_headers = _as(second)

    r = client.delete(f"/api/v1/company-users/{second.id}", headers=_as(admin))
    assert r.status_code == 200

    # The token still claims ADMIN.
    r = client.post(
        "/api/v1/company-users",
        json={"email": "neu@example.com", "first_name": "Neu", "last_name": "Nutzer", "role": "ADMIN"},
        headers=second_headers,
    )
    assert r.status_code == 403


def test_demoted_admin_decides_on_stored_role(client, db_session, company, admin, editor):
    second = add_user(db_session, company, "zweite@example.com", CompanyUserRole.ADMIN)
    stale_headers = _as(second)

    r = client.patch(f"/api/v1/company-users/{second.id}", json={"role": "VIEWER"}, headers=_as(admin))
    assert r.status_code == 200

    r = client.delete(f"/api/v1/company-users/{editor.id}", headers=stale_headers)
    assert r.status_code == 403

    r = client.patch(f"/api/v1/company-users/{editor.id}", json={"first_name": "X"}, headers=stale_headers)
    assert r.status_code == 403


def test_token_without_company_user_row_cannot_manage_users(client, company, admin):
    r = client.post(
        "/api/v1/company-users",
        json={"email": "neu@example.com", "first_name": "Neu", "last_name": "Nutzer"},
        headers=auth_header(999, role="ADMIN", company_id=company.id),
    )
    assert r.status_code == 403
