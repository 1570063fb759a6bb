import pytest

from leadhub.errors import Conflict, NotFound, ValidationError
from leadhub.services import sub_admins as sub_admin_service

NEW_SUB_ADMIN = {
    "name": "Nora New",
    "email": "nora@example.com",
    "password": "secret1",
    "company_name": "Nora Co",
}


def test_create_sub_admin_is_approved_and_can_be_assigned(store, cur, super_admin):
    page = store.add_landing_page()

    user = sub_admin_service.create_sub_admin(
        cur, super_admin, landing_page_id=page["id"], **NEW_SUB_ADMIN
    )

    assert user["status"] == "approved"
    assert user["approved_by"] == super_admin["id"]
    assert store.active_landing_page_ids(cur, user["id"]) == [page["id"]]


def test_create_sub_admin_rejects_inactive_page(store, cur, super_admin):
    page = store.add_landing_page(status="inactive")
    with pytest.raises(ValidationError, match="Invalid landing page"):
        sub_admin_service.create_sub_admin(
            cur, super_admin, landing_page_id=page["id"], **NEW_SUB_ADMIN
        )
    assert store.get_user_by_email(cur, NEW_SUB_ADMIN["email"]) is None


def test_create_sub_admin_with_pending_status(store, cur, super_admin):
    user = sub_admin_service.create_sub_admin(cur, super_admin, status="pending", **NEW_SUB_ADMIN)
    assert user["status"] == "pending"
    assert user["approved_by"] is None


def test_list_sub_admins_includes_active_access(store, cur, sub_admin):
    page = store.add_landing_page()
    revoked = store.add_landing_page()
    store.grant(sub_admin["id"], page["id"])
    record = store.grant(sub_admin["id"], revoked["id"])
    store.access[record["id"]]["status"] = "revoked"

    items, total = sub_admin_service.list_sub_admins(cur, search="sam")

    assert total == 1
    user, access = items[0]
    assert user["id"] == sub_admin["id"]
    assert [row["landing_page_id"] for row in access] == [page["id"]]


def test_update_sub_admin_status_and_reassign(store, cur, super_admin, sub_admin):
    old_page = store.add_landing_page()
    new_page = store.add_landing_page()
    store.grant(sub_admin["id"], old_page["id"])

    updated = sub_admin_service.update_sub_admin(
        cur, super_admin, sub_admin["id"], status="rejected", landing_page_id=new_page["id"]
    )

    assert updated["status"] == "rejected"
    assert updated["rejected_by"] == super_admin["id"]
    assert store.active_landing_page_ids(cur, sub_admin["id"]) == [new_page["id"]]


def test_update_without_assignment_keeps_grants(store, cur, super_admin, sub_admin):
    page = store.add_landing_page()
    store.grant(sub_admin["id"], page["id"])

    sub_admin_service.update_sub_admin(cur, super_admin, sub_admin["id"], name="Samuel")

    assert store.active_landing_page_ids(cur, sub_admin["id"]) == [page["id"]]
    assert store.users[sub_admin["id"]]["name"] == "Samuel"


def test_update_with_none_clears_grants(store, cur, super_admin, sub_admin):
    page = store.add_landing_page()
    store.grant(sub_admin["id"], page["id"])

    sub_admin_service.update_sub_admin(cur, super_admin, sub_admin["id"], landing_page_id=None)

    assert store.active_landing_page_ids(cur, sub_admin["id"]) == []


def test_update_unknown_sub_admin(store, cur, super_admin):
    with pytest.raises(NotFound, match="Sub admin not found"):
        sub_admin_service.update_sub_admin(cur, super_admin, super_admin["id"], name="Nope")


def test_delete_blocked_by_leads_on_past_pages(store, cur, super_admin, sub_admin):
    page = store.add_landing_page()
    record = store.grant(sub_admin["id"], page["id"])
    store.access[record["id"]]["status"] = "revoked"
    store.add_lead(page["id"])

    with pytest.raises(Conflict, match="There are 1 leads associated with their landing pages."):
        sub_admin_service.delete_sub_admin(cur, super_admin, sub_admin["id"])


def test_delete_removes_access_and_user(store, cur, super_admin, sub_admin):
    page = store.add_landing_page()
    store.grant(sub_admin["id"], page["id"])

    sub_admin_service.delete_sub_admin(cur, super_admin, sub_admin["id"])

    assert sub_admin["id"] not in store.users
    assert store.access == {}
