from decimal import Decimal

import pytest
from sqlalchemy import select

from storefront.data.models import ActivityLogModel, OrderModel
from storefront.domain.errors import (
    AuthenticationRequiredError,
    ConcurrencyConflictError,
    OrderNotFoundError,
)
from storefront.services.admin_service import AdminService


@pytest.fixture
def admin(make_user):
    return make_user("Root", role="admin")


@pytest.fixture
def order(db, make_user):
    order = OrderModel(user_id=make_user("Carol").id, total=Decimal("12.00"), status="paid")
    db.add(order)
    db.commit()
    return order


def test_requires_signed_in_admin(db, make_user, order):
    svc = AdminService(db)
    shopper = make_user("Dave")

    with pytest.raises(AuthenticationRequiredError):
        svc.list_orders(None)
    with pytest.raises(PermissionError):
        svc.list_orders(shopper.id)
    with pytest.raises(PermissionError):
        svc.update_order_status(shopper.id, order.id, "shipped")


def test_update_status_bumps_version_and_logs_activity(db, admin, order):
    view = AdminService(db).update_order_status(admin.id, order.id, "shipped")

    assert view["status"] == "shipped"
    assert view["version"] == 2

    entry = db.execute(select(ActivityLogModel)).scalar_one()
    assert entry.user_id == admin.id
    assert entry.action == "update_order_status"
    assert entry.entity_id == order.id
    assert entry.details == {"from": "paid", "to": "shipped"}


def test_gateway_owned_statuses_cannot_be_set(db, admin, order):
    with pytest.raises(ValueError):
        AdminService(db).update_order_status(admin.id, order.id, "paid")


def test_stale_version_is_a_conflict(db, admin, order):
    svc = AdminService(db)
    svc.update_order_status(admin.id, order.id, "processing", expected_version=1)

    with pytest.raises(ConcurrencyConflictError):
        svc.update_order_status(admin.id, order.id, "cancelled", expected_version=1)

    db.expire_all()
    assert db.get(OrderModel, order.id).status == "processing"


def test_unknown_order(db, admin):
    with pytest.raises(OrderNotFoundError):
        AdminService(db).update_order_status(admin.id, "missing", "shipped")


def test_list_orders_filters_by_status(db, admin, order, make_user):
    other = OrderModel(user_id=make_user("Eve").id, total=Decimal("3.00"), status="failed")
    db.add(other)
    db.commit()

    page = AdminService(db).list_orders(admin.id, status="failed")

    assert page["total_count"] == 1
    assert [o["id"] for o in page["orders"]] == [other.id]


def test_activity_log_failure_does_not_undo_update(db, admin, order, monkeypatch):
    def broken_add(self, entry):
        raise RuntimeError("audit table locked")

    monkeypatch.setattr("storefront.repos.activity_repo.ActivityRepo.add", broken_add)

    view = AdminService(db).update_order_status(admin.id, order.id, "delivered")

    assert view["status"] == "delivered"
    db.expire_all()
    assert db.get(OrderModel, order.id).status == "delivered"


def test_admin_sees_any_order(db, admin, order, make_user):
    svc = AdminService(db)

    view = svc.get_order(admin.id, order.id)

    assert view["id"] == order.id
    assert view["user_id"] == order.user_id
    with pytest.raises(PermissionError):
        svc.get_order(make_user("Mallory").id, order.id)
    with pytest.raises(OrderNotFoundError):
        svc.get_order(admin.id, "missing")


def test_activity_log_lists_status_changes(db, admin, order):
    svc = AdminService(db)
    svc.update_order_status(admin.id, order.id, "processing")
    svc.update_order_status(admin.id, order.id, "shipped")

    page = svc.list_activity(admin.id, page_size=1)

    assert page["total_count"] == 2
    assert page["total_pages"] == 2
    assert len(page["entries"]) == 1

    everything = svc.list_activity(admin.id, entity_type="order")["entries"]
    assert {e["details"]["to"] for e in everything} == {"processing", "shipped"}
    assert all(e["action"] == "update_order_status" and e["user_id"] == admin.id for e in everything)
    assert svc.list_activity(admin.id, action="delete_product")["total_count"] == 0


def test_activity_log_is_admin_only(db, make_user):
    with pytest.raises(AuthenticationRequiredError):
        AdminService(db).list_activity(None)
    with pytest.raises(PermissionError):
        AdminService(db).list_activity(make_user("Oscar").id)
