from __future__ import annotations

import pytest

from backend.app import models, permissions


def _user(role: models.UserRole, **flags) -> models.User:
    return models.User(role=role, can_pay=flags.get("can_pay", False), is_approver=flags.get("is_approver", False))


@pytest.mark.parametrize(
    ("predicate", "allowed"),
    [
        (permissions.can_create_work_orders, {"provider_admin", "provider_staff"}),
        (permissions.can_edit_work_orders, {"provider_admin"}),
        (permissions.can_delete_work_orders, {"provider_admin"}),
        (permissions.can_create_invoices, {"provider_admin"}),
        (permissions.can_manage_settings, {"provider_admin"}),
        (permissions.can_manage_staff, {"provider_admin", "client_admin"}),
        (permissions.can_create_time_logs, {"provider_admin", "provider_staff"}),
        (
            permissions.can_view_invoices,
            {"provider_admin", "provider_staff", "client_admin", "client_viewer"},
        ),
    ],
)
def test_role_predicates(predicate, allowed):
    granted = {role.value for role in models.UserRole if predicate(_user(role))}

    assert granted == allowed


def test_provider_and_client_partition():
    for role in models.UserRole:
        user = _user(role)
        assert permissions.is_provider_user(user) != permissions.is_client_user(user)


def test_approve_and_pay_follow_flags():
    assert permissions.can_approve(_user(models.UserRole.CLIENT_VIEWER, is_approver=True))
    assert not permissions.can_approve(_user(models.UserRole.CLIENT_ADMIN))

    assert permissions.can_pay(_user(models.UserRole.CLIENT_ADMIN, can_pay=True))
    assert not permissions.can_pay(_user(models.UserRole.CLIENT_ADMIN))
    assert not permissions.can_pay(_user(models.UserRole.PROVIDER_ADMIN, can_pay=True))


def test_ensure_raises_permission_denied():
    viewer = _user(models.UserRole.CLIENT_VIEWER)

    permissions.ensure(permissions.is_client_user, viewer, "unused")
    with pytest.raises(permissions.PermissionDeniedError, match="Nope"):
        permissions.ensure(permissions.can_manage_settings, viewer, "Nope")
