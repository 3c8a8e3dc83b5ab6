"""Authorization predicates shared by services and routers."""

from __future__ import annotations

from typing import Callable

from .models import CLIENT_ROLES, PROVIDER_ROLES, User, UserRole


class PermissionDeniedError(RuntimeError):
    """Raised when a user attempts an operation their role does not allow."""


def is_provider_user(user: User) -> bool:
    return user.role in PROVIDER_ROLES


def is_client_user(user: User) -> bool:
    return user.role in CLIENT_ROLES


def can_approve(user: User) -> bool:
    return bool(user.is_approver)


def can_pay(user: User) -> bool:
    return bool(user.can_pay) and user.role == UserRole.CLIENT_ADMIN


def can_create_work_orders(user: User) -> bool:
    return is_provider_user(user)


def can_edit_work_orders(user: User) -> bool:
    return user.role == UserRole.PROVIDER_ADMIN


def can_delete_work_orders(user: User) -> bool:
    return user.role == UserRole.PROVIDER_ADMIN


def can_create_invoices(user: User) -> bool:
    return user.role == UserRole.PROVIDER_ADMIN


def can_view_invoices(user: User) -> bool:
    # Approvers see work orders but not billing.
    return user.role in {
        UserRole.PROVIDER_ADMIN,
        UserRole.PROVIDER_STAFF,
        UserRole.CLIENT_ADMIN,
        UserRole.CLIENT_VIEWER,
    }


def can_manage_settings(user: User) -> bool:
    return user.role == UserRole.PROVIDER_ADMIN


def can_manage_staff(user: User) -> bool:
    return user.role in {UserRole.PROVIDER_ADMIN, UserRole.CLIENT_ADMIN}


def can_create_time_logs(user: User) -> bool:
    return is_provider_user(user)


def can_manage_incident_reports(user: User) -> bool:
    return is_provider_user(user)


def can_see_internal_comments(user: User) -> bool:
    return is_provider_user(user)


def ensure(predicate: Callable[[User], bool], user: User, message: str) -> None:
    """Raise :class:`PermissionDeniedError` unless ``predicate(user)`` holds."""

    if not predicate(user):
        raise PermissionDeniedError(message)
