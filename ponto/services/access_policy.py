"""접근 정책 평가기 — 역할/테넌트 기반 권한과 조회 범위.

Access policy evaluator. Given the acting user and a requested action or
target tenant, answers:

* which rows the actor may see (an ``AccessScope`` applied to queries);
* whether a write is allowed (``authorize`` / ``ensure_same_tenant``).

Visibility by role:

    admin            all companies (optionally filtered to one)
    manager, hr      own company
    employee         own records within own company

Every repository query receives an ``AccessScope`` so tenant filtering is
never re-implemented per endpoint.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import Select

from ponto.models.user import User
from ponto.utils.exceptions import AuthorizationError, NotFoundError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """사용자 역할 — 권한 낮은 순 (Least to most privileged)."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR = "hr"
    ADMIN = "admin"


class Action(str, Enum):
    """권한 검사 대상 동작 — Guarded actions."""

    VIEW_EMPLOYEES = "view_employees"
    CREATE_EMPLOYEE = "create_employee"
    UPDATE_EMPLOYEE = "update_employee"
    DEACTIVATE_EMPLOYEE = "deactivate_employee"
    MANAGE_DEVICES = "manage_devices"
    CHANGE_ROLE = "change_role"
    VIEW_OTHERS_RECORDS = "view_others_records"
    REVIEW_ABSENCE = "review_absence"
    REVIEW_ADJUSTMENT = "review_adjustment"
    RESOLVE_TICKET = "resolve_ticket"
    CLOSE_TICKET = "close_ticket"
    VIEW_DASHBOARD = "view_dashboard"
    MANAGE_COMPANIES = "manage_companies"
    CREATE_MANAGER = "create_manager"
    LIST_USERS = "list_users"


_STAFF: frozenset[Role] = frozenset({Role.MANAGER, Role.HR, Role.ADMIN})
_HR: frozenset[Role] = frozenset({Role.HR, Role.ADMIN})
_ADMIN: frozenset[Role] = frozenset({Role.ADMIN})

# 동작별 허용 역할 — Roles allowed per action
PERMISSIONS: dict[Action, frozenset[Role]] = {
    Action.VIEW_EMPLOYEES: _STAFF,
    Action.CREATE_EMPLOYEE: _HR,
    Action.UPDATE_EMPLOYEE: _STAFF,
    Action.DEACTIVATE_EMPLOYEE: _HR,
    Action.MANAGE_DEVICES: _STAFF,
    Action.CHANGE_ROLE: _ADMIN,
    Action.VIEW_OTHERS_RECORDS: _STAFF,
    Action.REVIEW_ABSENCE: _STAFF,
    Action.REVIEW_ADJUSTMENT: _STAFF,
    Action.RESOLVE_TICKET: _STAFF,
    Action.CLOSE_TICKET: _STAFF,
    Action.VIEW_DASHBOARD: _STAFF,
    Action.MANAGE_COMPANIES: _ADMIN,
    Action.CREATE_MANAGER: _ADMIN,
    Action.LIST_USERS: _ADMIN,
}


@dataclass(frozen=True)
class AccessScope:
    """조회 범위 — Row filter derived from the actor.

    Attributes:
        company_id: 회사 필터, None이면 전체 (Tenant filter; None = all tenants)
        user_id: 소유자 필터, None이면 회사 전체 (Owner filter; None = whole tenant)
    """

    company_id: UUID | None = None
    user_id: UUID | None = None

    def apply(self, query: Select, company_column: Any, owner_column: Any | None = None) -> Select:
        """쿼리에 범위 조건을 추가합니다 — Add the scope's WHERE clauses to ``query``."""
        if self.company_id is not None:
            query = query.where(company_column == self.company_id)
        if self.user_id is not None and owner_column is not None:
            query = query.where(owner_column == self.user_id)
        return query


def role_of(actor: User) -> Role:
    try:
        return Role(actor.role)
    except ValueError:
        # 알 수 없는 역할은 최저 권한으로 취급 — unknown roles get the least privilege
        logger.warning("User %s has unknown role %r", actor.id, actor.role)
        return Role.EMPLOYEE


def can(actor: User, action: Action) -> bool:
    return role_of(actor) in PERMISSIONS[action]


def authorize(actor: User, action: Action) -> None:
    """역할 권한 검사 — 불가 시 403.

    Raises:
        AuthorizationError: 역할에 동작 권한 없음 (Role lacks the action)
    """
    if not can(actor, action):
        raise AuthorizationError(f"Role '{actor.role}' is not allowed to {action.value.replace('_', ' ')}")


def scope_for(actor: User, requested_company_id: UUID | None = None) -> AccessScope:
    """행위자의 조회 범위를 계산합니다.

    Compute the visibility scope of ``actor``.

    Args:
        actor: 요청 사용자 (Acting user)
        requested_company_id: 관리자 전용 회사 필터 (Company filter, honoured for admins;
            other roles are always pinned to their own company)

    Returns:
        AccessScope: 쿼리에 적용할 범위 (Scope to apply to queries)
    """
    role = role_of(actor)
    if role is Role.ADMIN:
        return AccessScope(company_id=requested_company_id)
    if role in (Role.MANAGER, Role.HR):
        return AccessScope(company_id=actor.company_id)
    return AccessScope(company_id=actor.company_id, user_id=actor.id)


def staff_scope_for(actor: User, requested_company_id: UUID | None = None) -> AccessScope:
    """회사 범위 — 직원 본인 필터 없이 회사 단위 범위 (used after a staff-only authorize)."""
    if role_of(actor) is Role.ADMIN:
        return AccessScope(company_id=requested_company_id)
    return AccessScope(company_id=actor.company_id)


def ensure_same_tenant(actor: User, company_id: UUID) -> None:
    """교차 테넌트 접근 차단 — 관리자 제외.

    Raises:
        AuthorizationError: 다른 회사 리소스 (Target belongs to another company)
    """
    if role_of(actor) is Role.ADMIN:
        return
    if company_id != actor.company_id:
        raise AuthorizationError("Access to another company's data is not allowed")


def missing_in_scope(actor: User, what: str) -> Exception:
    """범위 내 조회 실패 시 발생시킬 예외.

    A scoped lookup that finds nothing cannot tell "does not exist" from
    "belongs to another tenant". Scoped actors get 403 either way so record
    existence is never revealed across tenants; admins get 404.
    """
    if role_of(actor) is Role.ADMIN:
        return NotFoundError(f"{what} not found")
    return AuthorizationError(f"{what} is not accessible")


def ensure_can_assign_role(actor: User, role: str) -> None:
    """역할 부여 권한 검사.

    hr may create plain employees only; managers, hr and admins are created
    or promoted by admins.

    Raises:
        AuthorizationError: 부여 권한 없음 (Actor may not assign ``role``)
    """
    target = Role(role)
    if target is Role.EMPLOYEE and can(actor, Action.CREATE_EMPLOYEE):
        return
    if role_of(actor) is Role.ADMIN:
        return
    raise AuthorizationError(f"Only administrators can assign the '{target.value}' role")


def is_device_authorized(user: User, device_id: str | None) -> bool:
    """기기 인증 여부 — ``device_id`` is in the user's authorized device list."""
    if not device_id:
        return False
    return any(d.device_id == device_id for d in user.devices)
