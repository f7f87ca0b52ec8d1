"""AuthorizationGate — who may read, change or delete orders and users.

Order rules compare raw role strings against the account vocabulary
(``admin``/``superuser``), while user administration goes through the
operational hierarchy. The two are kept apart on purpose: the order rules
reproduce the historical behaviour, including that ``staff`` and
``customerService`` cannot see other customers' orders.

Every check raises ForbiddenError; identity problems (no/invalid token) are
raised earlier by the auth dependency as UnauthorizedError.
"""

from dataclasses import dataclass

from src.bk_common.errors import (
    InsufficientRoleError,
    RoleEscalationError,
    SelfDeletionError,
)
from src.bk_gateway.auth.roles import Role, can_manage, has_minimum_role, role_level

ORDER_READ_ALL_ROLES = frozenset({Role.ADMIN.value, Role.SUPERUSER.value})
ORDER_UPDATE_ROLES = frozenset({Role.ADMIN.value, Role.SUPERUSER.value})
ORDER_DELETE_ROLES = frozenset({Role.ADMIN.value})


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as supplied by the identity provider."""

    id: str
    role: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def can_read_all_orders(actor: Actor) -> bool:
    return actor.role in ORDER_READ_ALL_ROLES


def ensure_can_read_order(actor: Actor, owner_id: str | None) -> None:
    if can_read_all_orders(actor):
        return
    if owner_id is not None and owner_id == actor.id:
        return
    raise InsufficientRoleError("view this order")


def ensure_can_update_order(actor: Actor) -> None:
    if actor.role not in ORDER_UPDATE_ROLES:
        raise InsufficientRoleError("modify orders")


def ensure_can_delete_order(actor: Actor) -> None:
    if actor.role not in ORDER_DELETE_ROLES:
        raise InsufficientRoleError("delete orders")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def ensure_min_role(actor: Actor, required: Role, action: str) -> None:
    if not has_minimum_role(actor.role, required.value):
        raise InsufficientRoleError(action)


def ensure_can_manage_user(actor: Actor, target_role: str) -> None:
    if not can_manage(actor.role, target_role):
        raise InsufficientRoleError("manage a user with a higher role")


def ensure_can_assign_role(actor: Actor, new_role: str) -> None:
    """Refuse handing out a role at or above the actor's own level."""
    if role_level(new_role) >= role_level(actor.role):
        raise RoleEscalationError(new_role)


def ensure_can_delete_user(actor: Actor, target_id: str, target_role: str) -> None:
    if actor.id == target_id:
        raise SelfDeletionError()
    ensure_can_manage_user(actor, target_role)
