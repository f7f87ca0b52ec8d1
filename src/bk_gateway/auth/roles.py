"""Role hierarchy — one ordered vocabulary for every permission check.

Two vocabularies exist historically:
  - account roles:     user, superuser, admin
  - operational roles: user, staff, customerService, admin

``Role`` carries both. Operational roles have levels 1-4; ``superuser`` is not
part of the operational ladder and is resolved through ``ROLE_MIGRATION``
before a level is looked up. Strings outside ``Role`` map to level 0 and fail
every check.
"""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    STAFF = "staff"
    CUSTOMER_SERVICE = "customerService"
    SUPERUSER = "superuser"
    ADMIN = "admin"


ROLE_LEVELS: dict[Role, int] = {
    Role.USER: 1,
    Role.STAFF: 2,
    Role.CUSTOMER_SERVICE: 3,
    Role.ADMIN: 4,
}

# Account-role vocabulary -> operational equivalent used for level checks.
ROLE_MIGRATION: dict[Role, Role] = {
    Role.SUPERUSER: Role.CUSTOMER_SERVICE,
}

_DISPLAY_NAMES: dict[Role, str] = {
    Role.USER: "User",
    Role.STAFF: "Staff",
    Role.CUSTOMER_SERVICE: "Customer Service",
    Role.SUPERUSER: "Superuser",
    Role.ADMIN: "Administrator",
}

_DESCRIPTIONS: dict[Role, str] = {
    Role.USER: "Basic user with standard access permissions",
    Role.STAFF: "Staff member with enhanced access for operational tasks",
    Role.CUSTOMER_SERVICE: (
        "Customer service representative with support and management capabilities"
    ),
    Role.SUPERUSER: "Legacy account role with order management rights",
    Role.ADMIN: "Full system administrator with complete access and control",
}


def _parse(role: str) -> Role | None:
    try:
        return Role(role)
    except ValueError:
        return None


def is_valid_role(role: str) -> bool:
    return _parse(role) is not None


def role_level(role: str) -> int:
    """Hierarchy level of a role string; 0 for unknown strings."""
    parsed = _parse(role)
    if parsed is None:
        return 0
    return ROLE_LEVELS[ROLE_MIGRATION.get(parsed, parsed)]


def has_minimum_role(actor_role: str, required_role: str) -> bool:
    """True iff the actor's level is >= the required level."""
    required = role_level(required_role)
    if required == 0:
        return False
    return role_level(actor_role) >= required


def has_any_role(actor_role: str, allowed_roles: list[str]) -> bool:
    return any(has_minimum_role(actor_role, role) for role in allowed_roles)


def can_manage(actor_role: str, target_role: str) -> bool:
    """True iff the actor's level is >= the target's level.

    Equal levels pass (an admin can manage another admin). Self-deletion and
    role escalation are refused by the caller, not here.
    """
    actor = role_level(actor_role)
    if actor == 0:
        return False
    return actor >= role_level(target_role)


def roles_at_or_below(role: str) -> list[Role]:
    level = role_level(role)
    return [r for r in Role if 0 < role_level(r.value) <= level]


def roles_above(role: str) -> list[Role]:
    level = role_level(role)
    return [r for r in Role if role_level(r.value) > level]


def role_display_name(role: str) -> str:
    parsed = _parse(role)
    return _DISPLAY_NAMES[parsed] if parsed else role


def role_description(role: str) -> str:
    parsed = _parse(role)
    return _DESCRIPTIONS[parsed] if parsed else "Unknown role"
