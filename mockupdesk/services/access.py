"""Tenancy-aware authorization checks.

All checks are pure functions of the acting user and the target brand, so
callers resolve the ``Actor`` once per request and pass it down explicitly.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy.orm import Session

from mockupdesk.errors import PermissionDenied
from mockupdesk.models import Brand, User, UserRole

MANAGER_ROLES = {UserRole.ADMIN.value, UserRole.MANAGER.value}
REVIEWER_ROLES = MANAGER_ROLES | {UserRole.REVIEWER.value}


def _role_value(role) -> Optional[str]:
    return role.value if isinstance(role, UserRole) else role


@dataclass(frozen=True)
class Actor:
    """The authenticated caller plus the tenancy facts needed to authorize it."""

    id: int
    email: str
    name: str
    role: str
    agency_id: Optional[int] = None
    is_super_admin: bool = False
    agency_roles: Dict[int, str] = field(default_factory=dict)
    brand_ids: FrozenSet[int] = frozenset()

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=_role_value(user.role),
            agency_id=user.agency_id,
            is_super_admin=bool(user.is_super_admin),
            agency_roles={m.agency_id: _role_value(m.role) for m in user.agency_memberships},
            brand_ids=frozenset(brand.id for brand in user.brands),
        )


def is_manager(actor: Actor) -> bool:
    return actor.role in MANAGER_ROLES


def can_review(actor: Actor) -> bool:
    return actor.role in REVIEWER_ROLES


def has_brand_access(actor: Actor, brand: Brand) -> bool:
    if actor.is_super_admin:
        return True

    role_in_agency = actor.agency_roles.get(brand.agency_id)
    if role_in_agency is None:
        return False

    # Admins and managers of the agency see every brand it owns
    if role_in_agency in MANAGER_ROLES:
        return True

    return brand.id in actor.brand_ids


def ensure_brand_access(actor: Actor, brand: Brand, message: str = "You do not have access to this brand.") -> None:
    if not has_brand_access(actor, brand):
        raise PermissionDenied(message)


def ensure_can_review(actor: Actor, message: str = "You do not have permission to review posts.") -> None:
    if not can_review(actor):
        raise PermissionDenied(message)


def accessible_brand_ids(db: Session, actor: Actor) -> List[int]:
    """Brands the actor may list content for within their current agency."""
    if actor.agency_id is not None and is_manager(actor):
        rows = db.query(Brand.id).filter(Brand.agency_id == actor.agency_id).all()
        return [row[0] for row in rows]
    return sorted(actor.brand_ids)
