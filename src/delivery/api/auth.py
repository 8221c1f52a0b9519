"""Request identity supplied by the API gateway.

Bearer tokens are validated upstream; the gateway forwards the caller's id,
role and organization as headers. Requests without a user id are rejected.
"""

from dataclasses import dataclass

from fastapi import Header, HTTPException

from delivery.access import is_staff


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: str | None = None
    organization_id: str | None = None

    @property
    def is_staff(self) -> bool:
        return is_staff(self.role)


def current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
    x_organization_id: str | None = Header(default=None),
) -> Actor:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return Actor(user_id=x_user_id, role=x_user_role, organization_id=x_organization_id)
