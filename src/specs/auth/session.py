from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AdminStatus(str, Enum):
    ADMIN = "admin"
    NOT_ADMIN = "not-admin"
    PENDING = "pending"


class Identity(BaseModel):
    """Read-only projection of the identity provider's signed-in user."""

    uid: str
    name: Optional[str] = None
    email: Optional[str] = None
    token: str = Field("", exclude=True, repr=False)


class SessionState(BaseModel):
    currentUser: Optional[Identity] = None
    resolved: bool = False
    adminStatus: AdminStatus = AdminStatus.PENDING

    @property
    def is_admin(self) -> bool:
        return self.adminStatus is AdminStatus.ADMIN
