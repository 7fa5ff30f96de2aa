"""Session DTOs shared across application layers."""

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

Role = Literal["admin", "manager"]
ROLES = ("admin", "manager")


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    first_name: str
    last_name: str
    role: Role
    manager_id: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Identity":
        role = payload.get("role")
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        manager = payload.get("manager") or {}
        manager_id = payload.get("managerId") or manager.get("id")
        return cls(
            id=str(payload["id"]),
            email=str(payload.get("email") or ""),
            first_name=str(payload.get("firstName") or ""),
            last_name=str(payload.get("lastName") or ""),
            role=role,
            manager_id=str(manager_id) if manager_id else None,
        )


def is_admin(identity: Optional[Identity]) -> bool:
    return identity is not None and identity.role == "admin"


def is_manager(identity: Optional[Identity]) -> bool:
    return identity is not None and identity.role == "manager"
