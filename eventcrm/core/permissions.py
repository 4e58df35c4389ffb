"""Role to page permission table.

The table is built once when the application starts and handed to the
request handlers through ``app.state``. It is never mutated afterwards.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "Admin"
    COORDINATOR = "Coordenador"
    MATERIAL_MANAGER = "Gestor de Material"
    FINANCE = "Financeiro"
    TECHNICIAN = "Técnico"
    SALES = "Comercial"

    @classmethod
    def parse(cls, value: str | None) -> "Role | None":
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            logger.warning("Unknown role %r treated as anonymous", value)
            return None


DEFAULT_PATH = "/"
LOGIN_PATH = "/login"

PUBLIC_PATHS = (
    "/login",
    "/register",
    "/reset-password",
    "/auth/callback",
    "/welcome",
    "/health-check",
)

_CRM_PAGES = ["/crm/dashboard", "/crm/pipeline", "/crm/clients", "/crm/clients/:clientId"]

PAGE_PERMISSIONS: dict[Role, list[str]] = {
    Role.ADMIN: [
        "/", "/calendar", "/create-event", "/roster-management",
        "/employees", "/roles", "/materials", "/material-requests",
        "/finance/dashboard", "/finance-profitability", "/finance-calendar", "/finance-costs", "/finance/reports",
        "/admin-settings", "/invite-member", "/admin/members", "/debug", "/roles/:roleId",
        *_CRM_PAGES,
    ],
    Role.COORDINATOR: [
        "/", "/calendar", "/create-event", "/roster-management",
        "/employees", "/roles", "/materials", "/invite-member", "/admin/members",
    ],
    Role.MATERIAL_MANAGER: [
        "/", "/calendar", "/roster-management", "/materials", "/material-requests",
    ],
    Role.FINANCE: [
        "/finance/dashboard", "/finance-profitability", "/finance-calendar", "/finance-costs", "/finance/reports",
        "/finance/profile",
    ],
    Role.TECHNICIAN: [
        "/technician/dashboard", "/technician/calendar", "/technician/events",
        "/technician/events/:eventId", "/technician/tasks",
        "/technician/profile", "/technician/notifications",
    ],
    Role.SALES: list(_CRM_PAGES),
}


def split_path(path: str) -> tuple[str, ...]:
    path = path.split("?", 1)[0].split("#", 1)[0]
    return tuple(segment for segment in path.split("/") if segment)


def path_matches(pattern: str, path: str) -> bool:
    """Segment-wise match where ``:name`` segments accept any single segment."""
    expected = split_path(pattern)
    actual = split_path(path)
    if len(expected) != len(actual):
        return False
    for want, got in zip(expected, actual):
        if want.startswith(":"):
            continue
        if want != got:
            return False
    return True


class PermissionTable:
    def __init__(self, entries: Mapping[Role, Iterable[str]], public_paths: Iterable[str] = PUBLIC_PATHS):
        self._entries = MappingProxyType({Role(role): tuple(paths) for role, paths in entries.items()})
        self._public = tuple(public_paths)

    @classmethod
    def default(cls) -> "PermissionTable":
        return cls(PAGE_PERMISSIONS)

    @classmethod
    def from_file(cls, path: str | Path) -> "PermissionTable":
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        entries = {Role(role): paths for role, paths in raw.get("roles", {}).items()}
        public = raw.get("public", PUBLIC_PATHS)
        logger.info("Loaded permission table for %d roles from %s", len(entries), path)
        return cls(entries, public)

    @property
    def public_paths(self) -> tuple[str, ...]:
        return self._public

    def allowed_paths(self, role: Role | None) -> tuple[str, ...]:
        if role is None:
            return ()
        return self._entries.get(role, ())

    def is_public(self, path: str) -> bool:
        return any(path_matches(pattern, path) for pattern in self._public)

    def can_access(self, role: Role | None, path: str) -> bool:
        if role is None:
            return False
        if self.is_public(path):
            return True
        return any(path_matches(pattern, path) for pattern in self._entries.get(role, ()))

    def admits(self, role: Role | None, path: str) -> bool:
        """Navigation rule: public paths are open to everyone, anonymous included.

        ``can_access`` stays the role guard and denies a missing role outright.
        """
        return self.is_public(path) or self.can_access(role, path)

    def redirect_target(self, role: Role | None) -> str:
        if role is None:
            return LOGIN_PATH
        paths = self._entries.get(role, ())
        return paths[0] if paths else DEFAULT_PATH

    def uncovered(self, paths: Iterable[str]) -> list[str]:
        """Return the paths that no role lists and that are not public."""
        missing = []
        for path in paths:
            if self.is_public(path):
                continue
            if any(path_matches(pattern, path) for patterns in self._entries.values() for pattern in patterns):
                continue
            missing.append(path)
        return missing


def load_permission_table(permissions_file: str | None = None) -> PermissionTable:
    if permissions_file:
        return PermissionTable.from_file(permissions_file)
    return PermissionTable.default()
