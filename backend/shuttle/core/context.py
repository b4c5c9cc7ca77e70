"""
Per-request session context and the role capability table.

A SessionContext is built once per request from the session token and the
requested language. Nothing about the current user is kept in module state;
"logging out" is the client dropping its token.
"""

from dataclasses import dataclass
from typing import Optional

from shuttle.schemas.user import UserResponse

SUPPORTED_LANGUAGES = ("th", "en")


@dataclass(frozen=True)
class Capabilities:
    screens: tuple[str, ...]
    actions: frozenset[str]


_CATALOG_READ = {"view_catalog", "view_news"}
_STAFF = {"view_roster", "check_in", "mark_no_show", "edit_vehicle"}

CAPABILITIES: dict[str, Capabilities] = {
    "rider": Capabilities(
        screens=("home", "book", "map", "history", "qr", "profile"),
        actions=frozenset(_CATALOG_READ | {"book", "cancel_own", "view_own", "edit_profile"}),
    ),
    "driver": Capabilities(
        screens=("driver", "map", "profile"),
        actions=frozenset(_CATALOG_READ | _STAFF),
    ),
    "admin": Capabilities(
        screens=("home", "map", "profile", "admin"),
        actions=frozenset(
            _CATALOG_READ
            | _STAFF
            | {"view_all", "scan_any", "report", "export", "manage_routes", "manage_stations", "edit_news"}
        ),
    ),
}


def capabilities_for(role: str) -> Capabilities:
    return CAPABILITIES.get(role, CAPABILITIES["rider"])


def resolve_language(requested: Optional[str], accept_language: Optional[str], default: str) -> str:
    for candidate in (requested, accept_language):
        if candidate:
            code = candidate.split(",")[0].strip()[:2].lower()
            if code in SUPPORTED_LANGUAGES:
                return code
    return default


@dataclass(frozen=True)
class SessionContext:
    user: UserResponse
    language: str

    @property
    def role(self) -> str:
        return self.user.role

    @property
    def capabilities(self) -> Capabilities:
        return capabilities_for(self.role)

    def can(self, action: str) -> bool:
        return action in self.capabilities.actions

    @property
    def is_staff(self) -> bool:
        return self.role in ("admin", "driver")
