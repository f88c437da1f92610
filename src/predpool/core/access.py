"""Capability checks - oracle and maintainer roles as injectable membership sets."""

from __future__ import annotations

from typing import Iterable, Protocol

import structlog

from predpool.core.errors import PredPoolError

log = structlog.get_logger(__name__)


class Role(Protocol):
    """Anything that can answer whether an identity holds a capability."""

    def has(self, identity: str) -> bool: ...


class RoleSet:
    """In-memory role backed by a set of identities."""

    def __init__(self, name: str, members: Iterable[str] = ()) -> None:
        self.name = name
        self._members: set[str] = set(members)

    def has(self, identity: str) -> bool:
        return identity in self._members

    def grant(self, identity: str) -> None:
        self._members.add(identity)
        log.info("role_granted", role=self.name, identity=identity)

    def revoke(self, identity: str) -> None:
        self._members.discard(identity)
        log.info("role_revoked", role=self.name, identity=identity)

    def members(self) -> list[str]:
        return sorted(self._members)


def require(role: Role, identity: str, error: type[PredPoolError]) -> None:
    """Raise ``error`` unless identity holds role."""
    if not role.has(identity):
        raise error(identity=identity)
