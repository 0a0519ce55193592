"""Static operator access control."""
from __future__ import annotations

from collections.abc import Iterable


class StaticAccessControl:
    """Authorize a fixed set of operator identities."""

    def __init__(self, operators: Iterable[str]) -> None:
        self._operators = frozenset(op for op in operators if op)

    @property
    def operators(self) -> frozenset[str]:
        return self._operators

    def is_authorized_operator(self, identity: str) -> bool:
        return identity in self._operators
