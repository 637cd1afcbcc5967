"""Monotonic token guard for out-of-order async responses.

Every issued request is stamped with a strictly increasing token. When its
response arrives, it is applied only if no newer request of the same kind
has been issued since.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..domain.errors import StaleResponseDiscard


@dataclass
class TokenGuard:
    """Latest-wins guard for one kind of request.

    Attributes:
        name: Request kind, used in discard messages
    """

    name: str
    _latest: int = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        """Stamp a new request and return its token."""
        self._latest += 1
        return self._latest

    def is_latest(self, token: int) -> bool:
        return token == self._latest

    def check(self, token: int) -> None:
        """Raise if a newer request superseded the one stamped with token.

        Raises:
            StaleResponseDiscard: If token is not the latest.
        """
        if token != self._latest:
            raise StaleResponseDiscard(
                f"Discarding stale {self.name} response",
                token=token,
                latest=self._latest,
            )

    def invalidate(self) -> None:
        """Supersede every request issued so far without issuing a new one."""
        self._latest += 1
