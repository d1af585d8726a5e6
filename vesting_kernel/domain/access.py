"""
AccessGate -- the authorization and pause capability consumed by the kernel.

The kernel never decides who may grant; it asks an AccessGate passed in
through the service constructors.  AccessControlService is the persisted
implementation; StaticAccessGate is an in-memory one for isolated use.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable


class AccessGate(ABC):
    """
    Authorized-issuer set plus pause switch.

    Contract:
        Both methods are side-effect free.
    """

    @abstractmethod
    def is_authorized_issuer(self, identity: str) -> bool:
        """True if identity may create grants."""
        ...

    @abstractmethod
    def is_paused(self) -> bool:
        """True while state-changing grant operations are halted."""
        ...


class StaticAccessGate(AccessGate):
    """In-memory gate with a fixed owner-free issuer set."""

    def __init__(self, authorized: Iterable[str] = (), paused: bool = False):
        self._authorized = set(authorized)
        self._paused = paused

    def is_authorized_issuer(self, identity: str) -> bool:
        return identity in self._authorized

    def is_paused(self) -> bool:
        return self._paused

    def authorize(self, identity: str) -> None:
        self._authorized.add(identity)

    def deauthorize(self, identity: str) -> None:
        self._authorized.discard(identity)

    def pause(self) -> None:
        self._paused = True

    def unpause(self) -> None:
        self._paused = False
