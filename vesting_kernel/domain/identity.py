"""
Identity -- validation of caller, issuer and beneficiary identities.

Identities are opaque strings (typically ``0x``-prefixed account
addresses).  The kernel only needs to tell a usable identity from a
null one: ``None``, the empty string, whitespace, or the zero address.

Hex addresses are case-insensitive, so they are stored and compared in
one canonical spelling: ``0x`` followed by lower-case digits.  Any other
identity is kept as given, minus surrounding whitespace.
"""

from __future__ import annotations

import re

from vesting_kernel.exceptions import InvalidIdentityError

ZERO_ADDRESS = "0x" + "0" * 40

_HEX_ADDRESS_RE = re.compile(r"^0x[0-9a-f]+$", re.IGNORECASE)
_ZERO_ADDRESS_RE = re.compile(r"^0x0+$", re.IGNORECASE)


def canonical_identity(identity: str | None) -> str | None:
    """
    Canonical spelling of ``identity``; non-strings pass through untouched.

    Never raises, so it is safe on caller identities that are only
    compared, never stored.
    """
    if not isinstance(identity, str):
        return identity
    stripped = identity.strip()
    if _HEX_ADDRESS_RE.match(stripped):
        return "0x" + stripped[2:].lower()
    return stripped


def is_null_identity(identity: str | None) -> bool:
    """True for None, blank strings and any all-zero ``0x`` address."""
    if identity is None or not isinstance(identity, str):
        return True
    stripped = identity.strip()
    if not stripped:
        return True
    return bool(_ZERO_ADDRESS_RE.match(stripped))


def require_identity(identity: str | None, role: str = "beneficiary") -> str:
    """
    Return the canonical identity, or raise if it is null.

    Raises:
        InvalidIdentityError: If the identity is null.
    """
    if is_null_identity(identity):
        raise InvalidIdentityError(identity, role=role)
    return canonical_identity(identity)
