"""
Shared service plumbing.

Services receive the caller's Session and only ever ``flush()`` and open
``begin_nested()`` savepoints; committing is left to VestingService or to
whoever owns the session.  A failing grant, release or revoke therefore
discards its own partial writes without touching earlier work in the
same transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from vesting_kernel.db.base import Base
from vesting_kernel.models.grant import VestingGrant

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """Holds the session.  Read-only queries live in ``selectors/``."""

    def __init__(self, session: Session):
        self.session = session


def load_current_grant(
    session: Session,
    beneficiary: str,
    *,
    for_update: bool = False,
) -> VestingGrant | None:
    """
    Latest grant row for a beneficiary (active or revoked), or None.

    With for_update=True the row is locked (``SELECT ... FOR UPDATE`` on
    PostgreSQL) and refreshed from the database, so concurrent release
    and revoke of the same beneficiary serialize.
    """
    stmt = (
        select(VestingGrant)
        .where(VestingGrant.beneficiary == beneficiary)
        .order_by(VestingGrant.grant_seq.desc())
        .limit(1)
    )
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    return session.execute(stmt).scalar_one_or_none()
