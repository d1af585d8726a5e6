"""
AccessControlService -- persisted owner, authorized-issuer set and pause switch.

Responsibility:
    The reference AccessGate.  The owner identity administers the set of
    identities allowed to create grants and the pause switch that halts
    grant creation and revocation.

Architecture position:
    Kernel > Services -- imperative shell.  Passed to VestingRegistry and
    RevocationHandler as their AccessGate capability.

Invariants enforced:
    - Only the owner may authorize, deauthorize, pause or unpause.
    - The owner is implicitly an authorized issuer.
    - The owner is fixed at initialization and never changes.

Failure modes:
    - UnauthorizedError: caller is not the owner, or the gate has not been
      initialized.
    - InvalidIdentityError: null identity passed to authorize/deauthorize.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from vesting_kernel.domain.access import AccessGate
from vesting_kernel.domain.clock import Clock, SystemClock
from vesting_kernel.domain.identity import canonical_identity, require_identity
from vesting_kernel.exceptions import UnauthorizedError
from vesting_kernel.logging_config import get_logger
from vesting_kernel.models.authorization import AccessControlState, AuthorizedIssuer
from vesting_kernel.services.base import BaseService

logger = get_logger("services.access_control")


class AccessControlService(BaseService[AuthorizedIssuer], AccessGate):
    """
    Owner-administered AccessGate backed by the database.

    Contract:
        initialize(owner) must run once before any owner-only operation.
        Until then no identity is authorized and the system is unpaused.

    Non-goals:
        - No role hierarchy and no ownership transfer.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _state(self) -> AccessControlState | None:
        return self.session.execute(
            select(AccessControlState)
            .where(AccessControlState.name == AccessControlState.DEFAULT_NAME)
        ).scalar_one_or_none()

    def initialize(self, owner: str) -> AccessControlState:
        """
        Record the owner.  Idempotent for the same owner.

        Raises:
            InvalidIdentityError: owner is null.
            UnauthorizedError: already initialized with a different owner.
        """
        owner = require_identity(owner, role="owner")
        state = self._state()
        if state is not None:
            if state.owner != owner:
                raise UnauthorizedError(
                    owner,
                    "initialize",
                    reason="access control is already owned by another identity",
                )
            return state

        state = AccessControlState(
            owner=owner,
            paused=False,
            updated_at=self._clock.now_utc(),
        )
        self.session.add(state)
        self.session.flush()
        logger.info("access_control_initialized", extra={"owner": owner})
        return state

    @property
    def owner(self) -> str | None:
        state = self._state()
        return state.owner if state else None

    def _require_owner(self, caller: str | None, operation: str) -> AccessControlState:
        caller = canonical_identity(caller)
        state = self._state()
        if state is None:
            raise UnauthorizedError(
                caller, operation, reason="access control has not been initialized"
            )
        if caller != state.owner:
            logger.warning(
                "access_denied",
                extra={"caller": caller, "operation": operation},
            )
            raise UnauthorizedError(caller, operation, reason="caller is not the owner")
        return state

    # ------------------------------------------------------------------
    # AccessGate
    # ------------------------------------------------------------------

    def is_authorized_issuer(self, identity: str) -> bool:
        state = self._state()
        identity = canonical_identity(identity)
        if state is None or identity is None:
            return False
        if identity == state.owner:
            return True
        row = self.session.execute(
            select(AuthorizedIssuer).where(AuthorizedIssuer.identity == identity)
        ).scalar_one_or_none()
        return bool(row and row.is_authorized)

    def is_paused(self) -> bool:
        state = self._state()
        return bool(state and state.paused)

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def _set_authorization(self, caller: str, identity: str, value: bool, operation: str) -> None:
        self._require_owner(caller, operation)
        identity = require_identity(identity, role="issuer")

        row = self.session.execute(
            select(AuthorizedIssuer).where(AuthorizedIssuer.identity == identity)
        ).scalar_one_or_none()
        now = self._clock.now_utc()
        if row is None:
            row = AuthorizedIssuer(identity=identity, is_authorized=value, updated_at=now)
            self.session.add(row)
        else:
            row.is_authorized = value
            row.updated_at = now
        self.session.flush()

        logger.info(
            "issuer_authorization_changed",
            extra={"identity": identity, "is_authorized": value},
        )

    def authorize_address(self, caller: str, identity: str) -> None:
        """Add identity to the authorized-issuer set."""
        self._set_authorization(caller, identity, True, "authorize_address")

    def deauthorize_address(self, caller: str, identity: str) -> None:
        """Remove identity from the authorized-issuer set (the owner stays implicit)."""
        self._set_authorization(caller, identity, False, "deauthorize_address")

    def _set_paused(self, caller: str, paused: bool, operation: str) -> None:
        state = self._require_owner(caller, operation)
        if state.paused == paused:
            return
        state.paused = paused
        state.updated_at = self._clock.now_utc()
        self.session.flush()
        logger.warning("system_paused" if paused else "system_unpaused", extra={"caller": caller})

    def pause(self, caller: str) -> None:
        self._set_paused(caller, True, "pause")

    def unpause(self, caller: str) -> None:
        self._set_paused(caller, False, "unpause")

    def authorized_issuers(self) -> list[str]:
        """Explicitly authorized identities, sorted (excludes the implicit owner)."""
        return list(
            self.session.execute(
                select(AuthorizedIssuer.identity)
                .where(AuthorizedIssuer.is_authorized.is_(True))
                .order_by(AuthorizedIssuer.identity)
            ).scalars()
        )
