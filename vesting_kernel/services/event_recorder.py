"""
EventRecorder -- the Grant / Release / Revoke notification log.

Responsibility:
    Appends one hash-chained VestingEvent per notification and validates
    the chain on demand for tamper detection.

Architecture position:
    Kernel > Services -- imperative shell, called by VestingRegistry,
    ReleaseCoordinator and RevocationHandler inside their savepoints, so a
    notification exists iff the operation that emitted it committed.

Invariants enforced:
    - Sequence monotonicity via SequenceService.
    - Chain integrity: ``hash = H(event_type | beneficiary | amount |
      grant_id | payload_hash | prev_hash)``.
    - Append-only: VestingEvent rows are protected by ORM listeners.

Failure modes:
    - EventChainBrokenError from validate_chain() when a stored hash, a
      payload hash or a prev_hash link does not match.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from vesting_kernel.domain.clock import Clock, SystemClock
from vesting_kernel.exceptions import EventChainBrokenError
from vesting_kernel.logging_config import get_logger
from vesting_kernel.models.grant import VestingGrant
from vesting_kernel.models.vesting_event import VestingEvent, VestingEventType
from vesting_kernel.services.sequence_service import SequenceService
from vesting_kernel.utils.hashing import hash_payload, hash_vesting_event

logger = get_logger("services.event_recorder")


class EventRecorder:
    """
    Service for creating and validating vesting notifications.

    Guarantees:
        - Every event's ``hash`` is a deterministic function of its key
          fields and its predecessor's hash.
        - Amounts in payloads are decimal strings.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT deliver notifications anywhere; consumers read the log.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()
        self._sequence_service = SequenceService(session)

    def _get_last_hash(self) -> str | None:
        last_event = self._session.execute(
            select(VestingEvent)
            .order_by(VestingEvent.seq.desc())
            .limit(1)
        ).scalar_one_or_none()

        return last_event.hash if last_event else None

    def _create_event(
        self,
        event_type: VestingEventType,
        grant: VestingGrant,
        amount: int,
        issuer: str | None,
        payload: dict[str, Any],
    ) -> VestingEvent:
        seq = self._sequence_service.next_value(SequenceService.VESTING_EVENT)
        prev_hash = self._get_last_hash()

        computed_payload_hash = hash_payload(payload)
        event_hash = hash_vesting_event(
            event_type=event_type.value,
            beneficiary=grant.beneficiary,
            amount=amount,
            grant_id=str(grant.id),
            payload_hash=computed_payload_hash,
            prev_hash=prev_hash,
        )

        vesting_event = VestingEvent(
            seq=seq,
            event_type=event_type.value,
            issuer=issuer,
            beneficiary=grant.beneficiary,
            amount=amount,
            grant_id=grant.id,
            occurred_at=self._clock.now_utc(),
            payload=payload,
            payload_hash=computed_payload_hash,
            prev_hash=prev_hash,
            hash=event_hash,
        )
        self._session.add(vesting_event)
        self._session.flush()

        logger.info(
            "vesting_event_recorded",
            extra={
                "event_type": event_type.value,
                "beneficiary": grant.beneficiary,
                "amount": str(amount),
                "seq": seq,
            },
        )
        return vesting_event

    def record_grant(self, grant: VestingGrant) -> VestingEvent:
        """Grant(issuer, beneficiary, amount)."""
        return self._create_event(
            VestingEventType.GRANT,
            grant,
            grant.granted_amount,
            grant.issuer,
            payload={
                "issuer": grant.issuer,
                "beneficiary": grant.beneficiary,
                "amount": str(grant.granted_amount),
                "start_time": grant.start_time,
                "cliff_time": grant.cliff_time,
                "end_time": grant.end_time,
                "revocable": grant.revocable,
            },
        )

    def record_release(self, grant: VestingGrant, amount: int) -> VestingEvent:
        """Release(beneficiary, amount)."""
        return self._create_event(
            VestingEventType.RELEASE,
            grant,
            amount,
            None,
            payload={
                "beneficiary": grant.beneficiary,
                "amount": str(amount),
                "total_released": str(grant.released_amount),
            },
        )

    def record_revoke(self, grant: VestingGrant, remaining_amount: int) -> VestingEvent:
        """Revoke(issuer, beneficiary, remaining_amount)."""
        return self._create_event(
            VestingEventType.REVOKE,
            grant,
            remaining_amount,
            grant.issuer,
            payload={
                "issuer": grant.issuer,
                "beneficiary": grant.beneficiary,
                "remaining_amount": str(remaining_amount),
                "released_amount": str(grant.released_amount),
            },
        )

    def validate_chain(self) -> bool:
        """
        Validate the entire notification chain.

        Postconditions:
            - Returns True only if every event's payload hash and hash
              match the recomputed values and every prev_hash matches its
              predecessor's hash.

        Raises:
            EventChainBrokenError: At the first event that fails.
        """
        events = self._session.execute(
            select(VestingEvent).order_by(VestingEvent.seq)
        ).scalars().all()

        previous: VestingEvent | None = None
        for event in events:
            expected_prev = previous.hash if previous is not None else None
            if event.prev_hash != expected_prev:
                logger.critical(
                    "vesting_event_chain_broken",
                    extra={"seq": event.seq, "check": "prev_hash"},
                )
                raise EventChainBrokenError(
                    str(event.id),
                    expected_prev or "None",
                    event.prev_hash or "None",
                )

            expected_payload_hash = hash_payload(event.payload or {})
            if event.payload_hash != expected_payload_hash:
                logger.critical(
                    "vesting_event_chain_broken",
                    extra={"seq": event.seq, "check": "payload_hash"},
                )
                raise EventChainBrokenError(
                    str(event.id),
                    expected_payload_hash,
                    event.payload_hash,
                )

            expected_hash = hash_vesting_event(
                event_type=event.event_type,
                beneficiary=event.beneficiary,
                amount=event.amount,
                grant_id=str(event.grant_id),
                payload_hash=event.payload_hash,
                prev_hash=event.prev_hash,
            )
            if event.hash != expected_hash:
                logger.critical(
                    "vesting_event_chain_broken",
                    extra={"seq": event.seq, "check": "hash"},
                )
                raise EventChainBrokenError(
                    str(event.id),
                    expected_hash,
                    event.hash,
                )

            previous = event

        logger.info("vesting_event_chain_valid", extra={"event_count": len(events)})
        return True
