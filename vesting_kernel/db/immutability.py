"""
Flush-time guards on grant and notification rows.

The services already refuse illegal transitions.  These SQLAlchemy
``before_update`` / ``before_delete`` listeners are the second line: any
ORM write that would rewrite a schedule, roll ``released_amount`` back,
push it past ``granted_amount``, revive a revoked grant, or edit the
append-only tables aborts the flush with ImmutabilityViolationError
before SQL is emitted.

    VestingGrant            schedule columns frozen; released_amount only
                            grows and never exceeds granted_amount; a
                            revoked row is read-only; never deleted
    VestingEvent            insert-only
    BeneficiaryLookupEntry  insert-only

Raw SQL bypasses these listeners; the hash chain on VestingEvent is what
catches that (see EventRecorder.validate_chain).
"""

from sqlalchemy import event, inspect
from sqlalchemy.orm.attributes import get_history

from vesting_kernel.exceptions import ImmutabilityViolationError
from vesting_kernel.invariants import KernelInvariant
from vesting_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _reject(target, operation: str, invariant: KernelInvariant, reason: str):
    entity_type = type(target).__name__
    entity_id = str(target.id)
    logger.error(
        "immutability_violation_blocked",
        extra={
            "invariant": invariant.value,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
    )


def _value_before_flush(target, attr: str):
    history = get_history(target, attr)
    return history.deleted[0] if history.deleted else getattr(target, attr)


def _guard_grant_update(mapper, connection, target):
    """
    Legal grant updates: released_amount grows (staying within
    granted_amount) while active, or active flips True -> False with
    revoked_at.
    """
    from vesting_kernel.models.grant import GRANT_FROZEN_FIELDS

    changed = sorted(a.key for a in inspect(target).attrs if a.history.has_changes())
    if not changed:
        return

    if _value_before_flush(target, "active") is False:
        _reject(
            target,
            "UPDATE",
            KernelInvariant.REVOCATION_FINAL,
            f"Grant is revoked; cannot modify {', '.join(changed)}",
        )

    frozen = [name for name in changed if name in GRANT_FROZEN_FIELDS]
    if frozen:
        _reject(
            target,
            "UPDATE",
            KernelInvariant.SCHEDULE_FROZEN,
            f"Grant field(s) {', '.join(frozen)} are immutable",
        )

    if "released_amount" not in changed:
        return
    before = _value_before_flush(target, "released_amount")
    after = target.released_amount
    if after < before:
        _reject(
            target,
            "UPDATE",
            KernelInvariant.RELEASE_MONOTONIC,
            f"released_amount cannot decrease ({before} -> {after})",
        )
    if after > target.granted_amount:
        _reject(
            target,
            "UPDATE",
            KernelInvariant.RELEASE_CEILING,
            f"released_amount {after} exceeds granted_amount {target.granted_amount}",
        )


def _guard_grant_delete(mapper, connection, target):
    _reject(
        target,
        "DELETE",
        KernelInvariant.REVOCATION_FINAL,
        "Grants are never deleted; revoke instead",
    )


def _insert_only(reason: str):
    def _guard_update(mapper, connection, target):
        _reject(target, "UPDATE", KernelInvariant.APPEND_ONLY, f"{reason}; cannot be modified")

    def _guard_delete(mapper, connection, target):
        _reject(target, "DELETE", KernelInvariant.APPEND_ONLY, f"{reason}; cannot be deleted")

    return _guard_update, _guard_delete


_event_update, _event_delete = _insert_only("Vesting events are immutable")
_lookup_update, _lookup_delete = _insert_only("Beneficiary lookup entries are append-only")


def _listeners():
    from vesting_kernel.models.beneficiary import BeneficiaryLookupEntry
    from vesting_kernel.models.grant import VestingGrant
    from vesting_kernel.models.vesting_event import VestingEvent

    return (
        (VestingGrant, "before_update", _guard_grant_update),
        (VestingGrant, "before_delete", _guard_grant_delete),
        (VestingEvent, "before_update", _event_update),
        (VestingEvent, "before_delete", _event_delete),
        (BeneficiaryLookupEntry, "before_update", _lookup_update),
        (BeneficiaryLookupEntry, "before_delete", _lookup_delete),
    )


def register_immutability_listeners():
    """Attach the guards.  Safe to call repeatedly."""
    for model, name, fn in _listeners():
        if not event.contains(model, name, fn):
            event.listen(model, name, fn)


def unregister_immutability_listeners():
    """Detach the guards.  Tests use this to plant corrupt rows."""
    for model, name, fn in _listeners():
        if event.contains(model, name, fn):
            event.remove(model, name, fn)


def immutability_listeners_registered() -> bool:
    return all(event.contains(model, name, fn) for model, name, fn in _listeners())
