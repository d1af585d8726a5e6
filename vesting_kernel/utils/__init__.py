"""Utility functions for the vesting kernel."""

from vesting_kernel.utils.hashing import canonicalize_json, hash_payload, hash_vesting_event

__all__ = [
    "canonicalize_json",
    "hash_payload",
    "hash_vesting_event",
]
