"""Membership commitment — the current allowlist root.

Only the root is held; the address list lives off-path with whoever
maintains it. Updates replace the root wholesale and keep no history,
so proofs built against a superseded root stop verifying at once.
"""

from __future__ import annotations

from typing import Sequence

from lazymint.addresses import ZERO_HASH, canonical_hash
from lazymint.crypto.merkle import verify_proof


class MembershipCommitment:
    """Holder of the single current Merkle root."""

    def __init__(self, root: str = ZERO_HASH) -> None:
        self._root = canonical_hash(root)

    @property
    def root(self) -> str:
        return self._root

    def update(self, new_root: str) -> None:
        self._root = canonical_hash(new_root)

    def verify(self, account: str, proof: Sequence[str]) -> bool:
        """Check account's membership proof against the current root."""
        return verify_proof(self._root, account, proof)
