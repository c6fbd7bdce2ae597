"""Merkle allowlist over issuer addresses.

Uses keccak-256 so roots and proofs match Solidity's OpenZeppelin
MerkleProof.verify. Each leaf is keccak256(abi.encodePacked(address)).
Leaves are sorted before tree construction and every pair is hashed
in sorted order, so the root depends only on the address set and a
proof carries no left/right flags.

An odd node at the end of a level is promoted unchanged to the next
level; it contributes no sibling to proofs passing through it.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from eth_utils import keccak

from lazymint.addresses import ZERO_HASH, canonical_address, canonical_hash


def leaf_hash(address: str) -> bytes:
    """Leaf for an address: keccak of its 20 raw bytes."""
    checksummed = canonical_address(address)
    return keccak(bytes.fromhex(checksummed[2:]))


def hash_pair(a: bytes, b: bytes) -> bytes:
    """Hash two nodes in sorted order."""
    if a <= b:
        return keccak(a + b)
    return keccak(b + a)


class AllowlistTree:
    """A Merkle tree over a deduplicated set of addresses.

    Usage:
        tree = AllowlistTree(["0xAbc...", "0xdef..."])
        root = tree.root
        proof = tree.proof("0xAbc...")
    """

    def __init__(self, addresses: Iterable[str]) -> None:
        self._members: set[str] = {canonical_address(a) for a in addresses}
        self._levels: list[list[bytes]] = []
        self._build()

    def _build(self) -> None:
        current = sorted(leaf_hash(a) for a in self._members)
        if not current:
            return
        self._levels = [current]
        while len(current) > 1:
            next_level: list[bytes] = []
            for i in range(0, len(current), 2):
                if i + 1 < len(current):
                    next_level.append(hash_pair(current[i], current[i + 1]))
                else:
                    next_level.append(current[i])  # promoted
            self._levels.append(next_level)
            current = next_level

    @property
    def members(self) -> frozenset[str]:
        return frozenset(self._members)

    @property
    def leaf_count(self) -> int:
        return len(self._members)

    @property
    def root(self) -> str:
        """Hex root. The empty set commits to the zero hash."""
        if not self._levels:
            return ZERO_HASH
        return "0x" + self._levels[-1][0].hex()

    def __contains__(self, address: str) -> bool:
        return canonical_address(address) in self._members

    def proof(self, address: str) -> list[str]:
        """Sibling path from the address's leaf to the root.

        Raises ValueError if the address is not in the set.
        """
        target = canonical_address(address)
        if target not in self._members:
            raise ValueError(f"Address not in allowlist: {target}")

        idx = self._levels[0].index(leaf_hash(target))
        path: list[str] = []
        for level in self._levels[:-1]:
            sibling_idx = idx ^ 1
            if sibling_idx < len(level):
                path.append("0x" + level[sibling_idx].hex())
            idx //= 2
        return path


def compute_root(addresses: Iterable[str]) -> str:
    """Membership root for a set of addresses."""
    return AllowlistTree(addresses).root


def generate_proof(addresses: Iterable[str], target: str) -> list[str]:
    """Proof for target against the root of addresses."""
    return AllowlistTree(addresses).proof(target)


def verify_proof(root: str, target: str, proof: Sequence[str]) -> bool:
    """Recompute the root from target's leaf and proof; compare with root.

    Malformed proofs, proof elements or addresses verify as False.
    """
    try:
        node = leaf_hash(target)
        expected = canonical_hash(root)
        for sibling in proof:
            node = hash_pair(node, bytes.fromhex(canonical_hash(sibling)[2:]))
    except (TypeError, ValueError):
        return False
    return "0x" + node.hex() == expected
