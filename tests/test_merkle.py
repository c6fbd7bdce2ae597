"""Tests for the Merkle allowlist — proves soundness, determinism and rejection."""

import pytest
from eth_account import Account
from eth_utils import keccak

from lazymint.crypto.merkle import (
    AllowlistTree,
    compute_root,
    generate_proof,
    hash_pair,
    leaf_hash,
    verify_proof,
)


def _addresses(n: int, offset: int = 1) -> list[str]:
    return [Account.from_key("0x" + f"{i:064x}").address for i in range(offset, offset + n)]


class TestAllowlistTree:
    def test_empty_set_commits_to_zero_hash(self) -> None:
        assert compute_root([]) == "0x" + "0" * 64

    def test_single_address_root_is_its_leaf(self) -> None:
        [a] = _addresses(1)
        assert compute_root([a]) == "0x" + leaf_hash(a).hex()
        assert generate_proof([a], a) == []

    def test_leaf_is_keccak_of_packed_address(self) -> None:
        [a] = _addresses(1)
        assert leaf_hash(a) == keccak(bytes.fromhex(a[2:]))

    def test_two_leaves_sorted_pair(self) -> None:
        a, b = _addresses(2)
        expected = keccak(b"".join(sorted([leaf_hash(a), leaf_hash(b)])))
        assert compute_root([a, b]) == "0x" + expected.hex()

    def test_deterministic_across_order(self) -> None:
        addresses = _addresses(5)
        assert compute_root(addresses) == compute_root(list(reversed(addresses)))

    def test_deduplicates_case_insensitively(self) -> None:
        addresses = _addresses(3)
        noisy = addresses + [addresses[0].lower(), addresses[1].upper().replace("0X", "0x")]
        tree = AllowlistTree(noisy)
        assert tree.leaf_count == 3
        assert tree.root == compute_root(addresses)

    def test_different_sets_different_roots(self) -> None:
        assert compute_root(_addresses(3)) != compute_root(_addresses(4))

    def test_membership_check(self) -> None:
        a, b, c = _addresses(3)
        tree = AllowlistTree([a, b])
        assert a in tree
        assert a.lower() in tree
        assert c not in tree

    def test_proof_for_non_member_raises(self) -> None:
        a, b, c = _addresses(3)
        with pytest.raises(ValueError, match="not in allowlist"):
            generate_proof([a, b], c)

    def test_invalid_address_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid address"):
            AllowlistTree(["0x1234"])


class TestProofVerification:
    @pytest.mark.parametrize("size", [1, 2, 3, 4, 5, 7, 8, 9, 16, 17])
    def test_every_member_verifies(self, size: int) -> None:
        addresses = _addresses(size)
        tree = AllowlistTree(addresses)
        for address in addresses:
            assert verify_proof(tree.root, address, tree.proof(address))

    def test_odd_node_is_promoted_without_sibling(self) -> None:
        addresses = _addresses(3)
        tree = AllowlistTree(addresses)
        lengths = sorted(len(tree.proof(a)) for a in addresses)
        assert lengths == [1, 2, 2]

    def test_non_member_does_not_verify(self) -> None:
        members = _addresses(3)
        outsider = _addresses(1, offset=10)[0]
        other_set = members + [outsider]
        proof = generate_proof(other_set, outsider)
        assert not verify_proof(compute_root(members), outsider, proof)

    def test_proof_against_stale_root_fails(self) -> None:
        old = _addresses(3)
        new = _addresses(3, offset=4)
        proof = generate_proof(old, old[0])
        assert verify_proof(compute_root(old), old[0], proof)
        assert not verify_proof(compute_root(new), old[0], proof)

    def test_proof_for_other_member_fails(self) -> None:
        a, b, c, d = _addresses(4)
        root = compute_root([a, b, c, d])
        assert not verify_proof(root, a, generate_proof([a, b, c, d], c))

    def test_tampered_proof_fails(self) -> None:
        addresses = _addresses(4)
        tree = AllowlistTree(addresses)
        proof = tree.proof(addresses[0])
        proof[0] = "0x" + "ab" * 32
        assert not verify_proof(tree.root, addresses[0], proof)

    def test_empty_proof_against_multi_member_root_fails(self) -> None:
        addresses = _addresses(3)
        assert not verify_proof(compute_root(addresses), addresses[0], [])

    def test_malformed_inputs_verify_false(self) -> None:
        addresses = _addresses(2)
        root = compute_root(addresses)
        assert not verify_proof(root, "not-an-address", [])
        assert not verify_proof(root, addresses[0], ["0x1234"])
        assert not verify_proof("0xzz", addresses[0], [])

    def test_verify_accepts_any_address_case(self) -> None:
        addresses = _addresses(4)
        tree = AllowlistTree(addresses)
        proof = tree.proof(addresses[2])
        assert verify_proof(tree.root, addresses[2].lower(), proof)

    def test_hash_pair_is_order_independent(self) -> None:
        a, b = leaf_hash(_addresses(1)[0]), leaf_hash(_addresses(1, offset=2)[0])
        assert hash_pair(a, b) == hash_pair(b, a)

    def test_non_iterable_proof_verifies_false(self) -> None:
        addresses = _addresses(2)
        assert not verify_proof(compute_root(addresses), addresses[0], 5)  # type: ignore[arg-type]
        assert not verify_proof(compute_root(addresses), addresses[0], [5])  # type: ignore[list-item]
