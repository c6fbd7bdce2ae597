"""Cryptographic primitives — Merkle allowlist, EIP-712 vouchers, root anchoring."""

from lazymint.crypto.merkle import AllowlistTree, compute_root, generate_proof, verify_proof
from lazymint.crypto.voucher import recover_signer, sign_voucher, voucher_domain

__all__ = [
    "AllowlistTree",
    "compute_root",
    "generate_proof",
    "verify_proof",
    "recover_signer",
    "sign_voucher",
    "voucher_domain",
]
