"""EIP-712 voucher encoding, signing and signer recovery.

A voucher is signed as typed data under a domain bound to one
deployment: {name, version, chainId, verifyingContract}. Changing the
chain or the registry address changes the digest, so a signature
cannot be replayed against another deployment.

Recovery and authorisation are separate steps. recover_signer only
fails on malformed signature bytes. A well-formed signature from the
wrong key recovers some other address, which the allowlist check
rejects later.
"""

from __future__ import annotations

from typing import Any

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import keccak

from lazymint.addresses import canonical_address
from lazymint.errors import InvalidSignature
from lazymint.models.registry import Voucher, require_uint256

DOMAIN_NAME = "PoignartVoucher"
DOMAIN_VERSION = "1"
SIGNATURE_LENGTH = 65

VOUCHER_TYPES: dict[str, list[dict[str, str]]] = {
    "NFTVoucher": [
        {"name": "tokenId", "type": "uint256"},
        {"name": "minPrice", "type": "uint256"},
        {"name": "uri", "type": "string"},
    ],
}


def voucher_domain(
    chain_id: int,
    verifying_contract: str,
    name: str = DOMAIN_NAME,
    version: str = DOMAIN_VERSION,
) -> dict[str, Any]:
    """Build the EIP-712 domain for a registry deployment."""
    return {
        "name": name,
        "version": version,
        "chainId": require_uint256("chain_id", chain_id),
        "verifyingContract": canonical_address(verifying_contract),
    }


def encode_voucher(voucher: Voucher, domain: dict[str, Any]) -> SignableMessage:
    """EIP-712 signable message for a voucher under a domain."""
    return encode_typed_data(
        domain_data=domain,
        message_types=VOUCHER_TYPES,
        message_data=voucher.message(),
    )


def voucher_digest(voucher: Voucher, domain: dict[str, Any]) -> bytes:
    """The 32-byte hash a signer actually signs."""
    signable = encode_voucher(voucher, domain)
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


def sign_voucher(private_key: str | bytes, voucher: Voucher, domain: dict[str, Any]) -> bytes:
    """Sign a voucher as an issuer. Returns 65 bytes r || s || v."""
    signed = Account.sign_message(encode_voucher(voucher, domain), private_key)
    return bytes(signed.signature)


def _signature_bytes(signature: str | bytes) -> bytes:
    if isinstance(signature, (bytes, bytearray)):
        raw = bytes(signature)
    elif isinstance(signature, str):
        try:
            raw = bytes.fromhex(signature.removeprefix("0x").removeprefix("0X"))
        except ValueError:
            raise InvalidSignature("Signature is not valid hex") from None
    else:
        raise InvalidSignature(f"Unsupported signature type: {type(signature).__name__}")

    if len(raw) != SIGNATURE_LENGTH:
        raise InvalidSignature(
            f"Invalid signature length: expected {SIGNATURE_LENGTH} bytes, got {len(raw)}"
        )
    if raw[-1] not in (0, 1, 27, 28):
        raise InvalidSignature(f"Invalid signature recovery id: {raw[-1]}")
    return raw


def recover_signer(
    voucher: Voucher,
    signature: str | bytes,
    domain: dict[str, Any],
) -> str:
    """Recover the checksum address that signed a voucher.

    Raises InvalidSignature when the bytes cannot be a signature.
    """
    raw = _signature_bytes(signature)
    try:
        return Account.recover_message(encode_voucher(voucher, domain), signature=raw)
    except (BadSignature, ValidationError, ValueError) as exc:
        raise InvalidSignature(f"Unrecoverable signature: {exc}") from exc
