"""Address and hash normalisation shared by every registry component."""

from __future__ import annotations

from eth_utils import is_address, is_hexstr, to_checksum_address

ZERO_ADDRESS = "0x" + "0" * 40
ZERO_HASH = "0x" + "0" * 64


def canonical_address(value: str) -> str:
    """Return the EIP-55 checksum form of an address.

    Lower-case and upper-case hex are accepted. Mixed case must already
    carry a valid checksum, as with any wallet.
    """
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return to_checksum_address(value)


def canonical_hash(value: str | bytes) -> str:
    """Return a 32-byte hash as lower-case 0x-prefixed hex."""
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str) and is_hexstr(value):
        raw = bytes.fromhex(value.removeprefix("0x").removeprefix("0X"))
    else:
        raise ValueError(f"Invalid hash: {value!r}")
    if len(raw) != 32:
        raise ValueError(f"Hash must be 32 bytes, got {len(raw)}")
    return "0x" + raw.hex()
