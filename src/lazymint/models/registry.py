"""Registry models — vouchers, asset records, roles and pause state.

Amounts and asset ids are Solidity uint256 values: plain ints in
[0, 2**256). Addresses are stored in checksum form.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from eth_utils import keccak

from lazymint.addresses import ZERO_HASH, canonical_address

UINT256_MAX = 2**256 - 1


def require_uint256(name: str, value: int) -> int:
    """Reject anything that would not fit a uint256 slot."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"{name} out of uint256 range: {value}")
    return value


class Role(str, enum.Enum):
    """Registry roles, named after their on-chain identifiers."""
    ADMIN = "DEFAULT_ADMIN_ROLE"
    MINTER = "MINTER_ROLE"
    MAINTENANCE = "CRON_JOB"

    @property
    def role_id(self) -> str:
        """bytes32 identifier: zero for the admin role, keccak of the name otherwise."""
        if self is Role.ADMIN:
            return ZERO_HASH
        return "0x" + keccak(text=self.value).hex()

    @classmethod
    def parse(cls, value: "Role | str") -> "Role":
        """Accept a Role, its name, its on-chain label or its bytes32 id."""
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown role: {value!r}")
        for role in cls:
            if value in (role.name, role.value) or value.lower() == role.role_id:
                return role
        raise ValueError(f"Unknown role: {value!r}")


class RegistryState(str, enum.Enum):
    """Pause controller state."""
    ACTIVE = "active"
    PAUSED = "paused"


@dataclass(frozen=True)
class Voucher:
    """An issuer's off-chain authorisation to mint one asset.

    Only its effects are persisted. The asset id is consumed by the
    first successful redemption.
    """
    asset_id: int
    min_price: int
    uri: str

    def __post_init__(self) -> None:
        require_uint256("asset_id", self.asset_id)
        require_uint256("min_price", self.min_price)
        if not isinstance(self.uri, str):
            raise ValueError("uri must be a string")

    def message(self) -> dict[str, int | str]:
        """Typed-data message body, keyed by the struct's field names."""
        return {"tokenId": self.asset_id, "minPrice": self.min_price, "uri": self.uri}


@dataclass
class AssetRecord:
    """A minted asset. Only the owner changes after creation."""
    asset_id: int
    owner: str
    uri: str
    creator: str

    def __post_init__(self) -> None:
        self.owner = canonical_address(self.owner)
        self.creator = canonical_address(self.creator)
