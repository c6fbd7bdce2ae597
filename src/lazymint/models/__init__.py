"""Core data models for the lazymint registry."""

from lazymint.models.registry import (
    AssetRecord,
    RegistryState,
    Role,
    UINT256_MAX,
    Voucher,
)

__all__ = [
    "AssetRecord",
    "RegistryState",
    "Role",
    "UINT256_MAX",
    "Voucher",
]
