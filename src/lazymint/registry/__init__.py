"""Registry components — allowlist commitment, roles, pause, treasury, assets, engine."""

from lazymint.registry.access import AccessControlRegistry
from lazymint.registry.allowlist import MembershipCommitment
from lazymint.registry.assets import AssetLedger
from lazymint.registry.engine import VoucherRegistry, check_payment
from lazymint.registry.pause import PauseController
from lazymint.registry.treasury import Treasury

__all__ = [
    "AccessControlRegistry",
    "AssetLedger",
    "MembershipCommitment",
    "PauseController",
    "Treasury",
    "VoucherRegistry",
    "check_payment",
]
