"""Registry error taxonomy.

Every rejected registry operation raises one of these. A raised error
means the operation applied no state change at all.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for every rejected registry operation."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class Unauthorized(RegistryError):
    """Caller lacks the role the operation requires."""


class InvalidState(RegistryError):
    """Operation is not allowed in the registry's current pause state."""


class Paused(InvalidState):
    """Operation is blocked because the registry is paused."""


class AlreadyMinted(RegistryError):
    """An asset record already exists for the asset id."""


class NonexistentAsset(RegistryError):
    """No asset record exists for the asset id."""


class InvalidSignature(RegistryError):
    """Signature bytes are malformed and no signer can be recovered."""


class NotAuthorized(RegistryError):
    """Recovered issuer is not a member of the current allowlist."""


class InsufficientFunds(RegistryError):
    """Payment is below the effective price floor."""


class BelowMinimumPrice(RegistryError):
    """Payment is below the voucher's own minimum price."""
