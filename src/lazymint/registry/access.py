"""Access control registry — role -> holder set, administered by ADMIN.

Roles are independent capability sets. Holding one role grants
nothing under another; the only cross-role power is the admin's
ability to grant and revoke every role, including ADMIN itself.
"""

from __future__ import annotations

import logging
from typing import Iterable

from lazymint.addresses import canonical_address
from lazymint.errors import Unauthorized
from lazymint.models.registry import Role

logger = logging.getLogger(__name__)


class AccessControlRegistry:
    """Role membership with admin-gated grant and revoke.

    Usage:
        access = AccessControlRegistry(deployer)   # deployer holds every role
        access.grant_role(deployer, Role.MINTER, minter)
        access.require_role(Role.MINTER, minter)
    """

    def __init__(self, initial_holder: str, roles: Iterable[Role] = tuple(Role)) -> None:
        holder = canonical_address(initial_holder)
        self._holders: dict[Role, set[str]] = {role: set() for role in Role}
        for role in roles:
            self._holders[role].add(holder)

    def has_role(self, role: Role | str, account: str) -> bool:
        return canonical_address(account) in self._holders[Role.parse(role)]

    def holders(self, role: Role | str) -> frozenset[str]:
        return frozenset(self._holders[Role.parse(role)])

    @staticmethod
    def get_role_admin(role: Role | str) -> Role:
        """Every role is administered by ADMIN."""
        Role.parse(role)
        return Role.ADMIN

    def require_role(self, role: Role | str, account: str) -> None:
        """Raise Unauthorized unless account holds role."""
        parsed = Role.parse(role)
        if not self.has_role(parsed, account):
            raise Unauthorized(
                f"account {canonical_address(account).lower()} is missing role {parsed.role_id}"
            )

    @staticmethod
    def require_self(caller: str, account: str) -> str:
        """Raise Unauthorized unless caller is account. Returns the account."""
        holder = canonical_address(account)
        if canonical_address(caller) != holder:
            raise Unauthorized("can only renounce roles for self")
        return holder

    def grant_role(self, caller: str, role: Role | str, account: str) -> bool:
        """Grant role to account. Returns False if it was already held."""
        parsed = Role.parse(role)
        self.require_role(Role.ADMIN, caller)
        holder = canonical_address(account)
        if holder in self._holders[parsed]:
            return False
        self._holders[parsed].add(holder)
        logger.info(f"Granted {parsed.value} to {holder}")
        return True

    def revoke_role(self, caller: str, role: Role | str, account: str) -> bool:
        """Revoke role from account. Returns False if it was not held."""
        parsed = Role.parse(role)
        self.require_role(Role.ADMIN, caller)
        holder = canonical_address(account)
        if holder not in self._holders[parsed]:
            return False
        self._holders[parsed].discard(holder)
        logger.info(f"Revoked {parsed.value} from {holder}")
        return True

    def renounce_role(self, caller: str, role: Role | str, account: str) -> bool:
        """Drop a role the caller holds. Callers may only renounce for themselves."""
        parsed = Role.parse(role)
        holder = self.require_self(caller, account)
        if holder not in self._holders[parsed]:
            return False
        self._holders[parsed].discard(holder)
        logger.info(f"{holder} renounced {parsed.value}")
        return True
