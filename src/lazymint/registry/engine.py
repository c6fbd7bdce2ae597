"""Voucher registry — redemption and direct issuance engine.

Composes the allowlist commitment, access control, pause controller,
treasury and asset ledger behind one set of entry points, the way a
deployed contract would expose them.

Every mutating entry point runs under a single registry lock, so
operations are applied one at a time in a total order. Within an
operation all checks run first, then the operation's events are
appended to the event log, and only then is registry state written.
A raised error, whether a RegistryError or a failed log append,
means nothing changed.

Redemption pipeline:
    pause check → existence check → signer recovery →
    allowlist check → funds check → emit → commit

Direct issuance (minter role) skips recovery and the allowlist check
and names the issuer explicitly.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional, Sequence

from lazymint.addresses import ZERO_ADDRESS, canonical_address, canonical_hash
from lazymint.config import RegistryConfig
from lazymint.crypto.voucher import recover_signer, voucher_domain
from lazymint.errors import (
    BelowMinimumPrice,
    InsufficientFunds,
    NotAuthorized,
    RegistryError,
)
from lazymint.models.registry import (
    AssetRecord,
    RegistryState,
    Role,
    Voucher,
    require_uint256,
)
from lazymint.persistence.event_log import EventKind, EventLog, EventRecord
from lazymint.registry.access import AccessControlRegistry
from lazymint.registry.allowlist import MembershipCommitment
from lazymint.registry.assets import AssetLedger
from lazymint.registry.pause import PauseController
from lazymint.registry.treasury import Treasury

logger = logging.getLogger(__name__)


def check_payment(value: int, min_price: int, global_minimum: int) -> None:
    """Enforce the price floor max(min_price, global_minimum).

    When the payment falls short, BelowMinimumPrice is raised only if
    the voucher's own price is strictly above the global minimum, i.e.
    the voucher alone sets the floor. Otherwise the global minimum
    binds (ties included) and InsufficientFunds is raised.
    """
    floor = max(min_price, global_minimum)
    if value >= floor:
        return
    if min_price > global_minimum:
        raise BelowMinimumPrice(
            f"Value must be over the voucher minimum price: {value} < {min_price}"
        )
    raise InsufficientFunds(
        f"Insufficient funds to redeem: {value} < {floor}"
    )


class VoucherRegistry:
    """Lazy-minting registry with allowlisted voucher issuers.

    Usage:
        registry = VoucherRegistry(config, deployer=admin)
        registry.update_membership_root(admin, compute_root(artists))
        registry.set_global_minimum(admin, 10)
        record = registry.redeem(buyer, recipient, voucher, signature, proof, value=10)
        registry.withdraw_all(admin)
    """

    def __init__(
        self,
        config: RegistryConfig,
        deployer: str,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self._config = config
        self._deployer = canonical_address(deployer)
        self._access = AccessControlRegistry(self._deployer)
        self._membership = MembershipCommitment()
        self._pause = PauseController()
        self._treasury = Treasury(config.treasury_address)
        self._assets = AssetLedger(config.uri_prefix)
        self._minimum_price = config.initial_minimum_price
        self._event_log = event_log if event_log is not None else EventLog()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def config(self) -> RegistryConfig:
        return self._config

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def paused(self) -> bool:
        return self._pause.paused

    @property
    def membership_root(self) -> str:
        return self._membership.root

    @property
    def minimum_price(self) -> int:
        return self._minimum_price

    @property
    def treasury_balance(self) -> int:
        return self._treasury.balance

    @property
    def treasury_recipient(self) -> str:
        return self._treasury.recipient

    def domain(self) -> dict[str, Any]:
        """Signing domain for this deployment, rebuilt on every call."""
        return voucher_domain(
            self._config.chain_id,
            self._config.contract_address,
            name=self._config.domain_name,
            version=self._config.domain_version,
        )

    def has_role(self, role: Role | str, account: str) -> bool:
        return self._access.has_role(role, account)

    def get_role_admin(self, role: Role | str) -> Role:
        return self._access.get_role_admin(role)

    def verify_issuer(self, issuer: str, proof: Sequence[str]) -> bool:
        """Whether issuer is in the current allowlist according to proof."""
        return self._membership.verify(issuer, proof)

    def recover_issuer(self, voucher: Voucher, signature: str | bytes) -> str:
        """Signer of a voucher under this deployment's domain."""
        return recover_signer(voucher, signature, self.domain())

    def exists(self, asset_id: int) -> bool:
        return self._assets.exists(asset_id)

    def asset(self, asset_id: int) -> AssetRecord:
        return self._assets.record(asset_id)

    def owner_of(self, asset_id: int) -> str:
        return self._assets.owner_of(asset_id)

    def token_uri(self, asset_id: int) -> str:
        return self._assets.token_uri(asset_id)

    def balance_of(self, owner: str) -> int:
        return self._assets.balance_of(owner)

    # ------------------------------------------------------------------
    # Membership commitment
    # ------------------------------------------------------------------

    def update_membership_root(self, caller: str, new_root: str) -> None:
        """Replace the allowlist root. Maintenance role, not paused."""
        with self._lock:
            self._pause.require_not_paused()
            self._access.require_role(Role.MAINTENANCE, caller)
            root = canonical_hash(new_root)
            self._publish(caller, [(EventKind.MEMBERSHIP_ROOT_UPDATED, {
                "previous_root": self._membership.root,
                "root": root,
            })])
            self._membership.update(root)
            logger.info(f"Membership root updated to {root} by {caller}")

    # ------------------------------------------------------------------
    # Role administration (available while paused)
    # ------------------------------------------------------------------

    def grant_role(self, caller: str, role: Role | str, account: str) -> None:
        with self._lock:
            parsed = Role.parse(role)
            self._access.require_role(Role.ADMIN, caller)
            holder = canonical_address(account)
            if self._access.has_role(parsed, holder):
                return
            self._publish(caller, [(EventKind.ROLE_GRANTED, _role_payload(parsed, holder, caller))])
            self._access.grant_role(caller, parsed, holder)

    def revoke_role(self, caller: str, role: Role | str, account: str) -> None:
        with self._lock:
            parsed = Role.parse(role)
            self._access.require_role(Role.ADMIN, caller)
            holder = canonical_address(account)
            if not self._access.has_role(parsed, holder):
                return
            self._publish(caller, [(EventKind.ROLE_REVOKED, _role_payload(parsed, holder, caller))])
            self._access.revoke_role(caller, parsed, holder)

    def renounce_role(self, caller: str, role: Role | str, account: str) -> None:
        with self._lock:
            parsed = Role.parse(role)
            holder = self._access.require_self(caller, account)
            if not self._access.has_role(parsed, holder):
                return
            self._publish(caller, [(EventKind.ROLE_REVOKED, _role_payload(parsed, holder, caller))])
            self._access.renounce_role(caller, parsed, holder)

    def add_maintenance(self, caller: str, account: str) -> None:
        """Grant the maintenance role that may update the allowlist root."""
        self.grant_role(caller, Role.MAINTENANCE, account)

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def set_global_minimum(self, caller: str, value: int) -> None:
        """Set the registry-wide price floor for future redemptions."""
        with self._lock:
            self._access.require_role(Role.ADMIN, caller)
            require_uint256("value", value)
            previous = self._minimum_price
            self._publish(caller, [(EventKind.MINIMUM_PRICE_UPDATED, {
                "previous": previous,
                "minimum_price": value,
            })])
            self._minimum_price = value
            logger.info(f"Global minimum price set to {value} (was {previous})")

    # ------------------------------------------------------------------
    # Redemption and issuance
    # ------------------------------------------------------------------

    def redeem(
        self,
        caller: str,
        recipient: str,
        voucher: Voucher,
        signature: str | bytes,
        proof: Sequence[str],
        value: int = 0,
    ) -> AssetRecord:
        """Redeem an issuer's voucher, paying value, for recipient.

        Raises Paused, AlreadyMinted, InvalidSignature, NotAuthorized,
        InsufficientFunds or BelowMinimumPrice, with no state change.
        """
        caller = canonical_address(caller)
        require_uint256("value", value)
        with self._lock:
            try:
                self._pause.require_not_paused()
                self._assets.require_unminted(voucher.asset_id)
                issuer = self.recover_issuer(voucher, signature)
                if not self._membership.verify(issuer, proof):
                    raise NotAuthorized(f"Not authorized! {issuer} is not an allowlisted issuer")
                check_payment(value, voucher.min_price, self._minimum_price)
                target = self._check_commit(recipient, value)
            except RegistryError as exc:
                logger.warning(
                    f"Rejected redemption of asset {voucher.asset_id} by {caller}: "
                    f"{type(exc).__name__}: {exc.reason}"
                )
                raise
            return self._commit(caller, issuer, target, voucher.asset_id, voucher.uri, value)

    def direct_issue(
        self,
        caller: str,
        recipient: str,
        issuer: str,
        min_price: int,
        asset_id: int,
        uri: str,
        value: int = 0,
    ) -> AssetRecord:
        """Mint without a voucher on behalf of a trusted issuer. Minter role.

        min_price plays the voucher's price role in the funds check.
        """
        caller = canonical_address(caller)
        with self._lock:
            try:
                self._pause.require_not_paused()
                self._access.require_role(Role.MINTER, caller)
                require_uint256("asset_id", asset_id)
                require_uint256("min_price", min_price)
                require_uint256("value", value)
                creator = canonical_address(issuer)
                self._assets.require_unminted(asset_id)
                check_payment(value, min_price, self._minimum_price)
                target = self._check_commit(recipient, value)
            except RegistryError as exc:
                logger.warning(
                    f"Rejected direct issue of asset {asset_id} by {caller}: "
                    f"{type(exc).__name__}: {exc.reason}"
                )
                raise
            return self._commit(caller, creator, target, asset_id, uri, value)

    def _check_commit(self, recipient: str, value: int) -> str:
        """Last validation before any write: recipient and treasury headroom."""
        target = canonical_address(recipient)
        if target == ZERO_ADDRESS:
            raise ValueError("Cannot mint to the zero address")
        if not self._treasury.can_accept(value):
            raise ValueError("Treasury balance would overflow uint256")
        return target

    def _commit(
        self,
        caller: str,
        issuer: str,
        recipient: str,
        asset_id: int,
        uri: str,
        value: int,
    ) -> AssetRecord:
        events = [
            (EventKind.TRANSFER, {"from": sender, "to": receiver, "token_id": asset_id})
            for sender, receiver in AssetLedger.transfer_path(issuer, recipient)
        ]
        events.append((EventKind.REDEEM, {
            "issuer": issuer,
            "recipient": recipient,
            "token_id": asset_id,
            "amount": value,
        }))
        self._publish(caller, events)

        self._assets.mint_and_transfer(asset_id, issuer, recipient, uri)
        self._treasury.deposit(value)
        logger.info(f"Asset {asset_id} minted by {issuer} for {recipient}, paid {value}")
        return self._assets.record(asset_id)

    # ------------------------------------------------------------------
    # Treasury
    # ------------------------------------------------------------------

    def withdraw_all(self, caller: str) -> int:
        """Send the entire treasury balance to the fixed recipient.

        Returns the amount sent, which may be zero.
        """
        with self._lock:
            self._pause.require_not_paused()
            self._access.require_role(Role.ADMIN, caller)
            self._publish(caller, [(EventKind.WITHDRAW, {
                "recipient": self._treasury.recipient,
                "amount": self._treasury.balance,
            })])
            recipient, amount = self._treasury.withdraw_all()
            logger.info(f"Withdrew {amount} to {recipient}")
            return amount

    # ------------------------------------------------------------------
    # Pause controller
    # ------------------------------------------------------------------

    def pause(self, caller: str) -> None:
        with self._lock:
            self._access.require_role(Role.ADMIN, caller)
            self._pause.validate_transition(RegistryState.PAUSED)
            self._publish(caller, [(EventKind.PAUSED, {"account": canonical_address(caller)})])
            self._pause.pause()
            logger.info(f"Registry paused by {caller}")

    def unpause(self, caller: str) -> None:
        with self._lock:
            self._access.require_role(Role.ADMIN, caller)
            self._pause.validate_transition(RegistryState.ACTIVE)
            self._publish(caller, [(EventKind.UNPAUSED, {"account": canonical_address(caller)})])
            self._pause.unpause()
            logger.info(f"Registry unpaused by {caller}")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _publish(
        self,
        caller: str,
        events: list[tuple[EventKind, dict[str, Any]]],
    ) -> list[EventRecord]:
        """Append an operation's events ahead of its writes.

        Raises whatever the log raises, before any registry state changes.
        """
        return self._event_log.emit(canonical_address(caller), events)


def _role_payload(role: Role, account: str, caller: str) -> dict[str, str]:
    return {
        "role": role.role_id,
        "account": account,
        "sender": canonical_address(caller),
    }
