"""Registry service — typed-result facade over the voucher registry.

Callers that prefer results to exceptions (the CLI, an API layer) go
through here. Every operation returns a ServiceResult. A registry
rejection becomes success=False with the error class name and reason
in errors; the registry itself is unchanged in that case. Argument
errors (ValueError) are reported the same way. Anything else is a bug
and propagates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from lazymint.config import RegistryConfig
from lazymint.errors import RegistryError
from lazymint.models.registry import AssetRecord, Role, Voucher
from lazymint.persistence.event_log import EventLog
from lazymint.registry.engine import VoucherRegistry


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


def _asset_data(record: AssetRecord) -> dict[str, Any]:
    return {
        "asset_id": record.asset_id,
        "owner": record.owner,
        "uri": record.uri,
        "creator": record.creator,
    }


class RegistryService:
    """Result-returning facade for a VoucherRegistry.

    Usage:
        service = RegistryService.create(config, deployer)
        result = service.redeem(buyer, recipient, voucher, signature, proof, value=10)
        if not result.success:
            print(result.errors)
    """

    def __init__(self, registry: VoucherRegistry) -> None:
        self._registry = registry

    @classmethod
    def create(
        cls,
        config: RegistryConfig,
        deployer: str,
        event_log_path: Optional[Path] = None,
    ) -> RegistryService:
        event_log = EventLog(storage_path=event_log_path)
        return cls(VoucherRegistry(config, deployer, event_log=event_log))

    @property
    def registry(self) -> VoucherRegistry:
        return self._registry

    def _run(self, op: Callable[[], dict[str, Any]]) -> ServiceResult:
        try:
            data = op()
        except RegistryError as exc:
            return ServiceResult(success=False, errors=[f"{type(exc).__name__}: {exc.reason}"])
        except ValueError as exc:
            return ServiceResult(success=False, errors=[f"ValueError: {exc}"])
        return ServiceResult(success=True, data=data)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def update_membership_root(self, caller: str, new_root: str) -> ServiceResult:
        def op() -> dict[str, Any]:
            self._registry.update_membership_root(caller, new_root)
            return {"root": self._registry.membership_root}
        return self._run(op)

    def grant_role(self, caller: str, role: Role | str, account: str) -> ServiceResult:
        def op() -> dict[str, Any]:
            self._registry.grant_role(caller, role, account)
            return {"role": Role.parse(role).value, "account": account, "granted": True}
        return self._run(op)

    def revoke_role(self, caller: str, role: Role | str, account: str) -> ServiceResult:
        def op() -> dict[str, Any]:
            self._registry.revoke_role(caller, role, account)
            return {"role": Role.parse(role).value, "account": account, "granted": False}
        return self._run(op)

    def renounce_role(self, caller: str, role: Role | str, account: str) -> ServiceResult:
        def op() -> dict[str, Any]:
            self._registry.renounce_role(caller, role, account)
            return {"role": Role.parse(role).value, "account": account, "granted": False}
        return self._run(op)

    def add_maintenance(self, caller: str, account: str) -> ServiceResult:
        return self.grant_role(caller, Role.MAINTENANCE, account)

    def redeem(
        self,
        caller: str,
        recipient: str,
        voucher: Voucher,
        signature: str | bytes,
        proof: Sequence[str],
        value: int = 0,
    ) -> ServiceResult:
        def op() -> dict[str, Any]:
            record = self._registry.redeem(caller, recipient, voucher, signature, proof, value)
            return {**_asset_data(record), "amount": value}
        return self._run(op)

    def direct_issue(
        self,
        caller: str,
        recipient: str,
        issuer: str,
        min_price: int,
        asset_id: int,
        uri: str,
        value: int = 0,
    ) -> ServiceResult:
        def op() -> dict[str, Any]:
            record = self._registry.direct_issue(
                caller, recipient, issuer, min_price, asset_id, uri, value,
            )
            return {**_asset_data(record), "amount": value}
        return self._run(op)

    def set_global_minimum(self, caller: str, value: int) -> ServiceResult:
        def op() -> dict[str, Any]:
            self._registry.set_global_minimum(caller, value)
            return {"minimum_price": self._registry.minimum_price}
        return self._run(op)

    def withdraw_all(self, caller: str) -> ServiceResult:
        def op() -> dict[str, Any]:
            amount = self._registry.withdraw_all(caller)
            return {"recipient": self._registry.treasury_recipient, "amount": amount}
        return self._run(op)

    def pause(self, caller: str) -> ServiceResult:
        def op() -> dict[str, Any]:
            self._registry.pause(caller)
            return {"paused": True}
        return self._run(op)

    def unpause(self, caller: str) -> ServiceResult:
        def op() -> dict[str, Any]:
            self._registry.unpause(caller)
            return {"paused": False}
        return self._run(op)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> dict[str, Any]:
        """Snapshot of the registry's observable state."""
        registry = self._registry
        return {
            "name": registry.config.name,
            "chain_id": registry.config.chain_id,
            "contract_address": registry.config.contract_address,
            "paused": registry.paused,
            "membership_root": registry.membership_root,
            "minimum_price": registry.minimum_price,
            "treasury_balance": registry.treasury_balance,
            "treasury_recipient": registry.treasury_recipient,
            "events": registry.event_log.count,
        }
